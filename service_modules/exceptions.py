"""
Admin error taxonomy.

Every error carries a static title and a human-readable message so it can be
shown to the operator as a single blocking notice.
"""


class AdminError(Exception):
    title = "Error"

    def __init__(self, message: str, title: str = None):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title

    def to_dict(self) -> dict:
        return {"title": self.title, "message": self.message}


class ValidationError(AdminError):
    """Local, pre-network failure. Always recoverable by editing the form."""


class UploadError(AdminError):
    """Media upload failed. Nothing was written."""


class WriteError(AdminError):
    """Document store rejected a create, update or delete."""


class SubscriptionError(AdminError):
    """Live read failed. Surfaced passively; other operations keep working."""


class DocumentNotFound(LookupError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id
