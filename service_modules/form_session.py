"""
Form Session - transient create/edit state for one record.
"""
import copy
from typing import List, Optional

from .upload_helper import is_remote_url


class FormSession:
    """Holds the record being edited (None = create mode) and the current field values."""

    def __init__(self, defaults: dict, media_fields: List[str] = None):
        self.defaults = copy.deepcopy(defaults)
        self.media_fields = list(media_fields or [])
        self.record_id: Optional[str] = None
        self.original: Optional[dict] = None
        self.values: dict = copy.deepcopy(self.defaults)

    @property
    def is_editing(self) -> bool:
        return self.record_id is not None

    def begin_create(self):
        self.reset()

    def begin_edit(self, record: dict):
        # Copy every field verbatim, including already-uploaded media URLs
        self.record_id = record["id"]
        self.original = copy.deepcopy(record)
        self.values = copy.deepcopy(self.defaults)
        for key, value in record.items():
            if key != "id":
                self.values[key] = copy.deepcopy(value)

    def set(self, field: str, value):
        self.values[field] = value

    def update(self, values: dict):
        for key, value in values.items():
            self.set(key, value)

    def get(self, field: str, default=None):
        return self.values.get(field, default)

    def pending_media(self) -> List[str]:
        """Media fields still pointing at a local reference."""
        return [
            f for f in self.media_fields
            if self.values.get(f) and not is_remote_url(self.values[f])
        ]

    def reset(self):
        self.record_id = None
        self.original = None
        self.values = copy.deepcopy(self.defaults)
