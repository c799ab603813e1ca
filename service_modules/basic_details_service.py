"""
Basic Details Service - the gym's singleton contact record (phone, email, address).
"""
import logging

from models import Notice
from .document_store import DocumentStore, Subscription
from .entities import iso_now
from .exceptions import AdminError, WriteError
from .sync_controller import SubmitResult, SyncState
from . import validation as v

logger = logging.getLogger("fitmaker_admin")

COLLECTION = "basic_details"
GYM_DETAILS_ID = "gym_details"

RULES = [
    v.required(["phone", "email", "address"]),
    v.email_format("email"),
    v.min_length("phone", v.MIN_PHONE_LENGTH),
]

EMPTY_DETAILS = {"phone": "", "email": "", "address": ""}


def _with_defaults(doc) -> dict:
    details = dict(EMPTY_DETAILS)
    if doc:
        details.update({k: doc.get(k) or "" for k in EMPTY_DETAILS})
        details["updatedAt"] = doc.get("updatedAt")
    return details


class BasicDetailsService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def get(self) -> dict:
        return _with_defaults(await self.store.get(COLLECTION, GYM_DETAILS_ID))

    def subscribe(self, on_snapshot, on_error=None) -> Subscription:
        return self.store.subscribe_document(
            COLLECTION, GYM_DETAILS_ID,
            lambda doc: on_snapshot(_with_defaults(doc)),
            on_error,
        )

    async def save(self, values: dict) -> SubmitResult:
        try:
            v.validate(RULES, values)
        except AdminError as e:
            return SubmitResult(False, SyncState.FAILED, Notice(**e.to_dict()), error=e)

        data = {
            "phone": str(values["phone"]).strip(),
            "email": str(values["email"]).strip(),
            "address": str(values["address"]).strip(),
            "updatedAt": iso_now(),
        }
        try:
            await self.store.set(COLLECTION, GYM_DETAILS_ID, data, merge=True)
        except Exception as e:
            logger.error(f"Error saving details: {e}")
            error = WriteError("Failed to update details.")
            return SubmitResult(False, SyncState.FAILED, Notice(**error.to_dict()), error=error)

        logger.info("Basic details updated")
        return SubmitResult(True, SyncState.SETTLED,
                            Notice(title="Success", message="Basic details updated successfully!"),
                            record_id=GYM_DETAILS_ID)
