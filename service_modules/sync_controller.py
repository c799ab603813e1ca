"""
Collection Sync Controller - one generic controller per managed collection.

Composes a live subscriber (the list), a form session (the modal), the
entity's validation rules and the write gateway. submit() is the
reconciliation loop:

    idle -> validating -> [uploading] -> writing -> settled
                 \\             \\            \\
                  +-------------+------------+--> failed

Every failure produces exactly one Notice and leaves the form session as it
was, so the operator can correct or simply resubmit. Nothing is retried
automatically. A successful write resets the session but does not touch the
local mirror; the list changes when the subscription delivers its next
snapshot.
"""
import logging
from enum import Enum
from typing import List, Optional

from models import Notice
from .document_store import DocumentStore
from .entities import EntityConfig
from .exceptions import AdminError, ValidationError, WriteError, DocumentNotFound
from .form_session import FormSession
from .subscriber import LiveCollectionSubscriber
from .validation import ValidationContext, validate, add_list_item, remove_list_item
from .write_gateway import RemoteWriteGateway

logger = logging.getLogger("fitmaker_admin")


class SyncState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    WRITING = "writing"
    SETTLED = "settled"
    FAILED = "failed"


BUSY_STATES = (SyncState.VALIDATING, SyncState.UPLOADING, SyncState.WRITING)


class SubmitResult:
    def __init__(self, ok: bool, state: SyncState, notice: Notice,
                 record_id: Optional[str] = None, error: Optional[AdminError] = None):
        self.ok = ok
        self.state = state
        self.notice = notice
        self.record_id = record_id
        self.error = error

    def to_dict(self) -> dict:
        return {
            "status": "success" if self.ok else "error",
            "id": self.record_id,
            "notice": self.notice.model_dump(),
        }


class CollectionSyncController:
    def __init__(self, entity: EntityConfig, store: DocumentStore, gateway: RemoteWriteGateway):
        self.entity = entity
        self.gateway = gateway
        self.subscriber = LiveCollectionSubscriber(
            store,
            entity.collection,
            order=entity.order,
            normalize=entity.normalize,
            fetch_error=entity.messages["fetch_failed"],
        )
        self.session = FormSession(entity.defaults, entity.media_fields)
        self.state = SyncState.IDLE
        self.history: List[tuple] = []
        self.modal_open = False

    # ==================== LIST ====================

    @property
    def records(self) -> List[dict]:
        return self.subscriber.records

    @property
    def at_capacity(self) -> bool:
        cap = self.entity.max_records
        return cap is not None and len(self.records) >= cap

    def open(self):
        """async with controller.open(): ... keeps the list live for the block."""
        return self.subscriber.open()

    async def ready(self):
        await self.subscriber.wait_loaded()

    def find(self, record_id: str) -> Optional[dict]:
        for record in self.records:
            if record["id"] == record_id:
                return record
        return None

    # ==================== FORM SESSION ====================

    def begin_create(self) -> Optional[Notice]:
        if not self.entity.creatable:
            return Notice(title="Error", message=f"{self.entity.plural} cannot be created here.")
        if self.at_capacity:
            return Notice(title="Limit Reached", message=self.entity.limit_message)
        self.session.begin_create()
        self.modal_open = True
        return None

    def begin_edit(self, record: dict):
        self.session.begin_edit(record)
        self.modal_open = True

    def cancel(self):
        self.session.reset()
        self.modal_open = False

    def add_item(self, field: str, value: str, limit: int, label: str) -> Optional[Notice]:
        try:
            items = add_list_item(self.session.get(field) or [], value, limit, label)
        except ValidationError as e:
            return Notice(**e.to_dict())
        self.session.set(field, items)
        return None

    def remove_item(self, field: str, index: int):
        self.session.set(field, remove_list_item(self.session.get(field) or [], index))

    # ==================== RECONCILIATION ====================

    async def submit(self, values: dict = None) -> SubmitResult:
        if self.state in BUSY_STATES:
            return SubmitResult(False, self.state, Notice(title="Please wait", message="A save is already in progress."))

        if values:
            self.session.update(values)

        entity = self.entity
        editing = self.session.is_editing

        self._transition(SyncState.VALIDATING)
        context = ValidationContext(editing=editing, record_count=len(self.records))
        try:
            validate(entity.rules, self.session.values, context)
        except ValidationError as e:
            return self._fail(e)

        record_id = self.session.record_id
        try:
            payload = entity.build_payload(self.session.values)
            if self.gateway.needs_upload(entity, payload):
                self._transition(SyncState.UPLOADING)
                payload = await self.gateway.resolve_media(entity, payload)
                # Keep the uploaded URLs so a retry after a failed write skips the upload
                for field in entity.media_fields:
                    self.session.set(field, payload.get(field))

            self._transition(SyncState.WRITING)
            if editing:
                await self.gateway.update(entity, record_id, payload)
                message = entity.messages["updated"]
            else:
                record_id = await self.gateway.create(entity, payload)
                message = entity.messages["created"]
        except AdminError as e:
            return self._fail(e)
        except DocumentNotFound:
            return self._fail(WriteError(entity.messages["save_failed"]))

        self._transition(SyncState.SETTLED)
        self.session.reset()
        self.modal_open = False
        self._transition(SyncState.IDLE)
        return SubmitResult(True, SyncState.SETTLED, Notice(title="Success", message=message), record_id=record_id)

    async def delete(self, record_id: str) -> SubmitResult:
        """Unconditional delete. The mirror drops the record on the next snapshot."""
        try:
            await self.gateway.delete(self.entity, record_id)
        except AdminError as e:
            return SubmitResult(False, SyncState.FAILED, Notice(**e.to_dict()), record_id=record_id, error=e)
        except DocumentNotFound:
            error = WriteError(self.entity.messages["delete_failed"])
            return SubmitResult(False, SyncState.FAILED, Notice(**error.to_dict()), record_id=record_id, error=error)
        return SubmitResult(True, SyncState.SETTLED,
                            Notice(title="Success", message=self.entity.messages["deleted"]),
                            record_id=record_id)

    def _transition(self, state: SyncState):
        self.history.append((self.state, state))
        logger.debug(f"{self.entity.collection}: {self.state.value} -> {state.value}")
        self.state = state

    def _fail(self, error: AdminError) -> SubmitResult:
        self._transition(SyncState.FAILED)
        self._transition(SyncState.IDLE)
        return SubmitResult(False, SyncState.FAILED, Notice(**error.to_dict()),
                            record_id=self.session.record_id, error=error)
