"""
Document Store - collection/document storage with live snapshot subscriptions.

Documents are JSON objects grouped by collection name and persisted through
SQLAlchemy. Subscribers receive the full, ordered result set on subscribe and
again after every committed write to their collection. Delivery is scheduled
on the running event loop, never inside the write call itself.
"""
import asyncio
import json
import uuid
import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from database import SessionLocal
from models_orm import DocumentORM
from .exceptions import DocumentNotFound, SubscriptionError

logger = logging.getLogger("fitmaker_admin")

# (field, "asc" | "desc")
Ordering = Tuple[str, str]


def sort_records(records: List[dict], order: Optional[Ordering]) -> List[dict]:
    """Order records by a field. Records missing the field go last."""
    if not order:
        return list(records)
    field, direction = order
    present = [r for r in records if r.get(field) is not None]
    missing = [r for r in records if r.get(field) is None]
    reverse = direction == "desc"
    try:
        present.sort(key=lambda r: r[field], reverse=reverse)
    except TypeError:
        # Mixed value types in one field
        present.sort(key=lambda r: str(r[field]), reverse=reverse)
    return present + missing


class Subscription:
    """Handle for one live query. cancel() stops delivery and is idempotent."""

    def __init__(self, store, collection: str, on_snapshot: Callable, on_error: Optional[Callable],
                 order: Optional[Ordering] = None, doc_id: Optional[str] = None):
        self.store = store
        self.collection = collection
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.order = order
        self.doc_id = doc_id
        self.active = True
        # Snapshots are delivered on the loop that subscribed
        try:
            self.loop = asyncio.get_running_loop()
        except RuntimeError:
            self.loop = None

    def cancel(self):
        if not self.active:
            return
        self.active = False
        self.store._remove_subscription(self)


class DocumentStore:
    """SQLAlchemy-backed document store."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or SessionLocal
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)

    # ==================== WRITES ====================

    async def create(self, collection: str, fields: dict) -> str:
        doc_id = uuid.uuid4().hex
        db = self._session_factory()
        try:
            doc = DocumentORM(
                id=doc_id,
                collection=collection,
                data=json.dumps(fields)
            )
            db.add(doc)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        self._notify(collection)
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: dict):
        """Merge `fields` into an existing document."""
        db = self._session_factory()
        try:
            doc = self._find(db, collection, doc_id)
            if not doc:
                raise DocumentNotFound(collection, doc_id)

            data = json.loads(doc.data or "{}")
            data.update(fields)
            doc.data = json.dumps(data)
            doc.updated_at = datetime.utcnow().isoformat()
            db.commit()
        except DocumentNotFound:
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        self._notify(collection)

    async def set(self, collection: str, doc_id: str, fields: dict, merge: bool = True):
        """Create or overwrite a document under a known id."""
        db = self._session_factory()
        try:
            doc = self._find(db, collection, doc_id)
            if doc:
                data = json.loads(doc.data or "{}") if merge else {}
                data.update(fields)
                doc.data = json.dumps(data)
                doc.updated_at = datetime.utcnow().isoformat()
            else:
                db.add(DocumentORM(id=doc_id, collection=collection, data=json.dumps(fields)))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        self._notify(collection)

    async def delete(self, collection: str, doc_id: str):
        db = self._session_factory()
        try:
            doc = self._find(db, collection, doc_id)
            if not doc:
                raise DocumentNotFound(collection, doc_id)
            db.delete(doc)
            db.commit()
        except DocumentNotFound:
            raise
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

        self._notify(collection)

    # ==================== READS ====================

    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        return self._read_document(collection, doc_id)

    async def list(self, collection: str, order: Optional[Ordering] = None) -> List[dict]:
        return self._read_collection(collection, order)

    def _find(self, db, collection: str, doc_id: str):
        return db.query(DocumentORM).filter(
            DocumentORM.collection == collection,
            DocumentORM.id == doc_id
        ).first()

    def _read_collection(self, collection: str, order: Optional[Ordering]) -> List[dict]:
        db = self._session_factory()
        try:
            docs = db.query(DocumentORM).filter(DocumentORM.collection == collection).all()
            records = [self._to_record(d) for d in docs]
        finally:
            db.close()
        return sort_records(records, order)

    def _read_document(self, collection: str, doc_id: str) -> Optional[dict]:
        db = self._session_factory()
        try:
            doc = self._find(db, collection, doc_id)
            return self._to_record(doc) if doc else None
        finally:
            db.close()

    def _to_record(self, doc: DocumentORM) -> dict:
        record = {"id": doc.id}
        record.update(json.loads(doc.data or "{}"))
        return record

    # ==================== LIVE QUERIES ====================

    def subscribe(self, collection: str, on_snapshot: Callable, on_error: Optional[Callable] = None,
                  order: Optional[Ordering] = None) -> Subscription:
        """Receive the full snapshot of `collection` now and after every write."""
        sub = Subscription(self, collection, on_snapshot, on_error, order=order)
        self._subscriptions[collection].append(sub)
        self._schedule(sub)
        return sub

    def subscribe_document(self, collection: str, doc_id: str, on_snapshot: Callable,
                           on_error: Optional[Callable] = None) -> Subscription:
        """Receive one document (or None if missing) now and after every write to its collection."""
        sub = Subscription(self, collection, on_snapshot, on_error, doc_id=doc_id)
        self._subscriptions[collection].append(sub)
        self._schedule(sub)
        return sub

    def subscription_count(self, collection: str = None) -> int:
        if collection is not None:
            return len(self._subscriptions.get(collection, []))
        return sum(len(subs) for subs in self._subscriptions.values())

    def _remove_subscription(self, sub: Subscription):
        subs = self._subscriptions.get(sub.collection, [])
        if sub in subs:
            subs.remove(sub)

    def _notify(self, collection: str):
        for sub in self._subscriptions.get(collection, [])[:]:
            self._schedule(sub)

    def _schedule(self, sub: Subscription):
        loop = sub.loop
        if loop is None:
            self._deliver(sub)
            return
        if loop.is_closed():
            sub.cancel()
            return

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        if current is loop:
            loop.call_soon(self._deliver, sub)
        else:
            try:
                loop.call_soon_threadsafe(self._deliver, sub)
            except RuntimeError:
                # Loop closed in the meantime
                sub.cancel()

    def _deliver(self, sub: Subscription):
        if not sub.active:
            return
        try:
            if sub.doc_id is not None:
                payload = self._read_document(sub.collection, sub.doc_id)
            else:
                payload = self._read_collection(sub.collection, sub.order)
        except Exception as e:
            # Terminal: a failed live query delivers nothing further
            logger.warning(f"Subscription to {sub.collection} failed: {e}")
            sub.cancel()
            if sub.on_error:
                sub.on_error(SubscriptionError(f"Could not fetch {sub.collection}.", title="Error"))
            return
        sub.on_snapshot(payload)
