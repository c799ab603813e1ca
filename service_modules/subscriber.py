"""
Live Collection Subscriber - local mirror of one remote collection.

The mirror is replaced wholesale on every snapshot; it is never patched and
never treated as authoritative. open() is a scoped acquisition: the
subscription is always released when the block exits.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable, List, Optional

from .document_store import DocumentStore, Ordering, Subscription
from .exceptions import SubscriptionError

logger = logging.getLogger("fitmaker_admin")


class LiveCollectionSubscriber:
    def __init__(self, store: DocumentStore, collection: str, order: Optional[Ordering] = None,
                 normalize: Callable[[dict], dict] = None, fetch_error: str = None):
        self.store = store
        self.collection = collection
        self.order = order
        self.normalize = normalize
        self.fetch_error = fetch_error or f"Could not fetch {collection}."

        self.records: List[dict] = []
        self.error: Optional[SubscriptionError] = None
        self.loaded = False
        self.version = 0  # bumped on every snapshot

        self._subscription: Optional[Subscription] = None
        self._listeners: List[Callable] = []

    @property
    def active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def add_listener(self, callback: Callable):
        """callback(records, error) after each snapshot or on the terminal error."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def start(self):
        if self.active:
            return
        self.error = None
        self._subscription = self.store.subscribe(
            self.collection, self._on_snapshot, self._on_error, order=self.order
        )

    def stop(self):
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    @asynccontextmanager
    async def open(self):
        self.start()
        try:
            yield self
        finally:
            self.stop()

    async def wait_loaded(self):
        """Wait for the first snapshot (or the terminal error)."""
        if self.loaded or self.error is not None:
            return
        event = asyncio.Event()

        def _set(records, error):
            event.set()

        self.add_listener(_set)
        try:
            await event.wait()
        finally:
            self.remove_listener(_set)

    def _on_snapshot(self, records: List[dict]):
        try:
            mirror = [self.normalize(r) for r in records] if self.normalize else list(records)
        except Exception as e:
            logger.warning(f"Malformed snapshot for {self.collection}: {e}")
            self.stop()
            self._on_error(SubscriptionError(self.fetch_error))
            return

        self.records = mirror
        self.loaded = True
        self.version += 1
        for callback in self._listeners[:]:
            callback(self.records, None)

    def _on_error(self, error: SubscriptionError):
        logger.warning(f"Error fetching {self.collection}: {error}")
        self.error = SubscriptionError(self.fetch_error)
        self._subscription = None
        for callback in self._listeners[:]:
            callback(self.records, self.error)
