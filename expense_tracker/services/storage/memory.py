"""
In-Memory Item Store

Keeps items in a dict for the lifetime of the process. Used by the
tests and by the page when APP_STORE_BACKEND=memory, so the tracker
can be run without any Google Cloud credentials.

Subscribers are notified synchronously, on the calling thread, with
the full document set in insertion order.
"""

import threading
from uuid import uuid4

from expense_tracker.models.item import Item, Snapshot
from expense_tracker.services.storage.interface import (
    ItemStoreInterface,
    SnapshotCallback,
    Subscription,
)


class _MemorySubscription(Subscription):
    def __init__(self, store: "InMemoryItemStore", token: int):
        self._store = store
        self._token = token

    def unsubscribe(self) -> None:
        self._store._remove_subscriber(self._token)


class InMemoryItemStore(ItemStoreInterface):
    """Dict-backed implementation of the item store."""

    def __init__(self):
        self._documents: dict[str, dict] = {}
        self._subscribers: dict[int, SnapshotCallback] = {}
        self._next_token = 0
        self._lock = threading.RLock()

    async def create(self, record: Item) -> str:
        item_id = uuid4().hex
        with self._lock:
            self._documents[item_id] = record.to_record()
        self._notify()
        return item_id

    async def delete(self, item_id: str) -> bool:
        with self._lock:
            found = self._documents.pop(item_id, None) is not None
        if found:
            self._notify()
        return found

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback
        callback(self.snapshot())
        return _MemorySubscription(self, token)

    def snapshot(self) -> Snapshot:
        """Current contents as a Snapshot."""
        with self._lock:
            items = [
                Item(id=item_id, **data)
                for item_id, data in self._documents.items()
            ]
        return Snapshot(items=items)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _remove_subscriber(self, token: int) -> None:
        with self._lock:
            self._subscribers.pop(token, None)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            callback(snapshot)
