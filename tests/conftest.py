"""Shared fixtures: a recording fake store and trackers wired to it."""

from typing import Optional

import pytest

from expense_tracker.models.item import Item, Snapshot
from expense_tracker.services.storage import (
    InMemoryItemStore,
    ItemStoreInterface,
    StorageError,
    Subscription,
)
from expense_tracker.tracker import ExpenseTracker


class FakeSubscription(Subscription):
    def __init__(self):
        self.unsubscribe_calls = 0

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1


class RecordingStore(ItemStoreInterface):
    """
    Records every call and only delivers snapshots when told to.

    Lets tests check what the tracker shows before and after the store
    pushes, which the in-memory store (pushing synchronously) cannot.
    """

    def __init__(self):
        self.created: list[Item] = []
        self.deleted: list[str] = []
        self.callbacks = []
        self.subscriptions: list[FakeSubscription] = []
        self.fail_with: Optional[Exception] = None
        self._next_id = 1

    async def create(self, record: Item) -> str:
        if self.fail_with:
            raise self.fail_with
        self.created.append(record)
        item_id = f"id-{self._next_id}"
        self._next_id += 1
        return item_id

    async def delete(self, item_id: str) -> bool:
        if self.fail_with:
            raise self.fail_with
        self.deleted.append(item_id)
        return True

    def subscribe(self, callback) -> Subscription:
        if self.fail_with:
            raise self.fail_with
        self.callbacks.append(callback)
        subscription = FakeSubscription()
        self.subscriptions.append(subscription)
        return subscription

    def push(self, *items: Item) -> None:
        snapshot = Snapshot(items=list(items))
        for callback in self.callbacks:
            callback(snapshot)


@pytest.fixture
def recording_store():
    return RecordingStore()


@pytest.fixture
def memory_store():
    return InMemoryItemStore()


@pytest.fixture
def tracker(recording_store):
    tracker = ExpenseTracker(recording_store)
    tracker.start()
    yield tracker
    tracker.stop()


@pytest.fixture
def storage_error():
    return StorageError("permission denied")
