"""
Expense Tracker View-Model Loop

This module owns the page's state and the four things the page does:
1. Submit the draft to the store (add_item)
2. Keep a standing subscription on the collection (start / stop)
3. Apply each snapshot the store pushes, recomputing the total (poll)
4. Forward delete requests (delete_item)

DESIGN DECISION: The list is never edited locally. add_item and
delete_item only talk to the store; the visible list changes when the
store's next snapshot arrives and poll() applies it.

Snapshots may be produced on a background thread (the Firestore
listener), so they are handed over through a queue and applied on the
thread that drives the page.
"""

import queue
import threading
import weakref
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from expense_tracker.audit import AuditLogger
from expense_tracker.config import get_settings
from expense_tracker.models.item import (
    Draft,
    DraftValidationError,
    Item,
    Snapshot,
    compute_total,
)
from expense_tracker.services.storage import (
    FirestoreClient,
    FirestoreItemStore,
    InMemoryItemStore,
    ItemStoreInterface,
    StorageError,
    Subscription,
)


class SubscriptionState(str, Enum):
    """The only transition is UNSUBSCRIBED -> SUBSCRIBED, on start()."""
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBED = "subscribed"


class TrackerState(BaseModel):
    """Everything the page renders from. Owned by one ExpenseTracker."""
    model_config = ConfigDict(validate_assignment=True)

    items: list[Item] = Field(default_factory=list)
    draft: Draft = Field(default_factory=Draft)
    total: float = 0.0
    subscription: SubscriptionState = SubscriptionState.UNSUBSCRIBED
    last_error: Optional[str] = None


class _SnapshotChannel:
    """
    Thread-safe hand-off from the store's listener to the tracker.

    Holds no reference to the tracker, so a dropped tracker can still be
    finalized while the listener thread keeps the channel alive.
    """

    def __init__(self):
        self._queue: "queue.Queue[Snapshot]" = queue.Queue()
        self._closed = threading.Event()

    def put(self, snapshot: Snapshot) -> None:
        if not self._closed.is_set():
            self._queue.put(snapshot)

    def drain(self) -> list[Snapshot]:
        snapshots = []
        while True:
            try:
                snapshots.append(self._queue.get_nowait())
            except queue.Empty:
                return snapshots

    def close(self) -> int:
        """Stop accepting snapshots; returns how many were never delivered."""
        self._closed.set()
        return len(self.drain())

    @property
    def closed(self) -> bool:
        return self._closed.is_set()


def _release(subscription: Subscription, channel: _SnapshotChannel) -> None:
    channel.close()
    subscription.unsubscribe()


class ExpenseTracker:
    """
    View-model for the expense page.

    Create one per page session. Call start() once the page is shown,
    poll() whenever the page redraws, and stop() when it goes away.
    """

    def __init__(
        self,
        store: ItemStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._channel = _SnapshotChannel()
        self._subscription: Optional[Subscription] = None
        self._finalizer: Optional[weakref.finalize] = None
        self.state = TrackerState()

    @property
    def session_id(self) -> UUID:
        return self._audit_logger.correlation_id

    @property
    def active(self) -> bool:
        """True from start() until stop()."""
        return self._subscription is not None and not self._channel.closed

    # ------------------------------------------------------------------
    # Draft
    # ------------------------------------------------------------------

    def update_draft(self, name: Optional[str] = None, price: Optional[str] = None) -> Draft:
        """Replace the given draft fields with what the user typed."""
        draft = self.state.draft
        self.state.draft = Draft(
            name=draft.name if name is None else name,
            price=draft.price if price is None else price,
        )
        return self.state.draft

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    async def add_item(self) -> Optional[str]:
        """
        Submit the current draft.

        Does nothing (and returns None) unless both draft fields are
        filled in. On success the draft is cleared and the store-assigned
        id returned; the item shows up once the store's next snapshot
        is polled.

        Raises:
            DraftValidationError: If the price is not a finite number or
                the name is only whitespace; the draft is kept
            StorageError: If the store rejects the write; the draft is kept
        """
        draft = self.state.draft
        if not draft.is_complete:
            return None

        try:
            item = draft.to_item()
        except DraftValidationError as e:
            self._audit_logger.log_draft_rejected(field=e.field, reason=str(e))
            self.state.last_error = str(e)
            raise

        self._audit_logger.log_create_requested(name=item.name, price=item.price)
        try:
            item_id = await self._store.create(item)
        except StorageError as e:
            self._audit_logger.log_create_failed(name=item.name, error_message=str(e))
            self.state.last_error = str(e)
            raise

        self._audit_logger.log_item_created(item_id=item_id, name=item.name, price=item.price)
        self.state.draft = Draft()
        self.state.last_error = None
        return item_id

    async def delete_item(self, item_id: Optional[str]) -> bool:
        """
        Ask the store to delete one item.

        The local list is left alone; the item disappears when the
        snapshot without it is polled. Returns False without calling the
        store when no id is given.

        Raises:
            StorageError: If the store rejects the delete
        """
        if not item_id:
            return False

        self._audit_logger.log_delete_requested(item_id=item_id)
        try:
            found = await self._store.delete(item_id)
        except StorageError as e:
            self._audit_logger.log_delete_failed(item_id=item_id, error_message=str(e))
            self.state.last_error = str(e)
            raise

        self._audit_logger.log_item_deleted(item_id=item_id, found=found)
        self.state.last_error = None
        return True

    # ------------------------------------------------------------------
    # Live subscription
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Open the standing subscription. Later calls are no-ops, and so is
        calling it after stop().

        Raises:
            StorageError: If the store cannot open the subscription
        """
        if self.state.subscription == SubscriptionState.SUBSCRIBED or self._channel.closed:
            return

        try:
            self._subscription = self._store.subscribe(self._channel.put)
        except StorageError as e:
            self._audit_logger.log_error(
                error_type="subscription_failed",
                error_message=str(e),
            )
            self.state.last_error = str(e)
            raise

        self._finalizer = weakref.finalize(self, _release, self._subscription, self._channel)
        self.state.subscription = SubscriptionState.SUBSCRIBED
        self._audit_logger.log_subscription_opened()

    def poll(self) -> bool:
        """
        Apply whatever snapshots arrived since the last poll.

        Each snapshot replaces the whole list, so only the newest one
        matters. Returns True if the list was replaced.
        """
        if self._channel.closed:
            return False

        snapshots = self._channel.drain()
        if not snapshots:
            return False

        self.apply_snapshot(snapshots[-1], skipped=len(snapshots) - 1)
        return True

    def apply_snapshot(self, snapshot: Snapshot, skipped: int = 0) -> None:
        """Overwrite the list with the snapshot and recompute the total."""
        items = list(snapshot.items)
        self.state.items = items
        self.state.total = compute_total(items)
        self._audit_logger.log_snapshot_applied(
            item_count=len(items),
            total=self.state.total,
            skipped=skipped,
        )

    def stop(self) -> None:
        """
        Release the subscription. Snapshots not yet polled are dropped and
        any that arrive later are ignored.
        """
        if self._channel.closed:
            return

        discarded = self._channel.close()
        if self._finalizer is not None:
            self._finalizer.detach()
            self._finalizer = None
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._audit_logger.log_subscription_closed(discarded=discarded)


def create_item_store(backend: Optional[str] = None) -> ItemStoreInterface:
    """
    Factory for the configured item store.

    Args:
        backend: "firestore" or "memory"; defaults to APP_STORE_BACKEND

    Raises:
        StoreConnectionError: If Firestore is selected and cannot be reached
        ValueError: For an unknown backend name
    """
    settings = get_settings()
    backend = backend or settings.app.store_backend

    if backend == "memory":
        return InMemoryItemStore()
    if backend == "firestore":
        client = FirestoreClient(settings.firestore)
        client.connect()
        return FirestoreItemStore(client)

    raise ValueError(f"Unknown store backend: {backend}")
