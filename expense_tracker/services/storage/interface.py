"""
Abstract Item Store Interface

DESIGN DECISION: The page talks to the document database only through
this interface. This allows us to:
1. Run against Firestore in production
2. Use in-memory storage for tests and local development
3. Keep the view-model loop free of any database client code

The interface mirrors what a hosted document database offers for a
single collection: create, delete, and a live subscription that
pushes the full document set on every change.
"""

from abc import ABC, abstractmethod
from typing import Callable

from expense_tracker.models.item import Item, Snapshot


SnapshotCallback = Callable[[Snapshot], None]


class Subscription(ABC):
    """Handle for a live subscription. Release it with unsubscribe()."""

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering snapshots. Safe to call more than once."""
        pass


class ItemStoreInterface(ABC):
    """
    Abstract interface for the item collection.

    Any store implementation (Firestore, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def create(self, record: Item) -> str:
        """
        Persist a new item.

        Args:
            record: The item to write; its id is ignored

        Returns:
            The opaque id the store assigned

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, item_id: str) -> bool:
        """
        Delete one item by id.

        Args:
            item_id: The store-assigned identifier

        Returns:
            True if a document was removed, False if none matched
            (backends that cannot tell report True)

        Raises:
            StorageError: If the delete fails
        """
        pass

    @abstractmethod
    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """
        Open a standing subscription on the whole collection.

        The callback receives the full current document set once right
        away and again after every change. It may be invoked from a
        background thread.

        Args:
            callback: Receives each Snapshot

        Returns:
            Handle used to release the subscription

        Raises:
            StorageError: If the subscription cannot be opened
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StoreConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
