"""
Storage Services Package

Provides the abstract item store interface and its implementations.
Firestore is the production backend; the in-memory store serves tests
and credential-free local runs.
"""

from expense_tracker.services.storage.interface import (
    ItemStoreInterface,
    NotFoundError,
    SnapshotCallback,
    StorageError,
    StoreConnectionError,
    Subscription,
)
from expense_tracker.services.storage.memory import InMemoryItemStore
from expense_tracker.services.storage.firestore import (
    FirestoreClient,
    FirestoreItemStore,
)

__all__ = [
    # Interfaces
    "ItemStoreInterface",
    "SnapshotCallback",
    "Subscription",
    # Exceptions
    "NotFoundError",
    "StorageError",
    "StoreConnectionError",
    # Implementations
    "FirestoreClient",
    "FirestoreItemStore",
    "InMemoryItemStore",
]
