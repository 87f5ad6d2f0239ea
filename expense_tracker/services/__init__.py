"""Services package."""

from expense_tracker.services.storage import (
    FirestoreClient,
    FirestoreItemStore,
    InMemoryItemStore,
    ItemStoreInterface,
    NotFoundError,
    StorageError,
    StoreConnectionError,
    Subscription,
)

__all__ = [
    "FirestoreClient",
    "FirestoreItemStore",
    "InMemoryItemStore",
    "ItemStoreInterface",
    "NotFoundError",
    "StorageError",
    "StoreConnectionError",
    "Subscription",
]
