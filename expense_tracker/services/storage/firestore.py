"""
Firestore Item Store Implementation

DESIGN DECISION: Firestore is the hosted document database behind the page:
1. Live listeners push the whole collection on every change
2. Ids are assigned by the database, not by us
3. No server of our own to run

TRADEOFFS:
- Listener callbacks arrive on a background thread owned by the client
  library (the tracker hands them over through a queue)
- Every snapshot carries the full collection (fine for a personal list)

The implementation follows the abstract interface, so tests and local
development can use the in-memory store without changing the tracker.
"""

from typing import Optional

import structlog
from google.cloud import firestore
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import get_settings
from expense_tracker.config.settings import FirestoreSettings
from expense_tracker.models.item import Item, Snapshot
from expense_tracker.services.storage.interface import (
    ItemStoreInterface,
    SnapshotCallback,
    StorageError,
    StoreConnectionError,
    Subscription,
)


logger = structlog.get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/datastore"]


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[FirestoreSettings] = None):
        self._client: Optional[firestore.Client] = None
        self._settings = settings or get_settings().firestore

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> firestore.Client:
        """
        Establish the Firestore client.

        Uses the service account file when one is configured, otherwise
        application default credentials (or the emulator, when
        FIRESTORE_EMULATOR_HOST is set).
        """
        if self._client is None:
            try:
                credentials = None
                if self._settings.credentials_path:
                    credentials = Credentials.from_service_account_file(
                        self._settings.credentials_path,
                        scopes=SCOPES,
                    )
                self._client = firestore.Client(
                    project=self._settings.project_id,
                    credentials=credentials,
                )
            except FileNotFoundError:
                raise StoreConnectionError(
                    f"Firestore credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreConnectionError(f"Failed to connect to Firestore: {e}")

        return self._client

    def get_collection(self) -> firestore.CollectionReference:
        """Get the configured item collection."""
        return self.connect().collection(self._settings.collection_name)


class _WatchSubscription(Subscription):
    """Wraps the Watch object returned by on_snapshot()."""

    def __init__(self, watch):
        self._watch = watch
        self._closed = False

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._watch.unsubscribe()


class FirestoreItemStore(ItemStoreInterface):
    """
    Firestore implementation of the item store.

    Items are documents of one collection with two fields, name and price.
    The document id is the item id.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @staticmethod
    def _document_to_item(document) -> Optional[Item]:
        """Convert a DocumentSnapshot to an Item, or None if it is malformed."""
        data = document.to_dict() or {}
        try:
            return Item(
                id=document.id,
                name=data.get("name"),
                price=data.get("price"),
            )
        except ValidationError as e:
            logger.warning(
                "firestore_document_skipped",
                document_id=document.id,
                error=str(e),
            )
            return None

    def _to_snapshot(self, documents) -> Snapshot:
        items = []
        for document in documents:
            item = self._document_to_item(document)
            if item is not None:
                items.append(item)
        return Snapshot(items=items)

    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write(document, data: dict) -> None:
        """Set the document body; every attempt targets the same reference."""
        try:
            document.set(data)
        except Exception as e:
            raise StorageError(f"Failed to create item: {e}")

    @staticmethod
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _remove(document) -> None:
        try:
            document.delete()
        except Exception as e:
            raise StorageError(f"Failed to delete item: {e}")

    async def create(self, record: Item) -> str:
        """
        Write a new document.

        The document reference (and its id) is allocated once, before the
        retried write, so a write that committed but timed out is rewritten
        in place instead of being added a second time.
        """
        try:
            document = self._client.get_collection().document()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to create item: {e}")

        self._write(document, record.to_record())
        return document.id

    async def delete(self, item_id: str) -> bool:
        """Delete one document. Firestore deletes are idempotent, so this reports True."""
        try:
            document = self._client.get_collection().document(item_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete item: {e}")

        self._remove(document)
        return True

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """Attach a listener to the whole collection."""

        def on_snapshot(documents, changes, read_time):
            try:
                callback(self._to_snapshot(documents))
            except Exception:
                logger.exception("firestore_snapshot_callback_failed")

        try:
            watch = self._client.get_collection().on_snapshot(on_snapshot)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to subscribe to items: {e}")

        return _WatchSubscription(watch)
