"""
Tests for the Firestore store, with the client library mocked out.
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from expense_tracker.config.settings import FirestoreSettings
from expense_tracker.models.item import Item, Snapshot
from expense_tracker.services.storage import (
    FirestoreClient,
    FirestoreItemStore,
    StorageError,
    StoreConnectionError,
)


def make_document(doc_id, data):
    document = MagicMock()
    document.id = doc_id
    document.to_dict.return_value = data
    return document


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def no_retry_wait():
    """Retried store writes fail fast instead of sleeping between attempts."""
    with patch.object(FirestoreItemStore._write.retry, "sleep", lambda seconds: None), \
            patch.object(FirestoreItemStore._remove.retry, "sleep", lambda seconds: None):
        yield


@pytest.fixture
def store(collection):
    client = MagicMock(spec=FirestoreClient)
    client.get_collection.return_value = collection
    return FirestoreItemStore(client)


class TestFirestoreItemStore:
    def test_create_writes_record_and_returns_document_id(self, store, collection):
        document = collection.document.return_value
        document.id = "generated-id"

        item_id = asyncio.run(store.create(Item(name="Coffee", price=3.5)))

        assert item_id == "generated-id"
        collection.document.assert_called_once_with()
        document.set.assert_called_once_with({"name": "Coffee", "price": 3.5})

    def test_delete_targets_document(self, store, collection):
        assert asyncio.run(store.delete("abc")) is True
        collection.document.assert_called_once_with("abc")
        collection.document.return_value.delete.assert_called_once_with()

    def test_subscribe_converts_documents(self, store, collection):
        received = []
        store.subscribe(received.append)

        listener = collection.on_snapshot.call_args.args[0]
        listener(
            [
                make_document("a", {"name": "Lunch", "price": 10}),
                make_document("b", {"name": "Dinner", "price": 15.5}),
            ],
            [],
            None,
        )

        assert len(received) == 1
        snapshot = received[0]
        assert isinstance(snapshot, Snapshot)
        assert snapshot.items == [
            Item(id="a", name="Lunch", price=10),
            Item(id="b", name="Dinner", price=15.5),
        ]

    def test_malformed_documents_skipped(self, store, collection):
        received = []
        store.subscribe(received.append)

        listener = collection.on_snapshot.call_args.args[0]
        listener(
            [
                make_document("a", {"name": "Lunch", "price": 10}),
                make_document("b", {"price": 1}),
                make_document("c", {"name": "Tea", "price": "free"}),
                make_document("d", None),
            ],
            [],
            None,
        )

        assert [item.id for item in received[0].items] == ["a"]

    def test_callback_errors_do_not_reach_listener_thread(self, store, collection):
        def broken(snapshot):
            raise RuntimeError("boom")

        store.subscribe(broken)
        listener = collection.on_snapshot.call_args.args[0]
        listener([], [], None)

    def test_create_retry_reuses_allocated_document(self, store, collection, no_retry_wait):
        """A failed first write is retried on the same document, not a new one."""
        first = MagicMock()
        first.id = "first-id"
        first.set.side_effect = [RuntimeError("deadline exceeded"), None]
        second = MagicMock()
        second.id = "second-id"
        collection.document.side_effect = [first, second]

        item_id = asyncio.run(store.create(Item(name="Coffee", price=3.5)))

        assert item_id == "first-id"
        assert collection.document.call_count == 1
        assert first.set.call_count == 2
        second.set.assert_not_called()

    def test_create_failure_raises_storage_error(self, store, collection, no_retry_wait):
        collection.document.return_value.set.side_effect = RuntimeError("permission denied")

        with pytest.raises(StorageError, match="Failed to create item: permission denied"):
            asyncio.run(store.create(Item(name="Coffee", price=3.5)))

        assert collection.document.return_value.set.call_count == 3

    def test_delete_failure_raises_storage_error(self, store, collection, no_retry_wait):
        collection.document.return_value.delete.side_effect = RuntimeError("unavailable")

        with pytest.raises(StorageError, match="Failed to delete item: unavailable"):
            asyncio.run(store.delete("abc"))

        collection.document.assert_called_once_with("abc")
        assert collection.document.return_value.delete.call_count == 3

    def test_subscribe_failure_raises_storage_error(self, store, collection):
        collection.on_snapshot.side_effect = RuntimeError("listen refused")

        with pytest.raises(StorageError, match="Failed to subscribe to items: listen refused"):
            store.subscribe(lambda snapshot: None)

    def test_unsubscribe_stops_watch_once(self, store, collection):
        subscription = store.subscribe(lambda snapshot: None)
        subscription.unsubscribe()
        subscription.unsubscribe()

        collection.on_snapshot.return_value.unsubscribe.assert_called_once_with()


class TestFirestoreClient:
    def test_connect_with_service_account(self, tmp_path):
        credentials_file = tmp_path / "sa.json"
        credentials_file.write_text("{}")
        settings = FirestoreSettings(
            project_id="demo",
            credentials_path=str(credentials_file),
            collection_name="expenses",
        )

        with patch(
            "expense_tracker.services.storage.firestore.Credentials"
        ) as credentials_cls, patch(
            "expense_tracker.services.storage.firestore.firestore"
        ) as firestore_module:
            client = FirestoreClient(settings)
            collection = client.get_collection()

        credentials_cls.from_service_account_file.assert_called_once()
        firestore_module.Client.assert_called_once_with(
            project="demo",
            credentials=credentials_cls.from_service_account_file.return_value,
        )
        firestore_module.Client.return_value.collection.assert_called_once_with("expenses")
        assert collection is firestore_module.Client.return_value.collection.return_value

    def test_connect_without_credentials_uses_defaults(self):
        settings = FirestoreSettings(project_id="demo")

        with patch(
            "expense_tracker.services.storage.firestore.firestore"
        ) as firestore_module:
            FirestoreClient(settings).connect()

        firestore_module.Client.assert_called_once_with(project="demo", credentials=None)

    def test_connect_is_cached(self):
        settings = FirestoreSettings(project_id="demo")

        with patch(
            "expense_tracker.services.storage.firestore.firestore"
        ) as firestore_module:
            client = FirestoreClient(settings)
            client.connect()
            client.connect()

        assert firestore_module.Client.call_count == 1

    def test_connect_failure_raises_connection_error(self):
        settings = FirestoreSettings(project_id="demo")

        with patch(
            "expense_tracker.services.storage.firestore.firestore"
        ) as firestore_module, patch.object(
            FirestoreClient.connect.retry, "sleep", lambda seconds: None
        ):
            firestore_module.Client.side_effect = RuntimeError("no credentials")
            with pytest.raises(StoreConnectionError, match="no credentials"):
                FirestoreClient(settings).connect()
