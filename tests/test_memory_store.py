"""Tests for the in-memory item store."""

import asyncio

from expense_tracker.models.item import Item


class TestInMemoryItemStore:
    def test_subscribe_delivers_current_contents(self, memory_store):
        asyncio.run(memory_store.create(Item(name="Lunch", price=10)))

        received = []
        memory_store.subscribe(received.append)

        assert len(received) == 1
        assert [item.name for item in received[0].items] == ["Lunch"]

    def test_create_assigns_unique_ids(self, memory_store):
        first = asyncio.run(memory_store.create(Item(name="Lunch", price=10)))
        second = asyncio.run(memory_store.create(Item(name="Lunch", price=10)))

        assert first != second
        assert [item.id for item in memory_store.snapshot().items] == [first, second]

    def test_create_ignores_record_id(self, memory_store):
        item_id = asyncio.run(memory_store.create(Item(id="mine", name="Tea", price=2)))
        assert item_id != "mine"

    def test_every_change_pushes_full_snapshot(self, memory_store):
        received = []
        memory_store.subscribe(received.append)

        item_id = asyncio.run(memory_store.create(Item(name="Lunch", price=10)))
        asyncio.run(memory_store.create(Item(name="Dinner", price=15.5)))
        asyncio.run(memory_store.delete(item_id))

        assert [len(snapshot.items) for snapshot in received] == [0, 1, 2, 1]
        assert received[-1].items[0].name == "Dinner"
        assert received[-1].total == 15.5

    def test_delete_unknown_id(self, memory_store):
        received = []
        memory_store.subscribe(received.append)

        assert asyncio.run(memory_store.delete("missing")) is False
        assert len(received) == 1

    def test_unsubscribe_stops_delivery(self, memory_store):
        received = []
        subscription = memory_store.subscribe(received.append)
        subscription.unsubscribe()
        subscription.unsubscribe()

        asyncio.run(memory_store.create(Item(name="Lunch", price=10)))

        assert len(received) == 1
        assert memory_store.subscriber_count == 0
