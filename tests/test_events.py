"""Tests for change notification."""
import pytest

from navigator_securekv import PersistenceError, StoreEvent
from navigator_securekv.events import ChangeNotifier

from conftest import FailingStorage


class TestStoreEvents:
    """Listeners are notified after successful mutations."""

    async def test_set_and_remove(self, store):
        seen = []
        store.subscribe(seen.append)
        await store.set("k", "v")
        await store.remove("k")
        assert seen == [StoreEvent("set", "k"), StoreEvent("remove", "k")]

    async def test_expire_on_read(self, store, clock):
        seen = []
        await store.set("k", "v", expires_in=1)
        store.subscribe(seen.append)
        clock.advance(2)
        await store.get("k")
        assert seen == [StoreEvent("expire", "k")]

    async def test_reads_do_not_notify(self, store):
        seen = []
        await store.set("k", "v")
        store.subscribe(seen.append)
        await store.get("k")
        await store.has("k")
        await store.get_stats()
        assert seen == []

    async def test_failed_write_does_not_notify(self, store):
        seen = []
        failing = type(store)(FailingStorage(fail_keys={"k"}))
        failing.subscribe(seen.append)
        with pytest.raises(PersistenceError):
            await failing.set("k", "v")
        assert seen == []

    async def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        await store.set("k", "v")
        assert seen == []

    async def test_failing_listener_does_not_break_mutation(self, store):
        seen = []

        def broken(event):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        await store.set("k", "v")
        assert await store.get("k") == "v"
        assert seen == [StoreEvent("set", "k")]


class TestChangeNotifier:
    """Unsubscribe removes exactly one registration."""

    def test_same_callback_twice(self):
        notifier = ChangeNotifier()
        seen = []
        first = notifier.subscribe(seen.append)
        notifier.subscribe(seen.append)
        assert len(notifier) == 2
        first()
        first()
        assert len(notifier) == 1
        notifier.notify("set", "k")
        assert seen == [StoreEvent("set", "k")]

    def test_unsubscribe_while_notifying(self):
        notifier = ChangeNotifier()
        seen = []
        unsubscribe = None

        def once(event):
            seen.append(event)
            unsubscribe()

        unsubscribe = notifier.subscribe(once)
        notifier.notify("set", "a")
        notifier.notify("set", "b")
        assert seen == [StoreEvent("set", "a")]
