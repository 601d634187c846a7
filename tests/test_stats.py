"""Tests for get_stats, get_item_info and get_all_keys."""
import pytest

from navigator_securekv import ExpiringStore, ItemInfo, SecureKey
from navigator_securekv.keys import well_known_keys

from conftest import START, FailingStorage


class TestItemInfo:
    """Read-only envelope introspection."""

    async def test_absent(self, store):
        info = await store.get_item_info("missing")
        assert info == ItemInfo(exists=False, is_expired=False)

    async def test_present(self, store):
        await store.set("k", "v", expires_in=500)
        info = await store.get_item_info("k")
        assert info.exists is True
        assert info.timestamp == START
        assert info.expires_at == START + 500
        assert info.is_expired is False

    async def test_expired_is_not_evicted(self, store, storage, clock):
        await store.set("k", "v", expires_in=500)
        clock.advance(501)
        info = await store.get_item_info("k")
        assert info.is_expired is True
        assert "k" in storage

    async def test_corrupt_is_none(self, store, storage):
        await storage.put("k", b"garbage")
        assert await store.get_item_info("k") is None

    async def test_read_failure_is_none(self, clock):
        store = ExpiringStore(FailingStorage(fail_reads=True), clock=clock)
        assert await store.get_item_info("k") is None


class TestStats:
    """Counts over the well-known keys."""

    async def test_empty(self, store):
        stats = await store.get_stats()
        assert stats.total_items == 0
        assert stats.valid_items == 0
        assert stats.expired_items == 0
        assert stats.keys == []

    async def test_counts_unread_expired_items(self, store, storage, clock):
        """Expired entries count as expired without a prior read."""
        await store.set(SecureKey.API_KEYS, ["k1"], expires_in=100)
        await store.set(SecureKey.PAYMENT_INFO, {"card": "x"}, expires_in=100)
        clock.advance(101)
        await store.set(SecureKey.AUTH_TOKEN, "t")
        await store.set(SecureKey.USER_ID, "u")
        await store.set(SecureKey.SESSION_DATA, {"s": 1})
        stats = await store.get_stats()
        assert stats.valid_items == 3
        assert stats.expired_items == 2
        assert stats.total_items == 5
        assert sorted(stats.keys) == sorted([
            "api_keys", "payment_info", "auth_token", "user_id", "session_data",
        ])
        # stats never evict
        assert "api_keys" in storage

    async def test_custom_keys_are_invisible(self, store):
        await store.set("custom", "c")
        assert (await store.get_stats()).total_items == 0

    async def test_malformed_bytes_wrapper_is_skipped(self, store, storage):
        await storage.put(
            "auth_token",
            b'{"value": {"__securekv_bytes_b64__": "abc"}, "timestamp": 1}',
        )
        await storage.put(
            "user_id", b'{"value": {"__securekv_bytes_b64__": 5}, "timestamp": 1}'
        )
        stats = await store.get_stats()
        assert stats.total_items == 0
        assert await store.get_item_info("auth_token") is None

    async def test_corrupt_well_known_key_is_skipped(self, store, storage):
        await storage.put("auth_token", b"garbage")
        await store.set(SecureKey.USER_ID, "u")
        stats = await store.get_stats()
        assert stats.total_items == 1
        assert stats.keys == ["user_id"]

    async def test_custom_registry(self, storage, clock):
        store = ExpiringStore(storage, clock=clock, registry=["a", SecureKey.USER_ID])
        await store.set("a", 1)
        await store.set("auth_token", "t")
        stats = await store.get_stats()
        assert stats.keys == ["a"]
        assert store.registry == ["a", "user_id"]


class TestAllKeys:

    async def test_lists_present_well_known_keys(self, store, clock):
        await store.set(SecureKey.REFRESH_TOKEN, "r", expires_in=1)
        await store.set(SecureKey.PERSONAL_DATA, {"name": "x"})
        clock.advance(2)
        assert await store.get_all_keys() == ["refresh_token", "personal_data"]

    def test_registry_order(self):
        assert well_known_keys()[:4] == [
            "auth_token", "refresh_token", "user_id", "session_data",
        ]
        assert len(well_known_keys()) == len(SecureKey)


@pytest.mark.parametrize("member", list(SecureKey))
def test_secure_key_str(member):
    assert str(member) == member.value
