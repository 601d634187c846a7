"""Shared test fixtures."""
import pytest

from navigator_securekv import AuthStore, ExpiringStore
from navigator_securekv.storage import MemoryStorage


START = 1_700_000_000_000


class FakeClock:
    """Simulated wall clock, in milliseconds."""

    def __init__(self, now: int = START):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


class FailingStorage(MemoryStorage):
    """MemoryStorage whose writes and deletes fail for selected keys."""

    def __init__(self, fail_keys=(), fail_reads=False):
        super().__init__()
        self.fail_keys = set(fail_keys)
        self.fail_reads = fail_reads
        self.deleted: list[str] = []

    async def put(self, key, data):
        if key in self.fail_keys:
            raise OSError(f"put failed for {key}")
        await super().put(key, data)

    async def get(self, key):
        if self.fail_reads:
            raise OSError(f"get failed for {key}")
        return await super().get(key)

    async def delete(self, key):
        self.deleted.append(key)
        if key in self.fail_keys:
            raise OSError(f"delete failed for {key}")
        await super().delete(key)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage, clock):
    return ExpiringStore(storage, clock=clock)


@pytest.fixture
def auth(store):
    return AuthStore(store)

