"""Tests for the aiohttp integration."""
import pytest
from aiohttp import web
from aiohttp.test_utils import make_mocked_request

from navigator_securekv import ExpiringStore
from navigator_securekv.storage import MemoryStorage
from navigator_securekv.web import SECUREKV_STORE, get_store, setup_store


class ClosingStorage(MemoryStorage):

    def __init__(self):
        super().__init__()
        self.closed = False

    async def close(self):
        self.closed = True


def test_get_store_from_request(store):
    app = web.Application()
    setup_store(app, store)
    request = make_mocked_request("GET", "/", app=app)
    assert get_store(request) is store
    assert app[SECUREKV_STORE] is store


def test_get_store_not_configured():
    request = make_mocked_request("GET", "/", app=web.Application())
    with pytest.raises(RuntimeError):
        get_store(request)


def test_setup_twice(store):
    app = web.Application()
    setup_store(app, store)
    with pytest.raises(RuntimeError):
        setup_store(app, store)


async def test_cleanup_closes_storage():
    storage = ClosingStorage()
    app = web.Application()
    setup_store(app, ExpiringStore(storage))
    app.freeze()
    await app.cleanup()
    assert storage.closed is True
