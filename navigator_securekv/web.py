"""aiohttp integration: one ExpiringStore per application."""
import logging

from aiohttp import web

from .conf import LOGGER_NAME
from .store import ExpiringStore

logger = logging.getLogger(LOGGER_NAME)

SECUREKV_STORE = web.AppKey("securekv_store", ExpiringStore)


def setup_store(app: web.Application, store: ExpiringStore) -> ExpiringStore:
    """Register ``store`` on the application and close it on cleanup.

    Raises:
        RuntimeError: If a store is already registered on the application.
    """
    if SECUREKV_STORE in app:
        raise RuntimeError("A SecureKV store is already registered on this app")
    app[SECUREKV_STORE] = store

    async def _close_store(app: web.Application) -> None:
        await app[SECUREKV_STORE].close()
        logger.debug("SecureKV store closed")

    app.on_cleanup.append(_close_store)
    return store


def get_store(request: web.Request) -> ExpiringStore:
    """Return the store registered on the request's application.

    Raises:
        RuntimeError: If ``setup_store`` was not called for the app.
    """
    try:
        return request.config_dict[SECUREKV_STORE]
    except KeyError:
        raise RuntimeError(
            "SecureKV store not configured, call setup_store(app, store)"
        ) from None
