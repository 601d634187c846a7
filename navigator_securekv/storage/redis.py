"""RedisStorage — blobs persisted in Redis through an async client."""
from typing import Any, Optional

from .base import SecureStorage


class RedisStorage(SecureStorage):
    """Storage backed by a ``redis.asyncio``-compatible client.

    The client is injected and any object with async ``get``, ``set`` and
    ``delete`` works, so this package does not depend on a Redis library;
    install ``redis`` (``redis.asyncio``) yourself to get one.

    Blobs are binary when this adapter sits under ``EncryptedStorage``.
    Use a client with ``decode_responses=False`` there: ``str`` responses
    are re-encoded as UTF-8, which only round-trips a plaintext store.

    Args:
        redis: client exposing async ``get``, ``set``, ``delete``.
        prefix: optional prefix for every Redis key (``"{prefix}:{key}"``).
        close_client: close the client on ``close()``.
    """

    def __init__(
        self,
        redis: Any,
        prefix: str = "securekv",
        close_client: bool = False,
    ):
        self._redis = redis
        self._prefix = prefix
        self._close_client = close_client

    def _redis_key(self, key: str) -> str:
        """Build Redis key."""
        return f"{self._prefix}:{key}" if self._prefix else key

    async def put(self, key: str, data: bytes) -> None:
        await self._redis.set(self._redis_key(key), data)

    async def get(self, key: str) -> Optional[bytes]:
        value = await self._redis.get(self._redis_key(key))
        if isinstance(value, str):
            # client created with decode_responses=True
            return value.encode("utf-8")
        return value

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._redis_key(key))

    async def close(self) -> None:
        if self._close_client:
            await self._redis.aclose()
