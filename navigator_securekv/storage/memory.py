"""MemoryStorage — dict-backed storage for development and testing."""
from typing import Optional

from .base import SecureStorage


class MemoryStorage(SecureStorage):
    """In-memory storage. Data is lost on process exit and is NOT encrypted;
    wrap it with ``EncryptedStorage`` when that matters."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    async def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
