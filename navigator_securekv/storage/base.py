"""SecureStorage — the byte-string primitive the store is layered on."""
from abc import ABC, abstractmethod
from typing import Optional


class SecureStorage(ABC):
    """Atomic get/put/delete over byte strings keyed by string identifiers.

    Implementations provide at least last-writer-wins atomicity per key.
    Any exception raised is reported by the store as a persistence error;
    timeouts are the adapter's own policy.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes) -> None:
        """Create or overwrite the blob stored under ``key``."""
        ...

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the stored blob, or ``None`` if not found."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete a blob. No-op if the key does not exist."""
        ...

    async def close(self) -> None:
        """Release adapter resources, if any."""
