"""Exceptions raised by Navigator SecureKV."""
from typing import Optional


class SecureStoreError(Exception):
    """Base exception for all store errors."""


class PersistenceError(SecureStoreError):
    """The underlying secure storage failed to write or delete a key.

    The original adapter exception is chained as ``__cause__``.
    """

    def __init__(self, operation: str, key: str, detail: Optional[str] = None):
        self.operation = operation
        self.key = key
        msg = f"Storage error during '{operation}' of key '{key}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DecodeError(SecureStoreError):
    """Stored bytes are not a valid envelope."""
