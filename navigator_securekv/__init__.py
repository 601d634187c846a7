"""Navigator SecureKV — expiring storage of sensitive values.

Security Note (Threat Model):
    Values are only protected at rest when the store is built over
    ``EncryptedStorage`` (or a platform secure storage). Decoded values
    live in process memory while in use; this is an accepted limitation.
"""

from .version import __version__
from .keys import SecureKey, well_known_keys
from .codec import Envelope
from .events import StoreEvent
from .exceptions import SecureStoreError, PersistenceError, DecodeError
from .stats import ItemInfo, StoreStats
from .store import ExpiringStore, StoreConfig
from .auth import AuthStore

__all__ = [
    "__version__",
    "SecureKey",
    "well_known_keys",
    "Envelope",
    "StoreEvent",
    "SecureStoreError",
    "PersistenceError",
    "DecodeError",
    "ItemInfo",
    "StoreStats",
    "ExpiringStore",
    "StoreConfig",
    "AuthStore",
]
