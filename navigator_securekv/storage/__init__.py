"""Storage adapters the store persists its envelopes through.

Security Note (Threat Model):
    ``EncryptedStorage`` protects blobs at rest. Decrypted envelopes exist
    in process memory while a value is being read or written; protecting
    process memory requires HSM/secure enclave integration which is out
    of scope.
"""

from .base import SecureStorage
from .memory import MemoryStorage
from .redis import RedisStorage
from .encrypted import EncryptedStorage
from .keyring import Keyring, generate_master_key, parse_master_keys, format_master_keys

__all__ = [
    "SecureStorage",
    "MemoryStorage",
    "RedisStorage",
    "EncryptedStorage",
    "Keyring",
    "generate_master_key",
    "parse_master_keys",
    "format_master_keys",
]
