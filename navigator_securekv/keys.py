"""Registry of well-known keys.

Caller-defined keys are plain strings and never pass through this registry;
they are invisible to ``get_stats()`` because the secure storage cannot
enumerate arbitrary keys.
"""
from enum import Enum


class SecureKey(str, Enum):
    # authentication
    AUTH_TOKEN = "auth_token"
    REFRESH_TOKEN = "refresh_token"
    USER_ID = "user_id"
    SESSION_DATA = "session_data"
    # sensitive configuration
    API_KEYS = "api_keys"
    ENCRYPTION_KEY = "encryption_key"
    BIOMETRIC_ENABLED = "biometric_enabled"
    # sensitive user data
    USER_CREDENTIALS = "user_credentials"
    PAYMENT_INFO = "payment_info"
    PERSONAL_DATA = "personal_data"

    def __str__(self) -> str:
        return self.value


AUTH_KEYS = (
    SecureKey.AUTH_TOKEN,
    SecureKey.REFRESH_TOKEN,
    SecureKey.USER_ID,
    SecureKey.SESSION_DATA,
)


def well_known_keys() -> list[str]:
    """Return every well-known key name, in declaration order."""
    return [k.value for k in SecureKey]


def key_name(key) -> str:
    """Normalize a SecureKey member or a plain string to its key name."""
    if isinstance(key, SecureKey):
        return key.value
    return str(key)
