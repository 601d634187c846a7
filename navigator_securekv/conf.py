"""Default settings, overridable from SECUREKV_* environment variables."""
import os

ENV_PREFIX = "SECUREKV_"

# logger name shared by every module
LOGGER_NAME = "navigator.securekv"

MAX_KEY_LENGTH = 255


def env_settings() -> dict[str, str]:
    """Current SECUREKV_* variables, keyed by lowercased name without prefix.

    ``SECUREKV_AUTH_TOKEN_TTL`` becomes ``auth_token_ttl``.
    """
    return {
        name[len(ENV_PREFIX):].lower(): value
        for name, value in os.environ.items()
        if name.startswith(ENV_PREFIX)
    }


_env = env_settings()

# store namespace, prefixed to every physical key as "{namespace}:{key}"
SECUREKV_NAMESPACE = _env.get("namespace", "")

# default lifetimes, in milliseconds
AUTH_TOKEN_TTL = int(_env.get("auth_token_ttl", 24 * 60 * 60 * 1000))
REFRESH_TOKEN_TTL = int(_env.get("refresh_token_ttl", 7 * 24 * 60 * 60 * 1000))

CIPHER_BACKEND = _env.get("cipher_backend", "aesgcm").lower()
