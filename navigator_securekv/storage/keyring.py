"""
Keyring — versioned master keys for EncryptedStorage.

All key versions live in one setting, read through ``conf.env_settings()``
like every other SecureKV setting::

    SECUREKV_MASTER_KEYS = "1:<base64 32-byte key>,2:<base64 32-byte key>"
    SECUREKV_ACTIVE_KEY_ID = 2     # optional, newest version when unset

Security Note:
    Never log key material. Only log key versions.
"""
import base64
import binascii
import secrets
import logging
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..conf import LOGGER_NAME, CIPHER_BACKEND, env_settings
from .crypto import KEY_LENGTH, get_cipher_cls

logger = logging.getLogger(LOGGER_NAME)

MAX_KEY_VERSION = 0xFFFF  # stored as uint16 in every blob


def generate_master_key() -> str:
    """Random master key, base64-encoded for SECUREKV_MASTER_KEYS."""
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


def parse_master_keys(raw: str) -> dict[int, bytes]:
    """Parse the ``"<version>:<base64>,..."`` keyring format.

    Raises:
        ValueError: On a malformed entry, a repeated version, a version
            outside uint16 or a key that is not 32 bytes.
    """
    keys: dict[int, bytes] = {}
    for entry in filter(None, (e.strip() for e in raw.split(","))):
        version, sep, encoded = entry.partition(":")
        if not sep or not version.strip().isdigit():
            raise ValueError(
                "Master key entries must look like '<version>:<base64 key>'"
            )
        version = int(version)
        if version in keys:
            raise ValueError(f"Master key version {version} is repeated")
        try:
            keys[version] = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as err:
            raise ValueError(f"Master key v{version} is not valid base64") from err
    return keys


def format_master_keys(keys: dict[int, bytes]) -> str:
    """Inverse of ``parse_master_keys``."""
    return ",".join(
        f"{version}:{base64.b64encode(key).decode('ascii')}"
        for version, key in sorted(keys.items())
    )


class Keyring(BaseModel):
    """Master keys by version, with the one new blobs are encrypted under.

    ``master_keys`` accepts a mapping or the SECUREKV_MASTER_KEYS string.
    """

    master_keys: dict[int, bytes] = Field(min_length=1)
    active_key_id: Optional[int] = None
    cipher_backend: str = CIPHER_BACKEND

    @field_validator("master_keys", mode="before")
    @classmethod
    def parse_keys(cls, v):
        if isinstance(v, str):
            return parse_master_keys(v)
        return v

    @field_validator("master_keys")
    @classmethod
    def validate_keys(cls, v: dict[int, bytes]) -> dict[int, bytes]:
        for version, key in v.items():
            if not 0 <= version <= MAX_KEY_VERSION:
                raise ValueError(f"Master key version {version} out of range")
            if len(key) != KEY_LENGTH:
                raise ValueError(
                    f"Master key v{version} must be {KEY_LENGTH} bytes, "
                    f"got {len(key)}"
                )
        return v

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        get_cipher_cls(v)
        return v.lower()

    @model_validator(mode="after")
    def resolve_active_key(self) -> "Keyring":
        if self.active_key_id is None:
            self.active_key_id = max(self.master_keys)
        elif self.active_key_id not in self.master_keys:
            raise ValueError(
                f"Active key version {self.active_key_id} not in keyring "
                f"(available: {sorted(self.master_keys)})"
            )
        return self

    @property
    def active_key(self) -> bytes:
        return self.master_keys[self.active_key_id]

    @property
    def cipher_cls(self) -> type:
        return get_cipher_cls(self.cipher_backend)

    def activate(self, key_id: int) -> "Keyring":
        """Copy of this keyring encrypting under ``key_id``.

        Raises:
            KeyError: If key_id is not in the keyring.
        """
        if key_id not in self.master_keys:
            raise KeyError(f"Master key version {key_id} not in keyring")
        return self.model_copy(update={"active_key_id": key_id})

    @classmethod
    def from_env(cls) -> "Keyring":
        """Keyring from SECUREKV_MASTER_KEYS / SECUREKV_ACTIVE_KEY_ID.

        Raises:
            RuntimeError: If SECUREKV_MASTER_KEYS is not set.
        """
        env = env_settings()
        if not env.get("master_keys"):
            raise RuntimeError(
                "No master keys configured. "
                "Set SECUREKV_MASTER_KEYS=1:<base64-encoded-32-byte-key>"
            )
        keyring = cls(
            master_keys=env["master_keys"],
            active_key_id=env.get("active_key_id") or None,
            cipher_backend=env.get("cipher_backend", CIPHER_BACKEND),
        )
        logger.debug(
            "Loaded keyring: versions=%s active=v%d",
            sorted(keyring.master_keys), keyring.active_key_id,
        )
        return keyring
