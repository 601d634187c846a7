"""
ExpiringStore — typed, namespaced and time-limited storage of sensitive values.

Provides the public API of Navigator SecureKV:
- ``set(key, value, expires_in)`` — wrap a value in an envelope and persist it
- ``get(key, default)`` — return a value; expired entries are evicted on read
- ``remove(key)`` / ``has(key)`` — delete and check a key
- ``get_item_info(key)`` / ``get_stats()`` — read-only introspection
- ``clear_all(keys)`` / ``clear_expired(keys)`` — bulk maintenance

Expiration is only evaluated lazily, on access; there is no background sweep.
Reads never raise for corrupt payloads or storage read failures, they are
logged and treated as a miss. Writes and deletes raise ``PersistenceError``.

Security Note:
    Never log values. Only log key names, operations and counts.
"""
import asyncio
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, field_validator

from . import codec, events
from .conf import (
    LOGGER_NAME,
    SECUREKV_NAMESPACE,
    AUTH_TOKEN_TTL,
    REFRESH_TOKEN_TTL,
    MAX_KEY_LENGTH,
    env_settings,
)
from .codec import Envelope, Lifetime
from .exceptions import DecodeError, PersistenceError
from .keys import SecureKey, key_name, well_known_keys
from .stats import ItemInfo, StoreStats, collect_stats
from .storage.base import SecureStorage

logger = logging.getLogger(LOGGER_NAME)

Key = Union[str, SecureKey]


class StoreConfig(BaseModel):
    """Validated store configuration."""

    namespace: str = Field(default=SECUREKV_NAMESPACE, max_length=64)
    auth_token_ttl: int = Field(default=AUTH_TOKEN_TTL, ge=1)
    refresh_token_ttl: int = Field(default=REFRESH_TOKEN_TTL, ge=1)

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("Store namespace cannot contain ':'")
        return v

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Create StoreConfig from the SECUREKV_* environment variables."""
        env = env_settings()
        return cls(**{name: env[name] for name in cls.model_fields if name in env})


class ExpiringStore:
    """Expiring key-value store over a SecureStorage adapter.

    Construct one instance at startup and hand it to its consumers.

    Args:
        storage: byte-string storage the envelopes are persisted in.
        config: store configuration; defaults from ``conf``.
        clock: callable returning the current time in ms since epoch.
        registry: well-known keys used by ``get_stats()`` and ``clear()``;
            defaults to every ``SecureKey``.
    """

    def __init__(
        self,
        storage: SecureStorage,
        config: Optional[StoreConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        registry: Optional[Iterable[Key]] = None,
    ):
        self._storage = storage
        self.config = config or StoreConfig()
        self._clock = clock or codec.now_ms
        if registry is None:
            self._registry = well_known_keys()
        else:
            self._registry = [key_name(k) for k in registry]
        self._notifier = events.ChangeNotifier()

    def __repr__(self) -> str:
        return (
            f'<ExpiringStore [namespace:{self.config.namespace!r}] '
            f'storage={type(self._storage).__name__}>'
        )

    @property
    def storage(self) -> SecureStorage:
        return self._storage

    @property
    def registry(self) -> list[str]:
        return list(self._registry)

    # ------------------------------------------------------------------
    # Key helpers
    # ------------------------------------------------------------------

    def _validate_key(self, key: Key) -> str:
        """Validate a key and return its name.

        Raises:
            ValueError: If key is empty or too long.
        """
        name = key_name(key)
        if not name:
            raise ValueError("Store key cannot be empty")
        if len(name) > MAX_KEY_LENGTH:
            raise ValueError(
                f"Store key cannot exceed {MAX_KEY_LENGTH} characters"
            )
        return name

    def storage_key(self, key: Key) -> str:
        """Physical key used in the underlying storage."""
        name = self._validate_key(key)
        if self.config.namespace:
            return f"{self.config.namespace}:{name}"
        return name

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def _fetch(self, name: str) -> Optional[bytes]:
        """Raw bytes for a key; storage read failures count as a miss."""
        try:
            data = await self._storage.get(self.storage_key(name))
        except Exception as err:  # pylint: disable=W0718
            logger.error("SecureKV read failed for key=%s: %s", name, err)
            return None
        return data or None

    async def _load(self, name: str) -> tuple[Optional[Envelope], bool]:
        """Decode a live envelope, evicting it when expired.

        Returns:
            Tuple of (envelope or None, whether it was found expired).
        """
        data = await self._fetch(name)
        if data is None:
            return None, False
        try:
            envelope = codec.decode(data)
        except DecodeError as err:
            logger.warning("SecureKV corrupt payload for key=%s: %s", name, err)
            return None, False
        if envelope.is_expired(self._clock()):
            logger.debug("SecureKV expired: key=%s", name)
            await self._evict(name)
            return None, True
        return envelope, False

    async def _evict(self, name: str) -> None:
        try:
            await self._delete(name, events.EXPIRE)
        except PersistenceError as err:
            logger.warning("SecureKV could not evict key=%s: %s", name, err)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def set(
        self,
        key: Key,
        value: Any,
        expires_in: Optional[Lifetime] = None,
    ) -> None:
        """Store a value, replacing any previous envelope for the key.

        Args:
            key: key name or SecureKey.
            value: JSON-serializable value (``bytes`` supported).
            expires_in: lifetime in milliseconds or as ``timedelta``;
                None means the value never expires.

        Raises:
            ValueError: If key or lifetime is invalid.
            TypeError: If value is not serializable.
            PersistenceError: If the storage write fails.
        """
        name = self._validate_key(key)
        data = codec.encode(value, self._clock(), expires_in)
        try:
            await self._storage.put(self.storage_key(name), data)
        except Exception as err:
            logger.error("SecureKV write failed for key=%s: %s", name, err)
            raise PersistenceError("set", name, str(err)) from err
        logger.debug("SecureKV set: key=%s", name)
        self._notifier.notify(events.SET, name)

    async def get(self, key: Key, default: Any = None) -> Any:
        """Return the value stored for key, or ``default`` on any miss.

        A miss is an absent, corrupt or expired entry; expired entries
        are removed from storage as a side effect.
        """
        name = self._validate_key(key)
        envelope, _ = await self._load(name)
        if envelope is None:
            return default
        return envelope.value

    async def _delete(self, name: str, action: str) -> None:
        try:
            await self._storage.delete(self.storage_key(name))
        except Exception as err:
            logger.error("SecureKV delete failed for key=%s: %s", name, err)
            raise PersistenceError("remove", name, str(err)) from err
        logger.debug("SecureKV %s: key=%s", action, name)
        self._notifier.notify(action, name)

    async def remove(self, key: Key) -> None:
        """Delete a key. Removing an absent key succeeds.

        Raises:
            PersistenceError: If the storage delete fails.
        """
        await self._delete(self._validate_key(key), events.REMOVE)

    async def has(self, key: Key) -> bool:
        """True if ``get`` would find a live value (evicts like ``get``)."""
        name = self._validate_key(key)
        envelope, _ = await self._load(name)
        return envelope is not None

    async def get_item_info(self, key: Key) -> Optional[ItemInfo]:
        """Envelope metadata for a key, never evicting.

        Returns:
            ItemInfo (``exists=False`` when absent), or None if the stored
            payload is corrupt or storage could not be read.
        """
        name = self._validate_key(key)
        try:
            data = await self._storage.get(self.storage_key(name))
        except Exception as err:  # pylint: disable=W0718
            logger.error("SecureKV read failed for key=%s: %s", name, err)
            return None
        if not data:
            return ItemInfo(exists=False, is_expired=False)
        try:
            envelope = codec.decode(data)
        except DecodeError as err:
            logger.warning("SecureKV corrupt payload for key=%s: %s", name, err)
            return None
        return ItemInfo(
            exists=True,
            timestamp=envelope.timestamp,
            expires_at=envelope.expires_at,
            is_expired=envelope.is_expired(self._clock()),
        )

    async def get_stats(self) -> StoreStats:
        """Total/valid/expired counts over the well-known keys."""
        return await collect_stats(self, self._registry)

    async def get_all_keys(self) -> list[str]:
        """Well-known keys that currently hold data, expired or not."""
        infos = await asyncio.gather(
            *(self.get_item_info(k) for k in self._registry)
        )
        return [
            key for key, info in zip(self._registry, infos)
            if info is not None and info.exists
        ]

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    async def get_many(self, keys: Iterable[Key]) -> dict[str, Any]:
        """Values for several keys; misses map to None."""
        names = [self._validate_key(k) for k in keys]
        values = await asyncio.gather(*(self.get(n) for n in names))
        return dict(zip(names, values))

    async def set_many(
        self,
        items: Mapping[Key, Any],
        expires_in: Optional[Lifetime] = None,
    ) -> None:
        """Store several values concurrently with the same lifetime.

        Raises:
            PersistenceError: If any write fails.
        """
        await asyncio.gather(
            *(self.set(k, v, expires_in) for k, v in items.items())
        )

    async def remove_many(self, keys: Iterable[Key]) -> None:
        """Remove several keys concurrently.

        Raises:
            PersistenceError: If any delete fails.
        """
        await asyncio.gather(*(self.remove(k) for k in keys))

    async def clear_all(self, keys: Iterable[Key]) -> Set[str]:
        """Remove every given key, best-effort.

        All removals are issued even when some fail.

        Returns:
            Names of the keys whose removal failed.
        """
        names = [self._validate_key(k) for k in keys]
        results = await asyncio.gather(
            *(self.remove(n) for n in names), return_exceptions=True
        )
        failed = {
            name for name, result in zip(names, results)
            if isinstance(result, Exception)
        }
        logger.info(
            "SecureKV cleared %d key(s), %d failure(s)",
            len(names) - len(failed), len(failed),
        )
        return failed

    async def clear(self) -> Set[str]:
        """Remove every well-known key, best-effort."""
        return await self.clear_all(self._registry)

    async def clear_expired(self, keys: Optional[Iterable[Key]] = None) -> int:
        """Read each key so expired entries are evicted by the read.

        Args:
            keys: keys to probe; the well-known keys when omitted.

        Returns:
            Number of keys found expired.
        """
        names = self._registry if keys is None else [
            self._validate_key(k) for k in keys
        ]
        results = await asyncio.gather(*(self._load(n) for n in names))
        cleared = sum(1 for _, expired in results if expired)
        if cleared:
            logger.info("SecureKV evicted %d expired key(s)", cleared)
        return cleared

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: events.Listener) -> Callable[[], None]:
        """Register a listener called after every successful mutation.

        Returns:
            Callable removing exactly this registration.
        """
        return self._notifier.subscribe(listener)

    async def close(self) -> None:
        await self._storage.close()
