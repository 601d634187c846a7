"""
Envelope Codec — serialization of stored values with their expiration metadata.

Every value is persisted as an orjson-encoded envelope::

    {"value": <any JSON value>, "timestamp": <ms epoch>, "expiresAt": <ms epoch>}

``expiresAt`` is omitted when the value never expires.
"""
import math
import time
import base64
import binascii
from typing import Any, Optional, Union
from datetime import timedelta
from dataclasses import dataclass

import orjson

from .exceptions import DecodeError

_BYTES_WRAPPER_KEY = "__securekv_bytes_b64__"
_ESCAPE_WRAPPER_KEY = "__securekv_dict__"
_WRAPPER_KEYS = (_BYTES_WRAPPER_KEY, _ESCAPE_WRAPPER_KEY)

Lifetime = Union[int, float, timedelta]


def now_ms() -> int:
    """Current wall-clock time in milliseconds since epoch."""
    return int(time.time() * 1000)


def to_millis(lifetime: Optional[Lifetime]) -> Optional[int]:
    """Normalize a lifetime to integer milliseconds.

    Args:
        lifetime: milliseconds as a number, a ``timedelta``, or None.

    Returns:
        Lifetime in milliseconds, or None for "never expires".

    Raises:
        ValueError: If the lifetime is not strictly positive.
    """
    if lifetime is None:
        return None
    if isinstance(lifetime, timedelta):
        millis = int(lifetime.total_seconds() * 1000)
    elif isinstance(lifetime, bool) or not isinstance(lifetime, (int, float)):
        raise ValueError(f"Invalid lifetime: {lifetime!r}")
    elif isinstance(lifetime, float) and not math.isfinite(lifetime):
        raise ValueError(f"Invalid lifetime: {lifetime!r}")
    else:
        millis = int(lifetime)
    if millis <= 0:
        raise ValueError(f"Lifetime must be positive, got {millis} ms")
    return millis


@dataclass(frozen=True)
class Envelope:
    """Decoded unit of persistence."""
    value: Any
    timestamp: int
    expires_at: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        return self.expires_at is not None and now > self.expires_at


def _is_wrapper(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and len(value) == 1
        and next(iter(value)) in _WRAPPER_KEYS
    )


def _wrap(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {_BYTES_WRAPPER_KEY: base64.b64encode(bytes(value)).decode("ascii")}
    if _is_wrapper(value):
        # a caller dict shaped like a wrapper is escaped, so it decodes as itself
        return {_ESCAPE_WRAPPER_KEY: value}
    return value


def _unwrap(value: Any) -> Any:
    if not _is_wrapper(value):
        return value
    if _ESCAPE_WRAPPER_KEY in value:
        return value[_ESCAPE_WRAPPER_KEY]
    encoded = value[_BYTES_WRAPPER_KEY]
    if not isinstance(encoded, str):
        raise DecodeError("Bytes wrapper must hold a base64 string")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as err:
        raise DecodeError(f"Malformed base64 bytes value: {err}") from err


def _is_millis(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def encode(value: Any, now: int, lifetime: Optional[Lifetime] = None) -> bytes:
    """Build an envelope around ``value`` and serialize it.

    Args:
        value: JSON-serializable payload (``bytes`` are base64-wrapped).
        now: creation instant, milliseconds since epoch.
        lifetime: optional lifetime (ms or ``timedelta``).

    Returns:
        orjson-encoded envelope bytes.

    Raises:
        ValueError: If lifetime is not positive.
        TypeError: If value is not serializable.
    """
    millis = to_millis(lifetime)
    data = {"value": _wrap(value), "timestamp": now}
    if millis is not None:
        data["expiresAt"] = now + millis
    try:
        return orjson.dumps(data)
    except orjson.JSONEncodeError as err:
        raise TypeError(f"Value is not serializable: {err}") from err


def decode(data: Union[bytes, str]) -> Envelope:
    """Parse envelope bytes.

    Raises:
        DecodeError: If data is not a well-formed envelope.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise DecodeError(f"Malformed envelope: {err}") from err
    if not isinstance(parsed, dict) or "value" not in parsed:
        raise DecodeError("Envelope must be an object with a 'value' field")
    timestamp = parsed.get("timestamp")
    if not _is_millis(timestamp):
        raise DecodeError("Envelope 'timestamp' must be an integer")
    expires_at = parsed.get("expiresAt")
    if expires_at is not None and not _is_millis(expires_at):
        raise DecodeError("Envelope 'expiresAt' must be an integer")
    return Envelope(
        value=_unwrap(parsed["value"]),
        timestamp=timestamp,
        expires_at=expires_at,
    )
