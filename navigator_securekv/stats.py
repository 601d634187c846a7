"""Aggregate statistics and read-only introspection of stored envelopes."""
import asyncio
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel, Field

from .conf import LOGGER_NAME

if TYPE_CHECKING:
    from .store import ExpiringStore

logger = logging.getLogger(LOGGER_NAME)


class ItemInfo(BaseModel):
    """Envelope metadata, without the value."""

    exists: bool
    timestamp: Optional[int] = None
    expires_at: Optional[int] = None
    is_expired: bool = False


class StoreStats(BaseModel):
    """Counts over the well-known keys present in storage."""

    total_items: int = 0
    expired_items: int = 0
    valid_items: int = 0
    keys: list[str] = Field(default_factory=list)


async def collect_stats(store: "ExpiringStore", keys: Iterable[str]) -> StoreStats:
    """Build StoreStats from the metadata of every given key.

    Expiry is evaluated from each envelope directly, so expired entries
    that were never read (and therefore never evicted) count as expired.
    Corrupt or unreadable entries are left out of every count.
    """
    keys = list(keys)
    infos = await asyncio.gather(*(store.get_item_info(k) for k in keys))
    stats = StoreStats()
    for key, info in zip(keys, infos):
        if info is None or not info.exists:
            continue
        stats.keys.append(key)
        stats.total_items += 1
        if info.is_expired:
            stats.expired_items += 1
        else:
            stats.valid_items += 1
    logger.debug(
        "Store stats: total=%d valid=%d expired=%d",
        stats.total_items, stats.valid_items, stats.expired_items,
    )
    return stats
