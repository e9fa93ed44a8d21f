"""In-memory cache provider using cachetools.TLRUCache.

Simple, fast cache suitable for development and single-process deployments
(selected with ``DATABASE_URL=memory://``).  Can be swapped for Redis via
the ICacheProvider interface.
"""

from __future__ import annotations

import time

from cachetools import TLRUCache

from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.utils.logging import get_logger

logger = get_logger(__name__)


def _expires_at(_key: str, value: tuple[bytes, int], now: float) -> float:
    # Each entry is stored as (payload, ttl_seconds).
    return now + value[1]


class MemoryCacheProvider(ICacheProvider):
    """In-memory cache with per-entry expiry backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    timer:
        Clock used for expiry; injectable so tests can advance time.
    """

    def __init__(self, max_size: int = 1000, timer=time.monotonic) -> None:
        self._cache: TLRUCache[str, tuple[bytes, int]] = TLRUCache(
            maxsize=max_size,
            ttu=_expires_at,
            timer=timer,
        )

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return entry[0]

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store *value* under *key* for *ttl* seconds."""
        self._cache[key] = (value, ttl)
        logger.debug("cache_set", key=key, ttl=ttl)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._cache.clear()

    def get_provider_name(self) -> str:
        return "memory"
