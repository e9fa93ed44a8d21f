"""Abstract base class for cache service providers.

Defines the contract for the key-value store behind the cache-aside
pipeline.  Values are opaque bytes; serialization belongs to the caller.
Implementations may use Redis, an in-memory dict, or any other store that
supports per-key expiry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are async so network-backed stores never block the
    event loop.  Implementations must be safe for concurrent use by many
    requests without external locking.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.

        Returns
        -------
        bytes or None
            The cached value if present and not expired; ``None`` otherwise.

        Raises
        ------
        CacheUnavailableError
            If the store cannot be reached or the round trip times out.
        """

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: int) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds.

        Raises
        ------
        CacheUnavailableError
            On connection or write failure.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the store answers.  Never raises."""

    @abstractmethod
    async def close(self) -> None:
        """Release pooled connections.  Called once at shutdown."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``'redis'``."""
