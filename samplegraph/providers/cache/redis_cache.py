"""Redis cache provider using ``redis.asyncio``.

Production backend for the cache-aside pipeline.  The client owns a
connection pool: each command checks a connection out and returns it on
every exit path, including timeouts and errors.  Every round trip is
bounded by the (short) cache timeout so a degraded Redis never stalls a
request for longer than that.
"""

from __future__ import annotations

import asyncio

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.utils.errors import CacheUnavailableError
from samplegraph.utils.logging import get_logger

_MAX_CONNECTIONS = 50


class RedisCacheProvider(ICacheProvider):
    """Cache provider backed by a Redis server.

    Parameters
    ----------
    client:
        Injected ``redis.asyncio.Redis`` client (bytes responses).
    timeout:
        Upper bound in seconds for a single cache round trip.
    """

    def __init__(self, client: aioredis.Redis, timeout: float) -> None:
        self._client = client
        self._timeout = timeout
        self._logger = get_logger(__name__)

    @classmethod
    def from_url(cls, url: str, timeout: float) -> RedisCacheProvider:
        """Build a provider with a pooled client for *url*.

        No connection is opened here; the pool connects lazily on the
        first command, so an unreachable Redis at startup only degrades
        requests to cache bypass.
        """
        client = aioredis.from_url(
            url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
            max_connections=_MAX_CONNECTIONS,
        )
        return cls(client, timeout)

    async def get(self, key: str) -> bytes | None:
        try:
            value = await asyncio.wait_for(self._client.get(key), timeout=self._timeout)
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise CacheUnavailableError(
                message=f"GET {key} failed: {type(exc).__name__}",
                provider_name=self.get_provider_name(),
            ) from exc
        if value is None:
            self._logger.debug("cache_miss", key=key)
            return None
        self._logger.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: bytes, ttl: int) -> None:
        try:
            await asyncio.wait_for(
                self._client.set(key, value, ex=ttl),
                timeout=self._timeout,
            )
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise CacheUnavailableError(
                message=f"SET {key} failed: {type(exc).__name__}",
                provider_name=self.get_provider_name(),
            ) from exc
        self._logger.debug("cache_set", key=key, ttl=ttl)

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self._client.ping(), timeout=self._timeout))
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            self._logger.warning("cache_ping_failed", error=str(exc) or type(exc).__name__)
            return False

    async def close(self) -> None:
        await self._client.aclose()

    def get_provider_name(self) -> str:
        return "redis"
