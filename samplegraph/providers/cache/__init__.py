"""Cache service providers."""

from samplegraph.providers.cache.memory_cache import MemoryCacheProvider
from samplegraph.providers.cache.redis_cache import RedisCacheProvider

__all__ = ["MemoryCacheProvider", "RedisCacheProvider"]
