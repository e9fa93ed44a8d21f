"""Public interface definitions for external service providers.

Every external service is accessed through the abstract base classes in
this package; concrete adapters live in ``samplegraph/providers/`` and are
injected by ``samplegraph/main.py`` at startup.

    Interface         →  Concrete implementations
    ───────────────────────────────────────────────────────────────
    ICacheProvider    →  RedisCacheProvider, MemoryCacheProvider
    ITrackProvider    →  GeniusTrackProvider
"""

from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.interfaces.track_provider import ITrackProvider

__all__ = ["ICacheProvider", "ITrackProvider"]
