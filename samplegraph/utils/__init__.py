"""Utility modules for SampleGraph.

- **errors** -- Domain exception hierarchy rooted at SampleGraphError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **concurrency** -- semaphore-bounded ``asyncio.gather`` used by the graph
  builder to fan out upstream lookups.
- **text_normalizer** -- query normalization for cache keys and rapidfuzz
  scoring of provider search hits.
"""

from samplegraph.utils.concurrency import throttled_gather
from samplegraph.utils.errors import (
    CacheUnavailableError,
    ConfigurationError,
    NormalizationError,
    ResolutionFailureReason,
    SampleGraphError,
    TrackResolutionFailedError,
    UpstreamError,
    UpstreamMalformedError,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
)
from samplegraph.utils.logging import configure_logging, get_logger
from samplegraph.utils.text_normalizer import match_confidence, normalize_query_text

__all__ = [
    "CacheUnavailableError",
    "ConfigurationError",
    "NormalizationError",
    "ResolutionFailureReason",
    "SampleGraphError",
    "TrackResolutionFailedError",
    "UpstreamError",
    "UpstreamMalformedError",
    "UpstreamNotFoundError",
    "UpstreamUnavailableError",
    "configure_logging",
    "get_logger",
    "match_confidence",
    "normalize_query_text",
    "throttled_gather",
]
