"""Per-request phases of the cache-aside query pipeline.

The orchestrator (samplegraph/pipeline/orchestrator.py) walks every request
through these phases and logs each transition.  Nothing here is persisted;
a phase only lives for one request/response cycle.

    START -> KEY_DERIVED -> CACHE_CHECKED -> HIT_RETURN
                                          -> MISS_FETCHING -> UPSTREAM_OK -> NORMALIZING
                                                              -> CACHE_WRITING -> RETURN
                                          -> MISS_FETCHING -> UPSTREAM_FAILED -> RETURN_ERROR
"""

from __future__ import annotations

from enum import Enum


class QueryPhase(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Phases of a single cache-aside query."""

    START = "START"
    KEY_DERIVED = "KEY_DERIVED"
    CACHE_CHECKED = "CACHE_CHECKED"
    HIT_RETURN = "HIT_RETURN"
    MISS_FETCHING = "MISS_FETCHING"
    UPSTREAM_OK = "UPSTREAM_OK"
    NORMALIZING = "NORMALIZING"
    CACHE_WRITING = "CACHE_WRITING"
    RETURN = "RETURN"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    RETURN_ERROR = "RETURN_ERROR"
