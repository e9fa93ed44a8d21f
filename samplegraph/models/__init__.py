"""SampleGraph domain models, re-exported from one place.

The models are organized by concern:
    - track.py:    queries, sample edges, fragments and cache envelopes
    - provider.py: typed upstream (Genius) payloads and their parse step
    - graph.py:    multi-degree graph built from fragments
    - pipeline.py: per-request phases of the cache-aside pipeline
"""

from __future__ import annotations

from samplegraph.models.graph import GraphEdge, GraphNode, TrackGraph
from samplegraph.models.pipeline import QueryPhase
from samplegraph.models.provider import (
    ProviderSearchPayload,
    ProviderSong,
    ProviderSongRelationship,
    ProviderSongSummary,
    ProviderTrackPayload,
    RelationshipType,
    parse_search_payload,
    parse_track_payload,
)
from samplegraph.models.track import (
    CACHE_SCHEMA_VERSION,
    FragmentCacheEntry,
    RelationshipDirection,
    SampleRelationship,
    SearchCacheEntry,
    TrackData,
    TrackGraphFragment,
    TrackQuery,
)

__all__ = [
    "CACHE_SCHEMA_VERSION",
    "FragmentCacheEntry",
    "GraphEdge",
    "GraphNode",
    "ProviderSearchPayload",
    "ProviderSong",
    "ProviderSongRelationship",
    "ProviderSongSummary",
    "ProviderTrackPayload",
    "QueryPhase",
    "RelationshipDirection",
    "RelationshipType",
    "SampleRelationship",
    "SearchCacheEntry",
    "TrackData",
    "TrackGraph",
    "TrackGraphFragment",
    "TrackQuery",
    "parse_search_payload",
    "parse_track_payload",
]
