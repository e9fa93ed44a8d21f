"""Core domain models for sample relationships.

Defines the inbound query shape, the response fragment, and the cache
envelope.  All models use frozen config so a fragment built on the miss
path cannot be mutated between normalization and cache write-back.

Key relationships:
    - TrackGraphFragment has one root TrackData and many SampleRelationship
    - FragmentCacheEntry wraps a TrackGraphFragment with a schema version
    - TrackQuery is turned into a cache key by samplegraph.pipeline.keys
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Bumped whenever the cached JSON layout changes.  Entries written by an
# older service version fail validation and are treated as cache misses.
CACHE_SCHEMA_VERSION = 1


class RelationshipDirection(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Direction of a sample edge, relative to the fragment's root track."""

    USES_SAMPLE_OF = "USES_SAMPLE_OF"  # root contains a sample of target
    SAMPLED_BY = "SAMPLED_BY"          # target contains a sample of root


class TrackData(BaseModel):
    """Minimal description of a track: provider id, display title, primary artist."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(gt=0)
    title: str = ""
    artist: str = ""


class SampleRelationship(BaseModel):
    """A directed edge between the root track and one related track.

    ``target_id`` is required and positive: an edge without a target is
    dropped during normalization and can never be constructed here.
    """

    model_config = ConfigDict(frozen=True)

    source_id: int = Field(gt=0)
    target_id: int = Field(gt=0)
    source_title: str = ""
    source_artist: str = ""
    target_title: str = ""
    target_artist: str = ""
    direction: RelationshipDirection

    @property
    def edge_key(self) -> tuple[int, int, RelationshipDirection]:
        """Identity used for exact-duplicate elimination."""
        return (self.source_id, self.target_id, self.direction)


class TrackQuery(BaseModel):
    """Inbound request: either a provider track id or a title/artist pair.

    Exactly one form must be given.  ``artist`` is optional for the text
    form but sharpens the search-hit selection when present.
    """

    model_config = ConfigDict(frozen=True)

    track_id: int | None = Field(default=None, gt=0)
    title: str | None = None
    artist: str | None = None

    @model_validator(mode="after")
    def _exactly_one_form(self) -> TrackQuery:
        has_text = bool(self.title and self.title.strip())
        if self.track_id is None and not has_text:
            raise ValueError("either track_id or title is required")
        if self.track_id is not None and (has_text or (self.artist and self.artist.strip())):
            raise ValueError("track_id cannot be combined with title/artist")
        return self

    @property
    def is_by_id(self) -> bool:
        return self.track_id is not None


class TrackGraphFragment(BaseModel):
    """Root track plus its directly known sample relationships.

    ``relationships`` keeps provider order (the provider's relevance
    ranking); no secondary sort is ever applied.
    """

    model_config = ConfigDict(frozen=True)

    track: TrackData
    relationships: tuple[SampleRelationship, ...] = ()


class FragmentCacheEntry(BaseModel):
    """Serialized envelope stored in the cache for one fragment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: int = Field(default=CACHE_SCHEMA_VERSION, alias="schema")
    fragment: TrackGraphFragment

    @model_validator(mode="after")
    def _current_schema(self) -> FragmentCacheEntry:
        if self.schema_version != CACHE_SCHEMA_VERSION:
            raise ValueError(f"stale cache schema {self.schema_version}")
        return self

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class SearchCacheEntry(BaseModel):
    """Serialized envelope stored in the cache for one search query."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: int = Field(default=CACHE_SCHEMA_VERSION, alias="schema")
    results: tuple[TrackData, ...] = ()

    @model_validator(mode="after")
    def _current_schema(self) -> SearchCacheEntry:
        if self.schema_version != CACHE_SCHEMA_VERSION:
            raise ValueError(f"stale cache schema {self.schema_version}")
        return self

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")
