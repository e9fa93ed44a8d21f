"""Typed models for the upstream provider's (Genius API) JSON payloads.

The provider's responses are large and loosely typed.  Parsing is a single
explicit step that either produces a typed payload or raises
``UpstreamMalformedError``:

    * required fields are enumerated (``response`` envelope, ``song`` object
      for song lookups, ``hits`` list for searches);
    * unknown/extra fields are ignored;
    * ``null`` display strings (titles, artist names) read as ``""``;
    * individual related-song records that fail validation are replaced by
      ``None`` and relationship groups that fail validation are dropped, so
      one bad sub-record never fails the whole payload.  The normalizer
      skips the ``None`` entries later.

Example song payload (trimmed)::

    {"meta": {"status": 200},
     "response": {"song": {
         "id": 1, "title": "A", "title_with_featured": "A (Ft. B)",
         "primary_artist": {"name": "Artist A"},
         "song_relationships": [
             {"relationship_type": "samples",
              "songs": [{"id": 2, "title": "B", "primary_artist": {"name": "C"}}]}
         ]}}}
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from samplegraph.utils.errors import UpstreamMalformedError

_PROVIDER_NAME = "genius"


class RelationshipType(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Relationship vocabulary used by the provider's ``song_relationships``."""

    SAMPLES = "samples"
    SAMPLED_IN = "sampled_in"
    INTERPOLATES = "interpolates"
    INTERPOLATED_BY = "interpolated_by"
    COVER_OF = "cover_of"
    COVERED_BY = "covered_by"
    REMIX_OF = "remix_of"
    REMIXED_BY = "remixed_by"
    LIVE_VERSION_OF = "live_version_of"
    PERFORMED_LIVE_AS = "performed_live_as"
    TRANSLATION_OF = "translation_of"
    TRANSLATIONS = "translations"
    UNKNOWN = "unknown"

    @classmethod
    def from_provider(cls, value: str | None) -> RelationshipType:
        """Map a raw provider string to a member, falling back to ``UNKNOWN``."""
        try:
            return cls(value or "unknown")
        except ValueError:
            return cls.UNKNOWN


class ProviderArtist(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _null_name_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class ProviderSongSummary(BaseModel):
    """The subset of a provider song record the service uses."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | None = None
    title: str = ""
    title_with_featured: str | None = None
    primary_artist: ProviderArtist | None = None

    @field_validator("title", "title_with_featured", mode="before")
    @classmethod
    def _null_title_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def display_title(self) -> str:
        return self.title_with_featured or self.title

    @property
    def artist_name(self) -> str:
        return self.primary_artist.name if self.primary_artist else ""


class ProviderSongRelationship(BaseModel):
    """One ``song_relationships`` group: a type plus the songs it applies to."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    relationship_type: RelationshipType = RelationshipType.UNKNOWN
    songs: list[ProviderSongSummary | None] = []

    @field_validator("relationship_type", mode="before")
    @classmethod
    def _tolerate_unknown_type(cls, value: Any) -> RelationshipType:
        return RelationshipType.from_provider(value if isinstance(value, str) else None)

    @field_validator("songs", mode="before")
    @classmethod
    def _drop_invalid_songs(cls, value: Any) -> list[ProviderSongSummary | None]:
        if not isinstance(value, list):
            return []
        parsed: list[ProviderSongSummary | None] = []
        for raw in value:
            try:
                parsed.append(ProviderSongSummary.model_validate(raw))
            except ValidationError:
                parsed.append(None)
        return parsed


class ProviderSong(ProviderSongSummary):
    """A full song record as returned by ``GET /songs/{id}``."""

    song_relationships: list[ProviderSongRelationship] = []

    @field_validator("song_relationships", mode="before")
    @classmethod
    def _drop_invalid_groups(cls, value: Any) -> list[ProviderSongRelationship]:
        if not isinstance(value, list):
            return []
        groups: list[ProviderSongRelationship] = []
        for raw in value:
            try:
                groups.append(ProviderSongRelationship.model_validate(raw))
            except ValidationError:
                continue
        return groups


class ProviderTrackPayload(BaseModel):
    """Parsed result of a track lookup, the input to normalization."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    song: ProviderSong


class ProviderSearchHit(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = ""
    result: ProviderSongSummary | None = None


class ProviderSearchPayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    hits: list[ProviderSearchHit]

    def songs(self) -> list[ProviderSongSummary]:
        """Song hits with a usable (positive) id, in provider order."""
        return [
            hit.result
            for hit in self.hits
            if hit.type == "song"
            and hit.result is not None
            and hit.result.id is not None
            and hit.result.id > 0
        ]


def _response_envelope(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict) or not isinstance(data.get("response"), dict):
        raise UpstreamMalformedError(
            message="Payload is missing the 'response' object",
            provider_name=_PROVIDER_NAME,
        )
    return data["response"]


def parse_track_payload(data: Any) -> ProviderTrackPayload:
    """Parse a decoded ``GET /songs/{id}`` body.

    Raises:
        UpstreamMalformedError: If the envelope or the song object is missing
            or has the wrong shape.
    """
    response = _response_envelope(data)
    if not isinstance(response.get("song"), dict):
        raise UpstreamMalformedError(
            message="Payload is missing the 'song' object",
            provider_name=_PROVIDER_NAME,
        )
    try:
        return ProviderTrackPayload.model_validate(response)
    except ValidationError as exc:
        raise UpstreamMalformedError(
            message=f"Song payload failed validation: {exc.error_count()} error(s)",
            provider_name=_PROVIDER_NAME,
        ) from exc


def parse_search_payload(data: Any) -> ProviderSearchPayload:
    """Parse a decoded ``GET /search`` body.

    Raises:
        UpstreamMalformedError: If the envelope or the hits list is missing.
    """
    response = _response_envelope(data)
    try:
        return ProviderSearchPayload.model_validate(response)
    except ValidationError as exc:
        raise UpstreamMalformedError(
            message=f"Search payload failed validation: {exc.error_count()} error(s)",
            provider_name=_PROVIDER_NAME,
        ) from exc
