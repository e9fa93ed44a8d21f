"""Normalization of provider payloads into ``TrackGraphFragment``.

Pure functions only: no I/O, no logging, no clock.  The same payload always
yields the same fragment, which is what makes cache hits and misses
indistinguishable to callers.

Rules:
    * only sample-type relationship groups are kept (``samples`` /
      ``sampled_in``, plus ``interpolates`` / ``interpolated_by`` unless
      disabled);
    * related songs without an id are dropped, the rest of the payload
      is still used;
    * exact duplicate edges (same source, target and direction) are
      collapsed, keeping the first occurrence and provider order.
"""

from __future__ import annotations

from samplegraph.models.provider import ProviderTrackPayload, RelationshipType
from samplegraph.models.track import (
    RelationshipDirection,
    SampleRelationship,
    TrackData,
    TrackGraphFragment,
)
from samplegraph.utils.errors import NormalizationError

_SAMPLE_DIRECTIONS: dict[RelationshipType, RelationshipDirection] = {
    RelationshipType.SAMPLES: RelationshipDirection.USES_SAMPLE_OF,
    RelationshipType.SAMPLED_IN: RelationshipDirection.SAMPLED_BY,
}

_INTERPOLATION_DIRECTIONS: dict[RelationshipType, RelationshipDirection] = {
    RelationshipType.INTERPOLATES: RelationshipDirection.USES_SAMPLE_OF,
    RelationshipType.INTERPOLATED_BY: RelationshipDirection.SAMPLED_BY,
}


def direction_for(
    relationship_type: RelationshipType, include_interpolations: bool = True
) -> RelationshipDirection | None:
    """Return the edge direction for a provider relationship type, or ``None`` if irrelevant."""
    if relationship_type in _SAMPLE_DIRECTIONS:
        return _SAMPLE_DIRECTIONS[relationship_type]
    if include_interpolations:
        return _INTERPOLATION_DIRECTIONS.get(relationship_type)
    return None


def transform(
    payload: ProviderTrackPayload, include_interpolations: bool = True
) -> TrackGraphFragment:
    """Map a provider track payload to the service's fragment model.

    Raises:
        NormalizationError: If the payload's root song has no usable id.
    """
    song = payload.song
    if song.id is None or song.id <= 0:
        raise NormalizationError(message="Root song has no id", provider_name="genius")

    root = TrackData(id=song.id, title=song.display_title, artist=song.artist_name)

    seen: set[tuple[int, int, RelationshipDirection]] = set()
    edges: list[SampleRelationship] = []
    for group in song.song_relationships:
        direction = direction_for(group.relationship_type, include_interpolations)
        if direction is None:
            continue
        for related in group.songs:
            if related is None or related.id is None or related.id <= 0:
                continue
            edge = SampleRelationship(
                source_id=root.id,
                target_id=related.id,
                source_title=root.title,
                source_artist=root.artist,
                target_title=related.display_title,
                target_artist=related.artist_name,
                direction=direction,
            )
            if edge.edge_key in seen:
                continue
            seen.add(edge.edge_key)
            edges.append(edge)

    return TrackGraphFragment(track=root, relationships=tuple(edges))
