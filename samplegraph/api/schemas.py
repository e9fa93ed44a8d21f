"""Pydantic response schemas for the SampleGraph API.

Defines the public JSON contract for every endpoint.  Relationship fields
use camelCase (``targetId``, ``targetTitle``, ...) on the wire; the Python
attributes stay snake_case and FastAPI serializes by alias.

Conversion from the internal models lives next to each schema
(``from_fragment`` / ``from_graph``) so routes stay thin.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from samplegraph.models.graph import TrackGraph
from samplegraph.models.track import TrackData, TrackGraphFragment


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrackResponse(BaseModel):
    """A track as shown to clients."""

    id: int
    title: str
    artist: str

    @classmethod
    def from_track(cls, track: TrackData) -> TrackResponse:
        return cls(id=track.id, title=track.title, artist=track.artist)


class RelationshipResponse(_CamelModel):
    """One sample edge, relative to the fragment's root track."""

    target_id: int
    target_title: str
    target_artist: str
    direction: str = Field(description="USES_SAMPLE_OF or SAMPLED_BY")


class FragmentResponse(BaseModel):
    """Root track plus its sample relationships in provider order."""

    track: TrackResponse
    relationships: list[RelationshipResponse] = Field(default_factory=list)

    @classmethod
    def from_fragment(cls, fragment: TrackGraphFragment) -> FragmentResponse:
        return cls(
            track=TrackResponse.from_track(fragment.track),
            relationships=[
                RelationshipResponse(
                    target_id=rel.target_id,
                    target_title=rel.target_title,
                    target_artist=rel.target_artist,
                    direction=rel.direction.value,
                )
                for rel in fragment.relationships
            ],
        )


class SearchResponse(BaseModel):
    """Provider search hits for a free-text query."""

    query: str
    results: list[TrackResponse] = Field(default_factory=list)


class GraphNodeResponse(BaseModel):
    id: int
    title: str
    artist: str
    degree: int


class GraphEdgeResponse(BaseModel):
    source: int
    target: int
    direction: str


class GraphResponse(BaseModel):
    """Breadth-first sample graph around a center track."""

    center: int
    degree: int
    nodes: list[GraphNodeResponse] = Field(default_factory=list)
    edges: list[GraphEdgeResponse] = Field(default_factory=list)

    @classmethod
    def from_graph(cls, graph: TrackGraph) -> GraphResponse:
        return cls(
            center=graph.center,
            degree=graph.degree,
            nodes=[
                GraphNodeResponse(id=n.id, title=n.title, artist=n.artist, degree=n.degree)
                for n in graph.nodes
            ],
            edges=[
                GraphEdgeResponse(source=e.source, target=e.target, direction=e.direction.value)
                for e in graph.edges
            ],
        )


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    cache: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
