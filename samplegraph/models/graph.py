"""Multi-degree sample graph models produced by the graph builder.

A ``TrackGraph`` is a breadth-first expansion of fragments around a center
track.  Nodes carry their degree of separation from the center (0 for the
center itself); edges point from the expanded node to each neighbour with
the direction taken from the expanded node's fragment.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from samplegraph.models.track import RelationshipDirection


class GraphNode(BaseModel):
    """A track in the graph with its degree of separation from the center."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    artist: str = ""
    degree: int = Field(ge=0)


class GraphEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: int
    target: int
    direction: RelationshipDirection


class TrackGraph(BaseModel):
    """Nodes in BFS discovery order and edges in expansion order."""

    model_config = ConfigDict(frozen=True)

    center: int
    degree: int = Field(ge=0)
    nodes: tuple[GraphNode, ...] = ()
    edges: tuple[GraphEdge, ...] = ()
