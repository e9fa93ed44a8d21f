"""Breadth-first expansion of sample fragments into a multi-degree graph.

Each level of the graph is fetched concurrently through the orchestrator, so
every node benefits from (and populates) the fragment cache.  A per-call
semaphore caps the number of in-flight lookups for one graph.
"""

from __future__ import annotations

import asyncio

import structlog

from samplegraph.models.graph import GraphEdge, GraphNode, TrackGraph
from samplegraph.models.track import TrackGraphFragment, TrackQuery
from samplegraph.pipeline.orchestrator import SampleQueryOrchestrator
from samplegraph.utils.concurrency import throttled_gather
from samplegraph.utils.errors import SampleGraphError
from samplegraph.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)


class SampleGraphBuilder:
    """Builds a ``TrackGraph`` around a center track.

    Parameters
    ----------
    orchestrator:
        Source of per-track fragments.
    default_degree:
        Degree used when the caller does not ask for one.
    max_degree:
        Requested degrees are clamped to this value.
    concurrency:
        Maximum concurrent fragment lookups per ``build`` call.
    """

    def __init__(
        self,
        orchestrator: SampleQueryOrchestrator,
        default_degree: int = 2,
        max_degree: int = 3,
        concurrency: int = 5,
    ) -> None:
        self._orchestrator = orchestrator
        self._default_degree = default_degree
        self._max_degree = max_degree
        self._concurrency = max(1, concurrency)

    @property
    def default_degree(self) -> int:
        return self._default_degree

    @property
    def max_degree(self) -> int:
        return self._max_degree

    async def build(self, track_id: int, degree: int | None = None) -> TrackGraph:
        """Expand the graph around *track_id* up to *degree* hops.

        The center fragment must resolve: its ``TrackResolutionFailedError``
        propagates unchanged.  Failures on outer nodes are logged and the
        node stays in the graph as a leaf.
        """
        if degree is None:
            degree = self._default_degree
        degree = max(0, min(degree, self._max_degree))

        center = await self._orchestrator.resolve(TrackQuery(track_id=track_id))
        center_id = center.track.id

        nodes: dict[int, GraphNode] = {
            center_id: GraphNode(
                id=center_id, title=center.track.title, artist=center.track.artist, degree=0
            )
        }
        edges: list[GraphEdge] = []
        linked: set[frozenset[int]] = set()

        semaphore = asyncio.Semaphore(self._concurrency)
        frontier: list[TrackGraphFragment] = [center]
        depth = 0

        while frontier and depth < degree:
            discovered: list[int] = []
            for fragment in frontier:
                source = fragment.track.id
                for rel in fragment.relationships:
                    # One edge per pair: the neighbour's fragment reports the
                    # same link back in the inverse direction.
                    pair = frozenset((source, rel.target_id))
                    if pair not in linked:
                        linked.add(pair)
                        edges.append(
                            GraphEdge(source=source, target=rel.target_id, direction=rel.direction)
                        )
                    if rel.target_id not in nodes:
                        nodes[rel.target_id] = GraphNode(
                            id=rel.target_id,
                            title=rel.target_title,
                            artist=rel.target_artist,
                            degree=depth + 1,
                        )
                        discovered.append(rel.target_id)

            depth += 1
            if depth >= degree or not discovered:
                break
            frontier = await self._expand(discovered, semaphore)

        logger.info(
            "graph_built",
            center=center_id,
            degree=degree,
            node_count=len(nodes),
            edge_count=len(edges),
        )
        return TrackGraph(
            center=center_id,
            degree=degree,
            nodes=tuple(nodes.values()),
            edges=tuple(edges),
        )

    async def _expand(
        self, track_ids: list[int], semaphore: asyncio.Semaphore
    ) -> list[TrackGraphFragment]:
        results = await throttled_gather(
            [self._orchestrator.resolve(TrackQuery(track_id=tid)) for tid in track_ids],
            semaphore,
        )
        fragments: list[TrackGraphFragment] = []
        for tid, result in zip(track_ids, results):
            if isinstance(result, SampleGraphError):
                logger.warning("graph_node_expand_failed", track_id=tid, error=str(result))
                continue
            if isinstance(result, BaseException):
                raise result
            fragments.append(result)
        return fragments
