"""FastAPI routes for the SampleGraph API.

Endpoint                               Description
------------------------------------------------------------------------
GET /api/v1/samples?id=                fragment for a track id
GET /api/v1/samples?title=&artist=     fragment for a title (+ artist)
GET /api/v1/tracks/{track_id}/samples  fragment for a track id
GET /api/v1/search?q=                  provider search hits
GET /api/v1/graph/{track_id}?degree=   multi-degree sample graph
GET /api/v1/version                    API major version
GET /api/v1/health                     health check + cache status

Service handles are created once in ``samplegraph.main._build_all``, stored
on ``app.state`` and injected here through ``Depends``.  Application errors
are left to ``ErrorHandlingMiddleware``; only request validation is
answered directly in this module.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from pydantic import ValidationError

from samplegraph import __version__
from samplegraph.api.schemas import (
    ErrorResponse,
    FragmentResponse,
    GraphResponse,
    HealthResponse,
    SearchResponse,
    TrackResponse,
)
from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.models.track import TrackQuery
from samplegraph.pipeline.graph_builder import SampleGraphBuilder
from samplegraph.pipeline.orchestrator import SampleQueryOrchestrator
from samplegraph.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

API_MAJOR_VERSION = int(__version__.split(".")[0])

router = APIRouter(prefix="/api/v1")

_RESOLUTION_ERRORS = {404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_orchestrator(request: Request) -> SampleQueryOrchestrator:
    """Return the query orchestrator from application state."""
    return request.app.state.orchestrator


def _get_graph_builder(request: Request) -> SampleGraphBuilder:
    """Return the graph builder from application state."""
    return request.app.state.graph_builder


def _get_cache(request: Request) -> ICacheProvider:
    return request.app.state.cache


OrchestratorDep = Annotated[SampleQueryOrchestrator, Depends(_get_orchestrator)]
GraphBuilderDep = Annotated[SampleGraphBuilder, Depends(_get_graph_builder)]
CacheDep = Annotated[ICacheProvider, Depends(_get_cache)]


def _build_query(
    track_id: int | None, title: str | None, artist: str | None
) -> TrackQuery:
    try:
        return TrackQuery(track_id=track_id, title=title, artist=artist)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise HTTPException(status_code=422, detail=f"Invalid query: {messages}") from exc


# ---------------------------------------------------------------------------
# Sample relationships
# ---------------------------------------------------------------------------


@router.get(
    "/samples",
    response_model=FragmentResponse,
    responses={**_RESOLUTION_ERRORS, 422: {"model": ErrorResponse}},
    summary="Sample relationships for a track id or title/artist",
)
async def get_samples(
    orchestrator: OrchestratorDep,
    track_id: Annotated[int | None, Query(alias="id")] = None,
    title: str | None = None,
    artist: str | None = None,
) -> FragmentResponse:
    """Return the track and its sample edges; exactly one query form is accepted."""
    query = _build_query(track_id, title, artist)
    fragment = await orchestrator.resolve(query)
    return FragmentResponse.from_fragment(fragment)


@router.get(
    "/tracks/{track_id}/samples",
    response_model=FragmentResponse,
    responses=_RESOLUTION_ERRORS,
    summary="Sample relationships for a track id",
)
async def get_track_samples(
    orchestrator: OrchestratorDep,
    track_id: Annotated[int, Path(gt=0)],
) -> FragmentResponse:
    fragment = await orchestrator.resolve(TrackQuery(track_id=track_id))
    return FragmentResponse.from_fragment(fragment)


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={502: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Search the provider for tracks",
)
async def search_tracks(
    orchestrator: OrchestratorDep,
    q: Annotated[str, Query(min_length=1, max_length=200)],
) -> SearchResponse:
    if not q.strip():
        raise HTTPException(status_code=422, detail="Search text must not be blank")
    results = await orchestrator.search(q)
    return SearchResponse(
        query=q.strip(),
        results=[TrackResponse.from_track(track) for track in results],
    )


@router.get(
    "/graph/{track_id}",
    response_model=GraphResponse,
    responses=_RESOLUTION_ERRORS,
    summary="Multi-degree sample graph around a track",
)
async def get_graph(
    graph_builder: GraphBuilderDep,
    track_id: Annotated[int, Path(gt=0)],
    degree: Annotated[int | None, Query(ge=0)] = None,
) -> GraphResponse:
    """Expand the sample graph breadth-first; ``degree`` is clamped to the configured maximum."""
    graph = await graph_builder.build(track_id, degree)
    return GraphResponse.from_graph(graph)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get("/version", response_model=int, summary="API major version")
async def get_version() -> int:
    return API_MAJOR_VERSION


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(cache: CacheDep) -> HealthResponse:
    """Report service health; an unreachable cache degrades but does not fail the service."""
    reachable = await cache.ping()
    if not reachable:
        _logger.warning("health_cache_unreachable", backend=cache.get_provider_name())
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        version=__version__,
        cache={"backend": cache.get_provider_name(), "reachable": reachable},
    )
