"""Cache-aside orchestrator for sample-relationship queries.

Every query runs through the same sequence (see ``QueryPhase``):

    1. derive a namespaced key from the normalized query
    2. read the cache; a hit is deserialized and returned as-is
    3. on a miss, resolve the track upstream and normalize the payload
    4. write the fresh fragment back with the configured TTL
    5. return it

Cache problems never reach the caller: an unreachable store, a write
failure, or an entry that no longer deserializes (e.g. written by an older
service version) all degrade to a plain upstream fetch.  Upstream and
normalization failures are folded into a single
``TrackResolutionFailedError``; the original exception is chained for the
logs only.

All collaborators are injected at construction time and never mutated
afterwards, so one orchestrator instance serves all concurrent requests.
Two concurrent misses for the same key both fetch and both write; the last
write wins.
"""

from __future__ import annotations

from typing import NoReturn, TypeVar

import structlog
from pydantic import BaseModel

from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.interfaces.track_provider import ITrackProvider
from samplegraph.models.pipeline import QueryPhase
from samplegraph.models.track import (
    FragmentCacheEntry,
    SearchCacheEntry,
    TrackData,
    TrackGraphFragment,
    TrackQuery,
)
from samplegraph.pipeline.keys import DEFAULT_NAMESPACE, derive_key, derive_search_key
from samplegraph.services.normalizer import transform
from samplegraph.utils.errors import (
    CacheUnavailableError,
    NormalizationError,
    ResolutionFailureReason,
    TrackResolutionFailedError,
    UpstreamError,
    UpstreamNotFoundError,
)
from samplegraph.utils.logging import get_logger

_EntryT = TypeVar("_EntryT", bound=BaseModel)

_DEFAULT_MAX_SEARCH_RESULTS = 10


class SampleQueryOrchestrator:
    """Cache-aside pipeline: cache -> upstream -> normalize -> write-back.

    Parameters
    ----------
    cache:
        Key-value store for serialized fragments.
    upstream:
        Provider used on cache misses.
    ttl_seconds:
        Expiry applied to every cache write.
    namespace:
        Key prefix shared by every entry this service writes.
    include_interpolations:
        Whether interpolation relationships count as sample edges.
    max_search_results:
        Cap on the number of hits returned (and cached) per search.
    """

    def __init__(
        self,
        cache: ICacheProvider,
        upstream: ITrackProvider,
        ttl_seconds: int,
        namespace: str = DEFAULT_NAMESPACE,
        include_interpolations: bool = True,
        max_search_results: int = _DEFAULT_MAX_SEARCH_RESULTS,
    ) -> None:
        self._cache = cache
        self._upstream = upstream
        self._ttl_seconds = ttl_seconds
        self._namespace = namespace
        self._include_interpolations = include_interpolations
        self._max_search_results = max_search_results
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def derive_key(self, query: TrackQuery) -> str:
        """Return the namespaced cache key for *query*."""
        return derive_key(query, self._namespace)

    async def resolve(self, query: TrackQuery) -> TrackGraphFragment:
        """Return the fragment for *query*, from cache when possible.

        Raises
        ------
        TrackResolutionFailedError
            If the track cannot be fetched or normalized.  ``reason`` is
            ``NOT_FOUND`` when the provider has no such track and
            ``UPSTREAM`` for every other failure.
        """
        log = self._logger.bind(query=query.model_dump(exclude_none=True))
        log.debug("query_phase", phase=QueryPhase.START.value)

        key = self.derive_key(query)
        log = log.bind(key=key)
        log.debug("query_phase", phase=QueryPhase.KEY_DERIVED.value)

        entry = await self._read_cache(key, FragmentCacheEntry, log)
        log.debug("query_phase", phase=QueryPhase.CACHE_CHECKED.value, hit=entry is not None)
        if entry is not None:
            log.debug("query_phase", phase=QueryPhase.HIT_RETURN.value)
            return entry.fragment

        log.debug("query_phase", phase=QueryPhase.MISS_FETCHING.value)
        try:
            payload = await self._upstream.resolve_track(query)
        except UpstreamNotFoundError as exc:
            self._fail(log, exc, ResolutionFailureReason.NOT_FOUND)
        except UpstreamError as exc:
            self._fail(log, exc, ResolutionFailureReason.UPSTREAM)
        log.debug("query_phase", phase=QueryPhase.UPSTREAM_OK.value)

        log.debug("query_phase", phase=QueryPhase.NORMALIZING.value)
        try:
            fragment = transform(payload, include_interpolations=self._include_interpolations)
        except NormalizationError as exc:
            self._fail(log, exc, ResolutionFailureReason.UPSTREAM)

        log.debug("query_phase", phase=QueryPhase.CACHE_WRITING.value)
        await self._write_cache(key, FragmentCacheEntry(fragment=fragment).to_bytes(), log)

        log.info(
            "query_resolved",
            track_id=fragment.track.id,
            edge_count=len(fragment.relationships),
        )
        log.debug("query_phase", phase=QueryPhase.RETURN.value)
        return fragment

    async def search(self, text: str) -> list[TrackData]:
        """Return provider search hits for *text*, cache-aside like ``resolve``.

        Raises
        ------
        TrackResolutionFailedError
            If the provider search fails.  An empty result is not an error.
        """
        key = derive_search_key(text, self._namespace)
        log = self._logger.bind(key=key)

        entry = await self._read_cache(key, SearchCacheEntry, log)
        if entry is not None:
            return list(entry.results)

        try:
            hits = await self._upstream.search(text.strip())
        except UpstreamNotFoundError as exc:
            self._fail(log, exc, ResolutionFailureReason.NOT_FOUND)
        except UpstreamError as exc:
            self._fail(log, exc, ResolutionFailureReason.UPSTREAM)

        usable = [hit for hit in hits if hit.id is not None and hit.id > 0]
        results = tuple(
            TrackData(id=hit.id, title=hit.display_title, artist=hit.artist_name)
            for hit in usable[: self._max_search_results]
        )
        await self._write_cache(key, SearchCacheEntry(results=results).to_bytes(), log)
        return list(results)

    # ------------------------------------------------------------------
    # Cache helpers
    # ------------------------------------------------------------------

    async def _read_cache(
        self,
        key: str,
        entry_model: type[_EntryT],
        log: structlog.BoundLogger,
    ) -> _EntryT | None:
        """Read and deserialize an entry; any failure is reported as a miss."""
        try:
            raw = await self._cache.get(key)
        except CacheUnavailableError as exc:
            log.warning("cache_read_failed", error=str(exc))
            return None
        if raw is None:
            return None
        try:
            return entry_model.model_validate_json(raw)
        except ValueError as exc:
            log.warning("cache_entry_corrupt", error_type=type(exc).__name__)
            return None

    async def _write_cache(self, key: str, data: bytes, log: structlog.BoundLogger) -> None:
        try:
            await self._cache.set(key, data, self._ttl_seconds)
        except CacheUnavailableError as exc:
            log.warning("cache_write_failed", error=str(exc))

    def _fail(
        self,
        log: structlog.BoundLogger,
        exc: Exception,
        reason: ResolutionFailureReason,
    ) -> NoReturn:
        log.debug("query_phase", phase=QueryPhase.UPSTREAM_FAILED.value)
        log.warning(
            "track_resolution_failed",
            reason=reason.value,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        log.debug("query_phase", phase=QueryPhase.RETURN_ERROR.value)
        raise TrackResolutionFailedError(reason=reason) from exc
