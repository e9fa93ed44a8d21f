"""Genius API provider implementing ITrackProvider.

Fetches songs and their ``song_relationships`` from ``api.genius.com``
through an injected ``httpx.AsyncClient`` that already carries the base URL,
the bearer credential and the upstream timeout (see ``build_http_client``).

Failure classification per request:

    * transport error / timeout / non-2xx other than 404 -> UpstreamUnavailableError
    * HTTP 404                                            -> UpstreamNotFoundError
    * 2xx whose body does not parse into the schema       -> UpstreamMalformedError

Unavailable and malformed outcomes are retried exactly once, immediately,
before the error surfaces.  Not-found is final.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

import httpx

from samplegraph.interfaces.track_provider import ITrackProvider
from samplegraph.models.provider import (
    ProviderSongSummary,
    ProviderTrackPayload,
    parse_search_payload,
    parse_track_payload,
)
from samplegraph.models.track import TrackQuery
from samplegraph.utils.errors import (
    UpstreamMalformedError,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
)
from samplegraph.utils.logging import get_logger
from samplegraph.utils.text_normalizer import match_confidence

_T = TypeVar("_T")

_USER_AGENT = "samplegraph/1.0.0"
_MAX_ATTEMPTS = 2
_DEFAULT_MIN_CONFIDENCE = 0.5


def build_http_client(base_url: str, api_key: str, timeout: float) -> httpx.AsyncClient:
    """Create the shared, authenticated client used for every provider call."""
    return httpx.AsyncClient(
        base_url=base_url,
        headers={
            "Authorization": f"Bearer {api_key}",
            "User-Agent": _USER_AGENT,
            "Accept": "application/json",
        },
        timeout=timeout,
    )


class GeniusTrackProvider(ITrackProvider):
    """Upstream provider backed by the Genius REST API.

    Parameters
    ----------
    http_client:
        Injected, pre-authenticated ``httpx.AsyncClient``.  Shared across
        requests for connection pooling.
    min_confidence:
        Minimum fuzzy score for a search hit to be preferred over the
        provider's top-ranked hit.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        min_confidence: float = _DEFAULT_MIN_CONFIDENCE,
    ) -> None:
        self._http = http_client
        self._min_confidence = min_confidence
        self._logger = get_logger(__name__)

    # -- Private helpers -------------------------------------------------------

    async def _request_once(
        self,
        path: str,
        params: dict[str, Any],
        parse: Callable[[Any], _T],
    ) -> _T:
        try:
            response = await self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(
                message=f"Request to {path} failed: {type(exc).__name__}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 404:
            raise UpstreamNotFoundError(
                message=f"{path} not found",
                provider_name=self.get_provider_name(),
            )
        if not 200 <= response.status_code < 300:
            raise UpstreamUnavailableError(
                message=f"{path} returned HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamMalformedError(
                message=f"{path} returned a non-JSON body",
                provider_name=self.get_provider_name(),
            ) from exc
        return parse(data)

    async def _request(
        self,
        path: str,
        params: dict[str, Any],
        parse: Callable[[Any], _T],
    ) -> _T:
        """Issue a GET with at most one immediate retry on transient failures."""
        attempt = 1
        while True:
            try:
                return await self._request_once(path, params, parse)
            except (UpstreamUnavailableError, UpstreamMalformedError) as exc:
                self._logger.warning(
                    "upstream_request_failed",
                    path=path,
                    attempt=attempt,
                    max_attempts=_MAX_ATTEMPTS,
                    error_type=type(exc).__name__,
                    error=exc.message,
                )
                if attempt >= _MAX_ATTEMPTS:
                    raise
            attempt += 1

    async def _fetch_song(self, song_id: int) -> ProviderTrackPayload:
        return await self._request(
            f"/songs/{song_id}",
            {"text_format": "plain"},
            parse_track_payload,
        )

    def _pick_hit(
        self, query: TrackQuery, hits: list[ProviderSongSummary]
    ) -> ProviderSongSummary | None:
        """Choose the hit that best matches the query's title and artist.

        Ties keep the provider's ranking.  When no hit reaches the
        confidence floor the provider's first hit wins.
        """
        if not hits:
            return None
        best = hits[0]
        best_score = -1.0
        for hit in hits:
            score = match_confidence(
                query.title or "", query.artist or "", hit.display_title, hit.artist_name
            )
            if score > best_score:
                best, best_score = hit, score
        if best_score < self._min_confidence:
            return hits[0]
        return best

    # -- ITrackProvider implementation -----------------------------------------

    async def search(self, text: str) -> list[ProviderSongSummary]:
        """Search the provider for songs matching *text*."""
        payload = await self._request("/search", {"q": text}, parse_search_payload)
        songs = payload.songs()
        self._logger.info("upstream_search_complete", query=text, result_count=len(songs))
        return songs

    async def resolve_track(self, query: TrackQuery) -> ProviderTrackPayload:
        """Fetch the song record for *query*, resolving text queries via search."""
        if query.track_id is not None:
            return await self._fetch_song(query.track_id)

        text = " ".join(part.strip() for part in (query.title, query.artist) if part and part.strip())
        hit = self._pick_hit(query, await self.search(text))
        if hit is None or hit.id is None:
            raise UpstreamNotFoundError(
                message="Search returned no songs",
                provider_name=self.get_provider_name(),
            )
        self._logger.debug("upstream_search_resolved", query=text, song_id=hit.id)
        return await self._fetch_song(hit.id)

    def get_provider_name(self) -> str:
        """Return ``'genius'``."""
        return "genius"
