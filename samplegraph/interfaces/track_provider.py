"""Abstract base class for upstream track-metadata providers.

Defines the contract for fetching a track and its song relationships from
an external metadata service (the Genius API in production).  Providers are
stateless apart from their injected HTTP client and are safe to call
concurrently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from samplegraph.models.provider import ProviderSongSummary, ProviderTrackPayload
from samplegraph.models.track import TrackQuery


class ITrackProvider(ABC):
    """Contract for the upstream metadata provider."""

    @abstractmethod
    async def resolve_track(self, query: TrackQuery) -> ProviderTrackPayload:
        """Fetch the full track record matching *query*.

        Parameters
        ----------
        query:
            A track id, or a title/artist pair resolved via provider search.

        Returns
        -------
        ProviderTrackPayload
            The parsed track record including its song relationships.

        Raises
        ------
        UpstreamNotFoundError
            If the provider has no matching track.
        UpstreamUnavailableError
            On network failure, timeout, or unexpected status (after retry).
        UpstreamMalformedError
            If the response does not match the expected schema (after retry).
        """

    @abstractmethod
    async def search(self, text: str) -> list[ProviderSongSummary]:
        """Return song hits for free-text *text* in provider order.

        Raises the same upstream errors as :meth:`resolve_track`, except
        that an empty result is an empty list rather than not-found.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``'genius'``."""
