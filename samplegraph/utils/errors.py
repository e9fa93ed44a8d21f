"""Custom exception hierarchy for SampleGraph.

All application exceptions inherit from :class:`SampleGraphError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "genius", "redis") caused the failure.

The hierarchy is organized by pipeline stage:

    SampleGraphError  (base -- catch-all for any SampleGraph error)
    +-- CacheUnavailableError       (cache store unreachable / timed out)
    +-- UpstreamError               (any provider failure)
    |   +-- UpstreamNotFoundError       (provider has no matching track)
    |   +-- UpstreamUnavailableError    (network, timeout, non-2xx status)
    |   +-- UpstreamMalformedError      (2xx body does not match the schema)
    +-- NormalizationError          (root track cannot be identified)
    +-- TrackResolutionFailedError  (uniform client-facing failure)
    +-- ConfigurationError          (startup / missing config)

Cache errors are always absorbed by the orchestrator.  Upstream and
normalization errors are folded into ``TrackResolutionFailedError`` so the
provider's internals never reach the client.
"""

from __future__ import annotations

from enum import Enum


class SampleGraphError(Exception):
    """Base exception for all SampleGraph errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[genius] HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Cache errors
# ---------------------------------------------------------------------------

class CacheUnavailableError(SampleGraphError):
    """Raised when the cache store cannot be reached or a round trip times out.

    Never surfaces to API clients: the orchestrator logs it and bypasses
    the cache for the current request.
    """

    def __init__(
        self,
        message: str = "Cache store is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Upstream provider errors
# ---------------------------------------------------------------------------

class UpstreamError(SampleGraphError):
    """Base class for failures talking to the upstream metadata provider."""

    def __init__(
        self,
        message: str = "Upstream provider request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamNotFoundError(UpstreamError):
    """Raised when the provider reports no track matching the query."""

    def __init__(
        self,
        message: str = "No matching track found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamUnavailableError(UpstreamError):
    """Raised on network failure, timeout, or a non-2xx provider status."""

    def __init__(
        self,
        message: str = "Upstream provider is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class UpstreamMalformedError(UpstreamError):
    """Raised when a 2xx provider response does not parse into the expected schema."""

    def __init__(
        self,
        message: str = "Upstream provider returned a malformed payload",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Normalization / orchestration errors
# ---------------------------------------------------------------------------

class NormalizationError(SampleGraphError):
    """Raised when the root track cannot be identified from a provider payload."""

    def __init__(
        self,
        message: str = "Could not identify the root track",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ResolutionFailureReason(str, Enum):  # noqa: UP042: StrEnum requires Python 3.11+
    """Coarse, client-safe category of a resolution failure."""

    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


class TrackResolutionFailedError(SampleGraphError):
    """Uniform client-facing failure for a query that could not be resolved.

    The originating exception is chained via ``raise ... from`` and is only
    ever logged.  ``reason`` tells the API layer whether to answer 404 or 502.
    """

    def __init__(
        self,
        message: str = "Track could not be resolved",
        reason: ResolutionFailureReason = ResolutionFailureReason.UPSTREAM,
        provider_name: str | None = None,
    ) -> None:
        self._reason = reason
        super().__init__(message=message, provider_name=provider_name)

    @property
    def reason(self) -> ResolutionFailureReason:
        return self._reason


class ConfigurationError(SampleGraphError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
