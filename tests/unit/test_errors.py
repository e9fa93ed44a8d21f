"""Unit tests for the SampleGraph exception hierarchy."""

from __future__ import annotations

import pytest

from samplegraph.utils.errors import (
    CacheUnavailableError,
    ConfigurationError,
    NormalizationError,
    ResolutionFailureReason,
    SampleGraphError,
    TrackResolutionFailedError,
    UpstreamError,
    UpstreamMalformedError,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
)


class TestSampleGraphError:
    def test_default_message(self) -> None:
        assert str(SampleGraphError()) == "An unexpected error occurred"

    def test_provider_prefix_in_str(self) -> None:
        exc = SampleGraphError("HTTP 503", provider_name="genius")
        assert str(exc) == "[genius] HTTP 503"
        assert exc.message == "HTTP 503"
        assert exc.provider_name == "genius"

    @pytest.mark.parametrize(
        "cls",
        [
            CacheUnavailableError,
            UpstreamError,
            NormalizationError,
            TrackResolutionFailedError,
            ConfigurationError,
        ],
    )
    def test_subclasses_share_base(self, cls: type[SampleGraphError]) -> None:
        assert issubclass(cls, SampleGraphError)

    @pytest.mark.parametrize(
        "cls", [UpstreamNotFoundError, UpstreamUnavailableError, UpstreamMalformedError]
    )
    def test_upstream_family(self, cls: type[UpstreamError]) -> None:
        exc = cls(provider_name="genius")
        assert isinstance(exc, UpstreamError)
        assert exc.provider_name == "genius"


class TestTrackResolutionFailedError:
    def test_defaults_to_upstream_reason(self) -> None:
        exc = TrackResolutionFailedError()
        assert exc.reason is ResolutionFailureReason.UPSTREAM
        assert exc.message == "Track could not be resolved"

    def test_not_found_reason(self) -> None:
        exc = TrackResolutionFailedError(reason=ResolutionFailureReason.NOT_FOUND)
        assert exc.reason.value == "not_found"

    def test_cause_is_chained(self) -> None:
        cause = UpstreamUnavailableError("timeout", provider_name="genius")
        with pytest.raises(TrackResolutionFailedError) as info:
            try:
                raise cause
            except UpstreamError as exc:
                raise TrackResolutionFailedError() from exc
        assert info.value.__cause__ is cause
        # The client-facing message never carries provider details.
        assert "timeout" not in info.value.message
