"""Unit tests for SampleQueryOrchestrator: the cache-aside pipeline."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from samplegraph.models.provider import ProviderArtist, ProviderSongSummary
from samplegraph.models.track import RelationshipDirection, TrackQuery
from samplegraph.pipeline.orchestrator import SampleQueryOrchestrator
from samplegraph.providers.cache.memory_cache import MemoryCacheProvider
from samplegraph.utils.errors import (
    CacheUnavailableError,
    ResolutionFailureReason,
    TrackResolutionFailedError,
    UpstreamMalformedError,
    UpstreamNotFoundError,
    UpstreamUnavailableError,
)


@pytest.fixture
def memory_cache() -> MemoryCacheProvider:
    return MemoryCacheProvider(max_size=100)


def _orchestrator(cache, upstream, **kwargs) -> SampleQueryOrchestrator:
    return SampleQueryOrchestrator(cache=cache, upstream=upstream, ttl_seconds=300, **kwargs)


# ======================================================================
# resolve: hit / miss
# ======================================================================


class TestResolve:
    @pytest.mark.asyncio
    async def test_end_to_end_example(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        first = await orchestrator.resolve(TrackQuery(track_id=1))
        second = await orchestrator.resolve(TrackQuery(track_id=1))

        assert first.track.id == 1
        assert [(r.target_id, r.direction) for r in first.relationships] == [
            (2, RelationshipDirection.USES_SAMPLE_OF),
            (3, RelationshipDirection.SAMPLED_BY),
        ]
        assert second == first
        assert mock_track_provider.resolve_track.await_count == 1

    @pytest.mark.asyncio
    async def test_miss_writes_with_configured_ttl(
        self, mock_cache_provider: MagicMock, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(mock_cache_provider, mock_track_provider, namespace="ns")

        await orchestrator.resolve(TrackQuery(track_id=1))

        key, data, ttl = mock_cache_provider.set.await_args.args
        assert key == "ns:fragment:id:1"
        assert isinstance(data, bytes)
        assert ttl == 300

    @pytest.mark.asyncio
    async def test_text_queries_share_cache_entry(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        await orchestrator.resolve(TrackQuery(title="T1", artist="A1"))
        await orchestrator.resolve(TrackQuery(title="  t1 ", artist="a1"))

        assert mock_track_provider.resolve_track.await_count == 1

    @pytest.mark.asyncio
    async def test_different_queries_do_not_share(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        await orchestrator.resolve(TrackQuery(track_id=1))
        await orchestrator.resolve(TrackQuery(track_id=2))

        assert mock_track_provider.resolve_track.await_count == 2

    @pytest.mark.asyncio
    async def test_partial_payload_still_returned(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, track_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = track_payload(
            relationships={"samples": [(2, "B", "x"), (None, "C", "y"), (4, "D", "z")]}
        )
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        fragment = await orchestrator.resolve(TrackQuery(track_id=1))

        assert [r.target_id for r in fragment.relationships] == [2, 4]

    @pytest.mark.asyncio
    async def test_interpolation_toggle(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, track_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = track_payload(
            relationships={"interpolates": [(2, "B", "x")]}
        )
        orchestrator = _orchestrator(
            memory_cache, mock_track_provider, include_interpolations=False
        )

        fragment = await orchestrator.resolve(TrackQuery(track_id=1))

        assert fragment.relationships == ()


# ======================================================================
# resolve: cache degradation
# ======================================================================


class TestCacheDegradation:
    @pytest.mark.asyncio
    async def test_unreachable_cache_is_bypassed(
        self, mock_cache_provider: MagicMock, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_cache_provider.get.side_effect = CacheUnavailableError(provider_name="redis")
        mock_cache_provider.set.side_effect = CacheUnavailableError(provider_name="redis")
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(mock_cache_provider, mock_track_provider)

        fragment = await orchestrator.resolve(TrackQuery(track_id=1))

        assert fragment.track.id == 1
        assert len(fragment.relationships) == 2
        mock_cache_provider.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_failure_does_not_block_result(
        self, mock_cache_provider: MagicMock, mock_track_provider: MagicMock, example_payload
    ) -> None:
        mock_cache_provider.set.side_effect = CacheUnavailableError()
        mock_track_provider.resolve_track.return_value = example_payload
        orchestrator = _orchestrator(mock_cache_provider, mock_track_provider)

        fragment = await orchestrator.resolve(TrackQuery(track_id=1))

        assert fragment.track.id == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            b"\xff\xfe garbage",
            b'{"schema": 999, "fragment": {"track": {"id": 1}}}',
            b'{"track": {"id": 1, "title": "old layout"}}',
        ],
    )
    async def test_corrupt_entry_treated_as_miss(
        self,
        raw: bytes,
        memory_cache: MemoryCacheProvider,
        mock_track_provider: MagicMock,
        example_payload,
    ) -> None:
        orchestrator = _orchestrator(memory_cache, mock_track_provider)
        key = orchestrator.derive_key(TrackQuery(track_id=1))
        await memory_cache.set(key, raw, ttl=300)
        mock_track_provider.resolve_track.return_value = example_payload

        fragment = await orchestrator.resolve(TrackQuery(track_id=1))

        assert len(fragment.relationships) == 2
        assert mock_track_provider.resolve_track.await_count == 1
        # The fresh fragment replaced the corrupt entry.
        await orchestrator.resolve(TrackQuery(track_id=1))
        assert mock_track_provider.resolve_track.await_count == 1


# ======================================================================
# resolve: upstream failures
# ======================================================================


class TestUpstreamFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "reason"),
        [
            (UpstreamNotFoundError(), ResolutionFailureReason.NOT_FOUND),
            (UpstreamUnavailableError(), ResolutionFailureReason.UPSTREAM),
            (UpstreamMalformedError(), ResolutionFailureReason.UPSTREAM),
        ],
    )
    async def test_folded_into_resolution_failure(
        self,
        error: Exception,
        reason: ResolutionFailureReason,
        memory_cache: MemoryCacheProvider,
        mock_track_provider: MagicMock,
    ) -> None:
        mock_track_provider.resolve_track.side_effect = error
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        with pytest.raises(TrackResolutionFailedError) as info:
            await orchestrator.resolve(TrackQuery(track_id=1))

        assert info.value.reason is reason
        assert info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(
        self, mock_cache_provider: MagicMock, mock_track_provider: MagicMock
    ) -> None:
        mock_track_provider.resolve_track.side_effect = UpstreamUnavailableError()
        orchestrator = _orchestrator(mock_cache_provider, mock_track_provider)

        with pytest.raises(TrackResolutionFailedError):
            await orchestrator.resolve(TrackQuery(track_id=1))
        mock_cache_provider.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unidentifiable_root_is_upstream_failure(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock, track_payload
    ) -> None:
        mock_track_provider.resolve_track.return_value = track_payload(song_id=None)
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        with pytest.raises(TrackResolutionFailedError) as info:
            await orchestrator.resolve(TrackQuery(track_id=1))
        assert info.value.reason is ResolutionFailureReason.UPSTREAM


# ======================================================================
# search
# ======================================================================


def _hit(song_id: int | None, title: str, artist: str) -> ProviderSongSummary:
    return ProviderSongSummary(
        id=song_id, title=title, primary_artist=ProviderArtist(name=artist)
    )


class TestSearch:
    @pytest.mark.asyncio
    async def test_results_capped_and_cached(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock
    ) -> None:
        mock_track_provider.search.return_value = [_hit(i, f"T{i}", "A") for i in range(1, 6)]
        orchestrator = _orchestrator(memory_cache, mock_track_provider, max_search_results=3)

        first = await orchestrator.search("  Juicy ")
        second = await orchestrator.search("juicy")

        assert [t.id for t in first] == [1, 2, 3]
        assert second == first
        mock_track_provider.search.assert_awaited_once_with("Juicy")

    @pytest.mark.asyncio
    async def test_hits_without_positive_id_skipped_before_cap(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock
    ) -> None:
        mock_track_provider.search.return_value = [
            _hit(-5, "Neg", "A"),
            _hit(None, "Nameless", "A"),
            _hit(7, "T7", "A"),
            _hit(0, "Zero", "A"),
            _hit(8, "T8", "A"),
            _hit(9, "T9", "A"),
        ]
        orchestrator = _orchestrator(memory_cache, mock_track_provider, max_search_results=2)

        results = await orchestrator.search("x")

        assert [t.id for t in results] == [7, 8]

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock
    ) -> None:
        orchestrator = _orchestrator(memory_cache, mock_track_provider)
        assert await orchestrator.search("nothing at all") == []

    @pytest.mark.asyncio
    async def test_upstream_failure(
        self, memory_cache: MemoryCacheProvider, mock_track_provider: MagicMock
    ) -> None:
        mock_track_provider.search.side_effect = UpstreamUnavailableError()
        orchestrator = _orchestrator(memory_cache, mock_track_provider)

        with pytest.raises(TrackResolutionFailedError) as info:
            await orchestrator.search("juicy")
        assert info.value.reason is ResolutionFailureReason.UPSTREAM
