"""Shared pytest fixtures for the SampleGraph test suite."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from samplegraph.interfaces.cache_provider import ICacheProvider
from samplegraph.interfaces.track_provider import ITrackProvider
from samplegraph.models.provider import ProviderTrackPayload, parse_track_payload

SongFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Provider payload builders
# ---------------------------------------------------------------------------


def _related(song_id: int | None, title: str, artist: str) -> dict[str, Any]:
    song: dict[str, Any] = {
        "title": title,
        "title_with_featured": title,
        "primary_artist": {"name": artist, "id": 99},
        "url": f"https://genius.com/{title.replace(' ', '-')}",
    }
    if song_id is not None:
        song["id"] = song_id
    return song


@pytest.fixture
def song_body() -> SongFactory:
    """Factory for decoded ``GET /songs/{id}`` bodies.

    ``relationships`` maps a provider relationship type to a list of
    ``(id, title, artist)`` tuples; ``id`` may be ``None`` to simulate a
    sub-record without an identifier.
    """

    def _build(
        song_id: int | None = 1,
        title: str = "Track One",
        artist: str = "Artist One",
        relationships: dict[str, list[tuple[int | None, str, str]]] | None = None,
    ) -> dict[str, Any]:
        groups = [
            {
                "relationship_type": rel_type,
                "type": rel_type,
                "songs": [_related(*entry) for entry in entries],
            }
            for rel_type, entries in (relationships or {}).items()
        ]
        song: dict[str, Any] = {
            "title": title,
            "title_with_featured": title,
            "primary_artist": {"name": artist, "id": 7},
            "release_date": "1994-09-13",
            "song_relationships": groups,
        }
        if song_id is not None:
            song["id"] = song_id
        return {"meta": {"status": 200}, "response": {"song": song}}

    return _build


@pytest.fixture
def track_payload(song_body: SongFactory) -> Callable[..., ProviderTrackPayload]:
    """Factory for parsed ``ProviderTrackPayload`` objects."""

    def _build(**kwargs: Any) -> ProviderTrackPayload:
        return parse_track_payload(song_body(**kwargs))

    return _build


@pytest.fixture
def example_payload(track_payload: Callable[..., ProviderTrackPayload]) -> ProviderTrackPayload:
    """T1 samples T2 and is sampled by T3."""
    return track_payload(
        song_id=1,
        title="T1",
        artist="A1",
        relationships={
            "samples": [(2, "T2", "A2")],
            "sampled_in": [(3, "T3", "A3")],
            "cover_of": [(4, "T4", "A4")],
        },
    )


# ---------------------------------------------------------------------------
# Provider doubles
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_track_provider() -> ITrackProvider:
    """Return a MagicMock(spec=ITrackProvider) with AsyncMock methods."""
    mock = MagicMock(spec=ITrackProvider)
    mock.resolve_track = AsyncMock()
    mock.search = AsyncMock(return_value=[])
    mock.get_provider_name.return_value = "genius"
    return mock


@pytest.fixture
def mock_cache_provider() -> ICacheProvider:
    """Return a MagicMock(spec=ICacheProvider) that always misses."""
    mock = MagicMock(spec=ICacheProvider)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=None)
    mock.ping = AsyncMock(return_value=True)
    mock.close = AsyncMock(return_value=None)
    mock.get_provider_name.return_value = "mock"
    return mock
