"""Upstream metadata providers."""

from samplegraph.providers.upstream.genius_provider import GeniusTrackProvider, build_http_client

__all__ = ["GeniusTrackProvider", "build_http_client"]
