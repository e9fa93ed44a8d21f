"""Deterministic cache keys for track queries and searches.

Keys are pure functions of the normalized query, scoped under a namespace
prefix so the same store can hold unrelated data:

    samplegraph:fragment:id:378195
    samplegraph:fragment:text:<sha256 of "title\\x1fartist">
    samplegraph:search:<sha256 of text>

Free text is hashed rather than embedded so keys stay short and free of
characters some Redis tooling mishandles.
"""

from __future__ import annotations

import hashlib

from samplegraph.models.track import TrackQuery
from samplegraph.utils.text_normalizer import normalize_query_text

DEFAULT_NAMESPACE = "samplegraph"

# Unit separator: cannot appear in user text after normalization, so
# ("ab", "c") and ("a", "bc") never collide.
_FIELD_SEPARATOR = "\x1f"


def _digest(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def derive_key(query: TrackQuery, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Return the cache key for a fragment query.

    Queries that differ only in letter case or surrounding/repeated
    whitespace map to the same key; any other difference in id, title or
    artist yields a different key.
    """
    if query.track_id is not None:
        return f"{namespace}:fragment:id:{query.track_id}"
    title = normalize_query_text(query.title or "")
    artist = normalize_query_text(query.artist or "")
    return f"{namespace}:fragment:text:{_digest(title + _FIELD_SEPARATOR + artist)}"


def derive_search_key(text: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Return the cache key for a free-text search."""
    return f"{namespace}:search:{_digest(normalize_query_text(text))}"
