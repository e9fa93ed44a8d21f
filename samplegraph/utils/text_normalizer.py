"""Text normalization utilities for track queries and search matching.

Two concerns live here:

1. **Query normalization** -- trims, case-folds and collapses whitespace so
   that "  Sample SONG " and "sample song" are the same query.  Cache keys
   are derived from the normalized form.

2. **Fuzzy matching** -- scores provider search hits against the requested
   title/artist via rapidfuzz so the best candidate is picked even when the
   provider ranks a remix or a live version first.
"""

import re

from rapidfuzz import fuzz

# Featured-artist suffixes the provider appends to titles, e.g.
# "Song (Ft. Somebody)".  Stripped before fuzzy comparison only.
_FEATURING_RE = re.compile(r"\s*[\(\[](?:ft\.?|feat\.?|featuring)\s[^\)\]]*[\)\]]", re.IGNORECASE)


def normalize_query_text(text: str) -> str:
    """Normalize free text for deterministic comparison and key derivation.

    Args:
        text: Raw user-supplied text.

    Returns:
        The text stripped, with inner whitespace collapsed to single spaces,
        and case-folded.
    """
    return re.sub(r"\s+", " ", text.strip()).casefold()


def strip_featuring(title: str) -> str:
    """Remove a trailing "(Ft. ...)" style credit from a track title."""
    return _FEATURING_RE.sub("", title).strip()


def match_confidence(title: str, artist: str, hit_title: str, hit_artist: str) -> float:
    """Score how well a search hit matches the requested title and artist.

    Uses ``token_sort_ratio`` so word-order differences ("Cox Carl") still
    match.  Title similarity is weighted above artist similarity because
    the provider's primary artist often differs from how users credit a
    collaboration.

    Returns:
        A score between 0.0 and 1.0.
    """
    title_score = fuzz.token_sort_ratio(
        normalize_query_text(strip_featuring(title)),
        normalize_query_text(strip_featuring(hit_title)),
    )
    if not artist:
        return title_score / 100.0

    artist_score = fuzz.token_sort_ratio(
        normalize_query_text(artist),
        normalize_query_text(hit_artist),
    )
    return (0.6 * title_score + 0.4 * artist_score) / 100.0
