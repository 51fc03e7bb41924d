"""Lexical intent heuristics for raw search queries."""

from __future__ import annotations

import re

PLOT_KEYWORDS = (
    "about",
    "story",
    "where",
    "who",
    "man",
    "woman",
    "boy",
    "girl",
    "based on",
    "set in",
    "finds",
    "journey",
)
MAX_TITLE_WORDS = 6

_PLOT_RE = re.compile(r"\b(?:" + "|".join(re.escape(keyword) for keyword in PLOT_KEYWORDS) + r")\b")
_TV_HINT_RE = re.compile(r"\b(?:shows?|series|seasons?)\b", re.IGNORECASE)


def is_title_query(query: str) -> bool:
    """Return True when a query reads like an exact title rather than a plot.

    Any narrative keyword forces plot-style; so does a query longer than six
    words. Keywords match whole words, so "Batman" stays a title.
    """
    if not query:
        return False
    text = query.lower().strip()
    if not text:
        return False
    if _PLOT_RE.search(text):
        return False
    return len(text.split()) <= MAX_TITLE_WORDS


def wants_tv(query: str) -> bool:
    """Return True when the query uses the word show, series or season."""
    return bool(_TV_HINT_RE.search(query or ""))
