"""Provider registry for upstream catalog, ratings and resolver clients."""

from __future__ import annotations

from typing import Dict

from moviefinder.providers.base import CatalogProvider, RatingsProvider, TitleResolver
from moviefinder.providers.gemini import GeminiResolver
from moviefinder.providers.omdb import OMDbRatings
from moviefinder.providers.tmdb import TMDBCatalog

_PROVIDERS: Dict[str, object] = {}


def get_provider(source: str) -> CatalogProvider | RatingsProvider | TitleResolver:
    """Return a shared provider instance for the given source name."""
    key = source.lower()
    if key not in _PROVIDERS:
        if key == "tmdb":
            _PROVIDERS[key] = TMDBCatalog()
        elif key == "omdb":
            _PROVIDERS[key] = OMDbRatings()
        elif key == "gemini":
            _PROVIDERS[key] = GeminiResolver()
        else:
            raise ValueError(f"Unsupported source {source}")
    return _PROVIDERS[key]
