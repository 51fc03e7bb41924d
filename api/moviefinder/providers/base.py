"""Provider interfaces the enrichment and resolution services depend on."""

from __future__ import annotations

from typing import Any

from moviefinder.models.media import CanonicalItem, CatalogDetail, MediaType, Ratings, StreamingProvider, TitleGuess


class CatalogProvider:
    """Catalog search, detail, availability and discovery listings."""
    source_name: str

    async def search(self, kind: MediaType, query: str) -> list[CanonicalItem]:
        """Return relevance-ordered matches for a single media namespace."""
        raise NotImplementedError

    async def details(self, item_id: int, kind: MediaType) -> CatalogDetail:
        raise NotImplementedError

    async def watch_providers(self, item_id: int, kind: MediaType) -> list[StreamingProvider]:
        raise NotImplementedError

    async def trending(self) -> list[CanonicalItem]:
        raise NotImplementedError

    async def discover(self, kind: MediaType, params: dict[str, Any]) -> list[CanonicalItem]:
        raise NotImplementedError

    async def similar(self, item_id: int, kind: MediaType) -> list[CanonicalItem]:
        raise NotImplementedError


class RatingsProvider:
    """Critic and audience scores keyed by title and year."""
    source_name: str

    async def fetch(self, title: str, year: str | None) -> Ratings:
        raise NotImplementedError


class TitleResolver:
    """Generative text-to-title guesser."""
    source_name: str

    async def suggest_titles(self, query: str, *, grounded: bool) -> list[TitleGuess]:
        """Guess exact titles for a free-text description.

        `grounded` lets the model consult its search tool; raises
        `RateLimitedError` on quota exhaustion and `ProviderError` otherwise.
        """
        raise NotImplementedError

    async def suggest_similar(self, title: str, media_type: MediaType, year: str | None) -> list[TitleGuess]:
        raise NotImplementedError
