"""Deep enrichment of canonical catalog items.

Invariants:
- `enrich` returns exactly as many items as it receives, in input order.
- Only the first `limit` items are enriched; the rest pass through untouched.
- One failing provider degrades a single field, never the batch.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence, TypeAlias

from moviefinder.core.config import settings
from moviefinder.models.media import (
    CanonicalItem,
    CatalogDetail,
    EnrichedItem,
    MediaType,
    Ratings,
    StreamingProvider,
)
from moviefinder.providers.base import CatalogProvider, RatingsProvider
from moviefinder.providers.http import ProviderError
from moviefinder.services.cache import ResultCache, make_key
from moviefinder.services.catalog_service import resolve_to_canonical

MAX_GENRES = 3
MediaItem: TypeAlias = CanonicalItem | EnrichedItem

logger = logging.getLogger("moviefinder.services.enrichment")


class EnrichmentEngine:
    def __init__(self, catalog: CatalogProvider, ratings: RatingsProvider, cache: ResultCache) -> None:
        self.catalog = catalog
        self.ratings = ratings
        self.cache = cache

    async def enrich(self, items: Sequence[CanonicalItem], limit: int | None = None) -> list[MediaItem]:
        """Deep-enrich the first `limit` items concurrently; keep the rest as-is."""
        if not items:
            return []
        cutoff = settings.search_enrich_limit if limit is None else max(0, limit)
        head, tail = list(items[:cutoff]), list(items[cutoff:])
        enriched = await asyncio.gather(*(self.enrich_item(item) for item in head))
        return [*enriched, *tail]

    async def enrich_item(self, item: CanonicalItem) -> EnrichedItem:
        ratings, detail, providers = await asyncio.gather(
            self._ratings(item.title, item.year),
            self._detail(item),
            self._providers(item),
        )
        return EnrichedItem(
            item=item,
            genres=detail.genres or item.genres[:MAX_GENRES],
            director=detail.director,
            cast=detail.cast,
            imdb_rating=ratings.imdb,
            rotten_tomatoes=ratings.rotten_tomatoes,
            providers=tuple(providers),
        )

    async def resolve_and_enrich(
        self, title: str, year: str | None = None, preferred_type: MediaType | None = None
    ) -> EnrichedItem | None:
        """Resolve a title against the catalog and enrich the match, if any."""
        item = await resolve_to_canonical(self.catalog, title, year, preferred_type)
        if item is None:
            logger.info("No catalog match for %r (%s, %s)", title, year, preferred_type)
            return None
        return await self.enrich_item(item)

    async def _ratings(self, title: str, year: str | None) -> Ratings:
        key = make_key("ratings", title, year)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            ratings = await self.ratings.fetch(title, year)
        except ProviderError as exc:
            logger.warning("Ratings lookup failed for %r (%s): %s", title, year, exc)
            return Ratings()
        self.cache.set(key, ratings, settings.ratings_cache_ttl_seconds)
        return ratings

    async def _detail(self, item: CanonicalItem) -> CatalogDetail:
        try:
            return await self.catalog.details(item.id, item.media_type)
        except ProviderError as exc:
            logger.warning("Detail lookup failed for %s/%s: %s", item.media_type.value, item.id, exc)
            return CatalogDetail()

    async def _providers(self, item: CanonicalItem) -> list[StreamingProvider]:
        try:
            return await self.catalog.watch_providers(item.id, item.media_type)
        except ProviderError as exc:
            logger.warning("Watch provider lookup failed for %s/%s: %s", item.media_type.value, item.id, exc)
            return []
