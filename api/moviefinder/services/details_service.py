"""Single-title deep lookups for the detail view."""

from __future__ import annotations

from moviefinder.core.config import settings
from moviefinder.models.media import EnrichedItem, MediaType
from moviefinder.services.cache import ResultCache, make_key
from moviefinder.services.enrichment_service import EnrichmentEngine


class DetailsService:
    def __init__(self, engine: EnrichmentEngine, cache: ResultCache) -> None:
        self.engine = engine
        self.cache = cache

    async def get_details(
        self, title: str, year: str | None = None, media_type: MediaType | None = None
    ) -> EnrichedItem | None:
        """Resolve and enrich one title; misses are returned as None and not cached."""
        key = make_key("details", title, year, media_type.value if media_type else None)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        item = await self.engine.resolve_and_enrich(title, year, media_type)
        if item is not None:
            self.cache.set(key, item, settings.details_cache_ttl_seconds)
        return item
