"""Similar-title recommendations: AI suggestions first, catalog-native second."""

from __future__ import annotations

import asyncio
import logging

from moviefinder.core.config import settings
from moviefinder.models.media import MediaType
from moviefinder.providers.base import TitleResolver
from moviefinder.providers.http import ProviderError
from moviefinder.services.catalog_service import clean_title, find_in
from moviefinder.services.enrichment_service import EnrichmentEngine, MediaItem

MAX_NATIVE_SIMILAR = 10

logger = logging.getLogger("moviefinder.services.similar")


class SimilarService:
    def __init__(self, engine: EnrichmentEngine, resolver: TitleResolver) -> None:
        self.engine = engine
        self.catalog = engine.catalog
        self.resolver = resolver

    async def find_similar(self, title: str, media_type: MediaType, year: str | None = None) -> list[MediaItem]:
        results = await self._from_resolver(title, media_type, year)
        if results:
            return results
        logger.info("Falling back to catalog-native similar titles for %r (%s)", title, media_type.value)
        return await self._from_catalog(title, media_type, year)

    async def _from_resolver(self, title: str, media_type: MediaType, year: str | None) -> list[MediaItem]:
        try:
            guesses = await self.resolver.suggest_similar(title, media_type, year)
        except ProviderError as exc:
            # includes RateLimitedError
            logger.warning("Similar-title suggestions failed for %r: %s", title, exc)
            return []
        if not guesses:
            return []
        enriched = await asyncio.gather(
            *(
                self.engine.resolve_and_enrich(guess.title, guess.year, guess.media_type or media_type)
                for guess in guesses
            )
        )
        return [item for item in enriched if item is not None]

    async def _from_catalog(self, title: str, media_type: MediaType, year: str | None) -> list[MediaItem]:
        cleaned = clean_title(title)
        source = await find_in(self.catalog, cleaned, year, media_type)
        if source is None and year:
            source = await find_in(self.catalog, cleaned, None, media_type)
        if source is None:
            return []
        try:
            similar = await self.catalog.similar(source.id, media_type)
        except ProviderError as exc:
            logger.warning("Catalog similar listing failed for %s/%s: %s", media_type.value, source.id, exc)
            return []
        return await self.engine.enrich(similar[:MAX_NATIVE_SIMILAR], settings.similar_enrich_limit)
