"""Popular-title feeds: global, regional and per-platform.

Invariants:
- Every returned item has been through the enrichment engine.
- Feeds are cached for the trending lifetime; empty feeds are not cached.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import random
from dataclasses import dataclass

from moviefinder.core.config import settings
from moviefinder.models.media import CanonicalItem, MediaType
from moviefinder.providers.http import ProviderError
from moviefinder.services.cache import ResultCache, make_key
from moviefinder.services.enrichment_service import EnrichmentEngine, MediaItem

logger = logging.getLogger("moviefinder.services.trending")


class UnknownPlatformError(ValueError):
    """Raised for a platform name missing from the configured provider map."""


class ViewKind(str, enum.Enum):
    GLOBAL = "global"
    REGIONAL = "regional"
    PLATFORM = "platform"


@dataclass(frozen=True, slots=True)
class TrendingView:
    kind: ViewKind
    platform: str | None = None

    @property
    def cache_key(self) -> str:
        if self.kind is ViewKind.PLATFORM:
            return make_key("trending", self.kind.value, self.platform)
        return make_key("trending", self.kind.value)


class TrendingAggregator:
    def __init__(self, engine: EnrichmentEngine, cache: ResultCache, *, rng: random.Random | None = None) -> None:
        self.engine = engine
        self.catalog = engine.catalog
        self.cache = cache
        self.rng = rng or random.Random()

    async def get_trending(self, view: TrendingView) -> list[MediaItem]:
        provider_id = self._provider_id(view) if view.kind is ViewKind.PLATFORM else None
        cached = self.cache.get(view.cache_key)
        if cached is not None:
            return list(cached)

        try:
            if view.kind is ViewKind.GLOBAL:
                items = await self._global()
            elif view.kind is ViewKind.REGIONAL:
                items = await self._regional()
            else:
                items = await self._platform(provider_id)
        except ProviderError as exc:
            logger.warning("Trending %s feed unavailable: %s", view.kind.value, exc)
            return []

        enriched = await self.engine.enrich(items, len(items))
        if enriched:
            self.cache.set(view.cache_key, tuple(enriched), settings.trending_cache_ttl_seconds)
        return enriched

    def _provider_id(self, view: TrendingView) -> int:
        name = (view.platform or "").strip().lower()
        providers = settings.platform_providers
        if not name or name not in providers:
            raise UnknownPlatformError(f"Unknown platform {view.platform!r}")
        return providers[name]

    async def _global(self) -> list[CanonicalItem]:
        return (await self.catalog.trending())[: settings.trending_cap]

    async def _discover_or_empty(self, kind: MediaType, params: dict) -> list[CanonicalItem]:
        try:
            return await self.catalog.discover(kind, params)
        except ProviderError as exc:
            logger.warning("Regional %s discovery unavailable: %s", kind.value, exc)
            return []

    async def _regional(self) -> list[CanonicalItem]:
        languages = settings.regional_languages
        movies, shows = await asyncio.gather(
            self._discover_or_empty(
                MediaType.MOVIE, {"region": settings.primary_region, "with_original_language": languages}
            ),
            self._discover_or_empty(
                MediaType.TV, {"watch_region": settings.primary_region, "with_original_language": languages}
            ),
        )
        cap = settings.regional_per_type_cap
        mixed = [*movies[:cap], *shows[:cap]]
        self.rng.shuffle(mixed)
        return mixed[: settings.trending_cap]

    async def _platform(self, provider_id: int) -> list[CanonicalItem]:
        shows = await self.catalog.discover(
            MediaType.TV,
            {"watch_region": settings.primary_region, "with_watch_providers": provider_id},
        )
        return shows[: settings.trending_cap]
