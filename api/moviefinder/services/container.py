"""Process-wide wiring of providers, cache and services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from moviefinder.core.config import settings
from moviefinder.providers import get_provider
from moviefinder.providers.base import CatalogProvider, RatingsProvider, TitleResolver
from moviefinder.services.cache import ResultCache
from moviefinder.services.details_service import DetailsService
from moviefinder.services.enrichment_service import EnrichmentEngine
from moviefinder.services.query_pipeline import QueryResolutionPipeline
from moviefinder.services.similar_service import SimilarService
from moviefinder.services.trending_service import TrendingAggregator


@dataclass(slots=True)
class ServiceContainer:
    cache: ResultCache
    engine: EnrichmentEngine
    pipeline: QueryResolutionPipeline
    similar: SimilarService
    details: DetailsService
    trending: TrendingAggregator


def build_container(
    *,
    catalog: CatalogProvider | None = None,
    ratings: RatingsProvider | None = None,
    resolver: TitleResolver | None = None,
    cache: ResultCache | None = None,
) -> ServiceContainer:
    """Assemble services around one shared cache; unspecified providers use the registry."""
    cache = cache if cache is not None else ResultCache(max_entries=settings.cache_max_entries)
    catalog = catalog if catalog is not None else get_provider("tmdb")
    ratings = ratings if ratings is not None else get_provider("omdb")
    resolver = resolver if resolver is not None else get_provider("gemini")
    engine = EnrichmentEngine(catalog, ratings, cache)
    return ServiceContainer(
        cache=cache,
        engine=engine,
        pipeline=QueryResolutionPipeline(engine, resolver, cache),
        similar=SimilarService(engine, resolver),
        details=DetailsService(engine, cache),
        trending=TrendingAggregator(engine, cache),
    )


@lru_cache
def get_container() -> ServiceContainer:
    return build_container()
