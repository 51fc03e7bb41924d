from fastapi import Depends

from moviefinder.services.container import ServiceContainer, get_container
from moviefinder.services.details_service import DetailsService
from moviefinder.services.query_pipeline import QueryResolutionPipeline
from moviefinder.services.similar_service import SimilarService
from moviefinder.services.trending_service import TrendingAggregator


def get_services() -> ServiceContainer:
    return get_container()


def get_pipeline(services: ServiceContainer = Depends(get_services)) -> QueryResolutionPipeline:
    return services.pipeline


def get_similar_service(services: ServiceContainer = Depends(get_services)) -> SimilarService:
    return services.similar


def get_details_service(services: ServiceContainer = Depends(get_services)) -> DetailsService:
    return services.details


def get_trending(services: ServiceContainer = Depends(get_services)) -> TrendingAggregator:
    return services.trending
