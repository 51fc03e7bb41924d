from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from moviefinder.api.deps import get_details_service, get_pipeline, get_similar_service
from moviefinder.models.media import MediaType
from moviefinder.providers.http import RateLimitedError
from moviefinder.schema.media import DetailsRequest, MediaItemOut
from moviefinder.schema.search import FindMoviesRequest, FindMoviesResponse, SimilarRequest, SimilarResponse
from moviefinder.services.details_service import DetailsService
from moviefinder.services.enrichment_service import MediaItem
from moviefinder.services.query_pipeline import QueryResolutionPipeline, QueryValidationError
from moviefinder.services.similar_service import SimilarService

logger = logging.getLogger("moviefinder.api.search")

router = APIRouter()


def _serialize(items: list[MediaItem]) -> list[MediaItemOut]:
    return [MediaItemOut.model_validate(item.as_dict()) for item in items]


def _year(value: str | int | None) -> str | None:
    if value is None:
        return None
    return str(value).strip() or None


@router.post("/find-movies", response_model=FindMoviesResponse)
async def find_movies(
    payload: FindMoviesRequest,
    pipeline: QueryResolutionPipeline = Depends(get_pipeline),
) -> FindMoviesResponse:
    if not payload.description or not payload.description.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Description required")
    try:
        items = await pipeline.resolve(payload.description)
    except QueryValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except RateLimitedError as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="AI search is rate limited; try again shortly or search by exact title",
        ) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Query resolution failed")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error") from exc
    return FindMoviesResponse(movies=_serialize(items))


@router.post("/get-similar", response_model=SimilarResponse)
async def get_similar(
    payload: SimilarRequest,
    similar_service: SimilarService = Depends(get_similar_service),
) -> SimilarResponse:
    media_type = MediaType.coerce(payload.media_type)
    if not payload.title or not media_type:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title/Type required")
    try:
        items = await similar_service.find_similar(payload.title, media_type, _year(payload.year))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Similar lookup failed for %r", payload.title)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error") from exc
    return SimilarResponse(similar=_serialize(items))


@router.post("/media-details")
async def get_media_details(
    payload: DetailsRequest,
    details_service: DetailsService = Depends(get_details_service),
) -> dict[str, Any]:
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title required")
    try:
        item = await details_service.get_details(
            payload.title, _year(payload.year), MediaType.coerce(payload.media_type)
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("Detail lookup failed for %r", payload.title)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch details"
        ) from exc
    if item is None:
        return {}
    return MediaItemOut.model_validate(item.as_dict()).model_dump()
