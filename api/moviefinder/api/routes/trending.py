from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from moviefinder.api.deps import get_trending
from moviefinder.schema.media import MediaItemOut
from moviefinder.schema.search import TrendingResponse
from moviefinder.services.trending_service import TrendingAggregator, TrendingView, UnknownPlatformError, ViewKind

logger = logging.getLogger("moviefinder.api.trending")

router = APIRouter()


async def _respond(aggregator: TrendingAggregator, view: TrendingView) -> TrendingResponse:
    try:
        items = await aggregator.get_trending(view)
    except UnknownPlatformError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Trending %s feed failed", view.kind.value)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server error") from exc
    return TrendingResponse(results=[MediaItemOut.model_validate(item.as_dict()) for item in items])


@router.get("/all", response_model=TrendingResponse)
async def trending_all(aggregator: TrendingAggregator = Depends(get_trending)) -> TrendingResponse:
    return await _respond(aggregator, TrendingView(ViewKind.GLOBAL))


@router.get("/regional", response_model=TrendingResponse)
@router.get("/indian", response_model=TrendingResponse, include_in_schema=False)
async def trending_regional(aggregator: TrendingAggregator = Depends(get_trending)) -> TrendingResponse:
    return await _respond(aggregator, TrendingView(ViewKind.REGIONAL))


@router.get("/platform/{platform}", response_model=TrendingResponse)
async def trending_platform(
    platform: str, aggregator: TrendingAggregator = Depends(get_trending)
) -> TrendingResponse:
    return await _respond(aggregator, TrendingView(ViewKind.PLATFORM, platform=platform))
