"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import search, trending

api_router = APIRouter()
api_router.include_router(search.router, tags=["search"])
api_router.include_router(trending.router, prefix="/trending", tags=["trending"])
