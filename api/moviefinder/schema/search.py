"""Search and recommendation payloads."""

from __future__ import annotations

from pydantic import BaseModel

from moviefinder.schema.media import MediaItemOut


class FindMoviesRequest(BaseModel):
    """Free-text description or exact title typed by the user."""
    description: str | None = None


class FindMoviesResponse(BaseModel):
    movies: list[MediaItemOut]


class SimilarRequest(BaseModel):
    title: str | None = None
    media_type: str | None = None
    year: str | int | None = None


class SimilarResponse(BaseModel):
    similar: list[MediaItemOut]


class TrendingResponse(BaseModel):
    results: list[MediaItemOut]
