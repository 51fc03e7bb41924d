"""Response and request schemas for media lookups."""

from __future__ import annotations

from pydantic import BaseModel, Field

from moviefinder.models.media import UNKNOWN_DIRECTOR


class StreamingProviderOut(BaseModel):
    name: str
    logo: str | None = None


class MediaItemOut(BaseModel):
    """Catalog item as served to clients; enrichment fields are empty when skipped."""
    id: int
    title: str
    release_date: str | None = None
    overview: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    media_type: str
    genres: list[str] = Field(default_factory=list)
    director: str = UNKNOWN_DIRECTOR
    cast: list[str] = Field(default_factory=list)
    imdb_rating: str | None = None
    rotten_tomatoes: str | None = None
    providers: list[StreamingProviderOut] = Field(default_factory=list)


class DetailsRequest(BaseModel):
    title: str | None = None
    year: str | int | None = None
    media_type: str | None = None
