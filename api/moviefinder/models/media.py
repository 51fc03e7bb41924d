"""Canonical and enriched media records shared by providers and services.

Invariants:
- Identity is the `(id, media_type)` pair; catalog ids overlap across movie/tv.
- `media_type` is fixed when a record is formed and never flipped afterwards.
- Records are frozen; enrichment builds a new value instead of mutating.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import Any

UNKNOWN_DIRECTOR = "Unknown"


class MediaType(str, enum.Enum):
    """Catalog namespaces for title records."""
    MOVIE = "movie"
    TV = "tv"

    @property
    def opposite(self) -> "MediaType":
        return MediaType.TV if self is MediaType.MOVIE else MediaType.MOVIE

    @classmethod
    def coerce(cls, value: Any) -> "MediaType | None":
        """Map loose caller input ("movie", "TV", "series") onto a media type."""
        if isinstance(value, MediaType):
            return value
        if not value:
            return None
        token = str(value).strip().lower()
        if token in {"tv", "show", "series", "tv_show", "tvshow"}:
            return cls.TV
        if token in {"movie", "film"}:
            return cls.MOVIE
        return None


@dataclass(frozen=True, slots=True)
class StreamingProvider:
    name: str
    logo: str | None = None


@dataclass(frozen=True, slots=True)
class Ratings:
    """Third-party scores; values are bare strings like "8.6" and "73"."""
    imdb: str | None = None
    rotten_tomatoes: str | None = None


@dataclass(frozen=True, slots=True)
class CatalogDetail:
    """Credits-derived fields pulled from a catalog detail lookup."""
    genres: tuple[str, ...] = ()
    director: str = UNKNOWN_DIRECTOR
    cast: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TitleGuess:
    """A generative resolver suggestion that still needs catalog verification."""
    title: str
    year: str | None = None
    media_type: MediaType | None = None


@dataclass(frozen=True, slots=True)
class CanonicalItem:
    """Normalized catalog entry produced from a search or discovery payload."""
    id: int
    title: str
    media_type: MediaType
    release_date: str | None = None
    overview: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    popularity: float = 0.0
    genres: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[int, MediaType]:
        return (self.id, self.media_type)

    @property
    def year(self) -> str | None:
        if not self.release_date:
            return None
        return self.release_date.split("-")[0] or None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "release_date": self.release_date,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "vote_average": self.vote_average,
            "media_type": self.media_type.value,
            "genres": list(self.genres),
        }


@dataclass(frozen=True, slots=True)
class EnrichedItem:
    """Canonical item with deep metadata attached."""
    item: CanonicalItem
    genres: tuple[str, ...] = ()
    director: str = UNKNOWN_DIRECTOR
    cast: tuple[str, ...] = ()
    imdb_rating: str | None = None
    rotten_tomatoes: str | None = None
    providers: tuple[StreamingProvider, ...] = field(default_factory=tuple)

    @property
    def key(self) -> tuple[int, MediaType]:
        return self.item.key

    @property
    def media_type(self) -> MediaType:
        return self.item.media_type

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def title(self) -> str:
        return self.item.title

    @property
    def release_date(self) -> str | None:
        return self.item.release_date

    @property
    def overview(self) -> str | None:
        return self.item.overview

    @property
    def poster_path(self) -> str | None:
        return self.item.poster_path

    @property
    def vote_average(self) -> float | None:
        return self.item.vote_average

    @property
    def popularity(self) -> float:
        return self.item.popularity

    @property
    def year(self) -> str | None:
        return self.item.year

    def as_dict(self) -> dict[str, Any]:
        payload = self.item.as_dict()
        payload.update(
            {
                "genres": list(self.genres),
                "director": self.director,
                "cast": list(self.cast),
                "imdb_rating": self.imdb_rating,
                "rotten_tomatoes": self.rotten_tomatoes,
                "providers": [asdict(provider) for provider in self.providers],
            }
        )
        return payload
