from __future__ import annotations

from typing import Any

from moviefinder.core.config import settings
from moviefinder.models.media import (
    UNKNOWN_DIRECTOR,
    CanonicalItem,
    CatalogDetail,
    MediaType,
    StreamingProvider,
)
from moviefinder.providers.base import CatalogProvider
from moviefinder.providers.http import ProviderError, fetch_json
from moviefinder.providers.observability import ProviderMonitor, provider_monitor

API_BASE = "https://api.themoviedb.org/3"
MAX_GENRES = 3
MAX_CAST = 3

GENRE_NAMES: dict[int, str] = {
    28: "Action", 12: "Adventure", 16: "Animation", 35: "Comedy", 80: "Crime", 99: "Documentary",
    18: "Drama", 10751: "Family", 14: "Fantasy", 36: "History", 27: "Horror", 10402: "Music",
    9648: "Mystery", 10749: "Romance", 878: "Sci-Fi", 10770: "TV Movie", 53: "Thriller",
    10752: "War", 37: "Western", 10759: "Action & Adventure", 10762: "Kids", 10763: "News",
    10764: "Reality", 10765: "Sci-Fi & Fantasy", 10766: "Soap", 10767: "Talk", 10768: "War & Politics",
}


def infer_media_type(payload: dict[str, Any], explicit: MediaType | str | None = None) -> MediaType:
    """Decide the namespace of a catalog payload.

    Caller intent wins, then the payload's own `media_type` tag (mixed
    listings such as trending carry one), then the movie-only `title` key.
    """
    for candidate in (explicit, payload.get("media_type")):
        media_type = MediaType.coerce(candidate)
        if media_type:
            return media_type
    return MediaType.MOVIE if payload.get("title") else MediaType.TV


def normalize_item(payload: dict[str, Any], media_type: MediaType | str | None = None) -> CanonicalItem | None:
    """Map a search or discovery payload onto the canonical item shape."""
    if not isinstance(payload, dict) or payload.get("id") is None:
        return None
    title = (payload.get("title") or payload.get("name") or "").strip()
    if not title:
        return None
    genre_ids = payload.get("genre_ids") or []
    return CanonicalItem(
        id=int(payload["id"]),
        title=title,
        media_type=infer_media_type(payload, media_type),
        release_date=payload.get("release_date") or payload.get("first_air_date") or None,
        overview=payload.get("overview"),
        poster_path=payload.get("poster_path"),
        vote_average=payload.get("vote_average"),
        popularity=float(payload.get("popularity") or 0.0),
        genres=tuple(GENRE_NAMES[genre_id] for genre_id in genre_ids if genre_id in GENRE_NAMES),
    )


def _normalize_results(payload: Any, media_type: MediaType | None = None) -> list[CanonicalItem]:
    results = payload.get("results") if isinstance(payload, dict) else None
    items: list[CanonicalItem] = []
    for entry in results or []:
        # trending/all mixes in people; only titles belong in the catalog shape
        if entry.get("media_type") not in (None, "movie", "tv"):
            continue
        item = normalize_item(entry, media_type)
        if item:
            items.append(item)
    return items


def parse_detail(payload: dict[str, Any], kind: MediaType) -> CatalogDetail:
    """Extract genres, director and top-billed cast from a detail payload."""
    credits = payload.get("credits") or {}
    crew = credits.get("crew") or []
    genres = tuple(g.get("name") for g in payload.get("genres") or [] if g.get("name"))[:MAX_GENRES]
    cast = tuple(c.get("name") for c in credits.get("cast") or [] if c.get("name"))[:MAX_CAST]
    director = UNKNOWN_DIRECTOR
    if kind is MediaType.MOVIE:
        match = next((member for member in crew if member.get("job") == "Director"), None)
        if match and match.get("name"):
            director = match["name"]
    else:
        creators = [creator.get("name") for creator in payload.get("created_by") or [] if creator.get("name")]
        if creators:
            director = ", ".join(creators)
        else:
            match = next((member for member in crew if member.get("job") == "Executive Producer"), None)
            if match and match.get("name"):
                director = match["name"]
    return CatalogDetail(genres=genres, director=director, cast=cast)


def parse_watch_providers(payload: dict[str, Any], regions: tuple[str, ...]) -> list[StreamingProvider]:
    """Read subscription offers from the first region that has an entry."""
    results = payload.get("results") or {}
    region_data = next((results[region] for region in regions if results.get(region)), None)
    if not region_data:
        return []
    return [
        StreamingProvider(name=offer.get("provider_name"), logo=offer.get("logo_path"))
        for offer in region_data.get("flatrate") or []
        if offer.get("provider_name")
    ]


class TMDBCatalog(CatalogProvider):
    source_name = "tmdb"

    def __init__(
        self,
        api_key: str | None = None,
        auth_token: str | None = None,
        *,
        monitor: ProviderMonitor | None = None,
    ) -> None:
        self.api_key = api_key or settings.tmdb_api_key
        self.auth_token = auth_token or settings.tmdb_api_auth_header
        self.monitor = monitor or provider_monitor

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        headers: dict[str, str] = {"accept": "application/json"}
        params: dict[str, str] = {}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        elif self.api_key:
            params["api_key"] = self.api_key
        else:
            raise ProviderError("TMDB API credentials missing; set TMDB_API_AUTH_HEADER or TMDB_API_KEY")
        return headers, params

    async def _get(self, operation: str, path: str, params: dict[str, Any] | None = None) -> Any:
        headers, auth_params = self._auth()
        return await self.monitor.track(
            self.source_name,
            operation,
            lambda: fetch_json(f"{API_BASE}{path}", headers=headers, params={**auth_params, **(params or {})}),
            context={"path": path},
        )

    async def search(self, kind: MediaType, query: str) -> list[CanonicalItem]:
        payload = await self._get(
            "search",
            f"/search/{kind.value}",
            {"query": query, "language": "en-US", "page": 1, "include_adult": "false"},
        )
        return _normalize_results(payload, kind)

    async def details(self, item_id: int, kind: MediaType) -> CatalogDetail:
        payload = await self._get("details", f"/{kind.value}/{item_id}", {"append_to_response": "credits"})
        return parse_detail(payload or {}, kind)

    async def watch_providers(self, item_id: int, kind: MediaType) -> list[StreamingProvider]:
        payload = await self._get("watch_providers", f"/{kind.value}/{item_id}/watch/providers")
        return parse_watch_providers(payload or {}, (settings.primary_region, settings.secondary_region))

    async def trending(self) -> list[CanonicalItem]:
        payload = await self._get("trending", "/trending/all/week", {"language": "en-US"})
        return _normalize_results(payload)

    async def discover(self, kind: MediaType, params: dict[str, Any]) -> list[CanonicalItem]:
        payload = await self._get("discover", f"/discover/{kind.value}", {"sort_by": "popularity.desc", **params})
        return _normalize_results(payload, kind)

    async def similar(self, item_id: int, kind: MediaType) -> list[CanonicalItem]:
        payload = await self._get("similar", f"/{kind.value}/{item_id}/similar", {"language": "en-US", "page": 1})
        return _normalize_results(payload, kind)
