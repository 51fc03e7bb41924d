from __future__ import annotations

from typing import Any

from moviefinder.core.config import settings
from moviefinder.models.media import Ratings
from moviefinder.providers.base import RatingsProvider
from moviefinder.providers.http import ProviderError, fetch_json
from moviefinder.providers.observability import ProviderMonitor, provider_monitor

API_URL = "https://www.omdbapi.com/"
IMDB_SOURCE = "Internet Movie Database"
ROTTEN_TOMATOES_SOURCE = "Rotten Tomatoes"


def parse_ratings(payload: dict[str, Any]) -> Ratings:
    """Pull IMDb ("8.6/10" -> "8.6") and Rotten Tomatoes ("73%" -> "73") scores."""
    imdb: str | None = None
    rotten: str | None = None
    entries = payload.get("Ratings") if isinstance(payload, dict) else None
    for entry in entries if isinstance(entries, list) else []:
        value = entry.get("Value")
        if not value:
            continue
        if entry.get("Source") == IMDB_SOURCE:
            imdb = value.split("/")[0].strip()
        elif entry.get("Source") == ROTTEN_TOMATOES_SOURCE:
            rotten = value.replace("%", "").strip()
    return Ratings(imdb=imdb, rotten_tomatoes=rotten)


class OMDbRatings(RatingsProvider):
    source_name = "omdb"

    def __init__(self, api_key: str | None = None, *, monitor: ProviderMonitor | None = None) -> None:
        self.api_key = api_key or settings.omdb_api_key
        self.monitor = monitor or provider_monitor

    async def fetch(self, title: str, year: str | None) -> Ratings:
        if not self.api_key:
            raise ProviderError("OMDb API key missing; set OMDB_API_KEY")
        params = {"t": title, "apikey": self.api_key}
        if year:
            params["y"] = year
        payload = await self.monitor.track(
            self.source_name,
            "ratings",
            lambda: fetch_json(API_URL, params=params),
            context={"title": title, "year": year},
        )
        return parse_ratings(payload or {})
