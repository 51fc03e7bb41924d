from __future__ import annotations

import pytest

import moviefinder.providers.omdb as omdb_module
from moviefinder.providers.http import ProviderError
from moviefinder.providers.omdb import OMDbRatings, parse_ratings


def test_parse_ratings_extracts_scores():
    ratings = parse_ratings(
        {
            "Ratings": [
                {"Source": "Internet Movie Database", "Value": "8.7/10"},
                {"Source": "Rotten Tomatoes", "Value": "73%"},
                {"Source": "Metacritic", "Value": "74/100"},
            ]
        }
    )
    assert ratings.imdb == "8.7"
    assert ratings.rotten_tomatoes == "73"


def test_parse_ratings_handles_missing_sources():
    ratings = parse_ratings({"Response": "False", "Error": "Movie not found!"})
    assert ratings.imdb is None
    assert ratings.rotten_tomatoes is None


@pytest.mark.asyncio
async def test_fetch_requires_api_key(monkeypatch):
    monkeypatch.setattr(omdb_module.settings, "omdb_api_key", None)
    with pytest.raises(ProviderError):
        await OMDbRatings().fetch("Interstellar", "2014")


@pytest.mark.asyncio
async def test_fetch_passes_title_and_year(monkeypatch):
    seen: dict = {}

    async def _fake_fetch(url, *, params=None, **kwargs):
        seen.update(params)
        return {"Ratings": [{"Source": "Internet Movie Database", "Value": "8.7/10"}]}

    monkeypatch.setattr(omdb_module, "fetch_json", _fake_fetch)
    ratings = await OMDbRatings(api_key="omdb-key").fetch("Interstellar", "2014")

    assert seen == {"t": "Interstellar", "y": "2014", "apikey": "omdb-key"}
    assert ratings.imdb == "8.7"
