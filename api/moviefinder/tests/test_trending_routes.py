"""HTTP surface for trending feeds."""

from __future__ import annotations

import pytest

from moviefinder.models.media import MediaType


@pytest.mark.asyncio
async def test_trending_all(client, catalog, item_factory):
    catalog.trending_items = [item_factory(1, "Hit"), item_factory(2, "Show", MediaType.TV)]

    response = await client.get("/api/trending/all")

    assert response.status_code == 200
    results = response.json()["results"]
    assert [(item["id"], item["media_type"]) for item in results] == [(1, "movie"), (2, "tv")]
    assert results[0]["director"] == "Some Director"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/trending/regional", "/api/trending/indian"])
async def test_regional_feed_and_alias(client, catalog, item_factory, path):
    catalog.discover_results[MediaType.MOVIE] = [item_factory(1, "Film")]
    catalog.discover_results[MediaType.TV] = [item_factory(2, "Show", MediaType.TV)]

    response = await client.get(path)

    assert response.status_code == 200
    assert {item["id"] for item in response.json()["results"]} == {1, 2}


@pytest.mark.asyncio
async def test_platform_feed(client, catalog, item_factory):
    catalog.discover_results[MediaType.TV] = [item_factory(3, "Original", MediaType.TV)]

    response = await client.get("/api/trending/platform/hotstar")

    assert response.status_code == 200
    assert catalog.calls_to("discover")[0][1]["with_watch_providers"] == 122


@pytest.mark.asyncio
async def test_unknown_platform_is_400(client):
    response = await client.get("/api/trending/platform/blockbuster")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_trending_outage_is_empty_list(client, catalog):
    catalog.failing.add("trending")
    response = await client.get("/api/trending/all")
    assert response.status_code == 200
    assert response.json() == {"results": []}
