"""Enrichment engine: ordering, prefix limits and per-field degradation."""

from __future__ import annotations

import pytest

from moviefinder.models.media import (
    CanonicalItem,
    CatalogDetail,
    EnrichedItem,
    MediaType,
    Ratings,
    StreamingProvider,
)


@pytest.mark.asyncio
async def test_enrich_preserves_length_and_order(engine, item_factory):
    items = [item_factory(i, f"Title {i}") for i in range(5)]

    enriched = await engine.enrich(items, limit=10)

    assert [item.key for item in enriched] == [item.key for item in items]
    assert all(isinstance(item, EnrichedItem) for item in enriched)


@pytest.mark.asyncio
async def test_enrich_only_touches_the_prefix(engine, catalog, item_factory):
    items = [item_factory(i, f"Title {i}") for i in range(4)]

    enriched = await engine.enrich(items, limit=2)

    assert [type(item) for item in enriched] == [EnrichedItem, EnrichedItem, CanonicalItem, CanonicalItem]
    assert enriched[2] is items[2]
    assert sorted(args[0] for args in catalog.calls_to("details")) == [0, 1]


@pytest.mark.asyncio
async def test_enrich_empty_input(engine):
    assert await engine.enrich([]) == []


@pytest.mark.asyncio
async def test_enrich_item_merges_all_sources(engine, catalog, ratings, item_factory):
    item = item_factory(157336, "Interstellar")
    catalog.detail_map[item.key] = CatalogDetail(
        genres=("Adventure", "Drama", "Science Fiction"),
        director="Christopher Nolan",
        cast=("Matthew McConaughey", "Anne Hathaway", "Michael Caine"),
    )
    catalog.provider_map[item.key] = [StreamingProvider("Amazon Prime Video", "/prime.png")]
    ratings.scores["Interstellar"] = Ratings(imdb="8.7", rotten_tomatoes="73")

    enriched = await engine.enrich_item(item)

    assert enriched.director == "Christopher Nolan"
    assert enriched.genres == ("Adventure", "Drama", "Science Fiction")
    assert enriched.imdb_rating == "8.7"
    assert enriched.rotten_tomatoes == "73"
    assert enriched.providers == (StreamingProvider("Amazon Prime Video", "/prime.png"),)
    assert ratings.calls == [("Interstellar", "2014")]


@pytest.mark.asyncio
async def test_one_failing_source_degrades_one_field(engine, catalog, item_factory):
    catalog.failing.update({"details", "watch_providers"})
    item = CanonicalItem(id=5, title="Heat", media_type=MediaType.MOVIE, genres=("Action", "Crime", "Drama", "Thriller"))

    enriched = await engine.enrich_item(item)

    assert enriched.director == "Unknown"
    assert enriched.cast == ()
    assert enriched.providers == ()
    assert enriched.genres == ("Action", "Crime", "Drama")
    assert enriched.imdb_rating == "7.5"


@pytest.mark.asyncio
async def test_ratings_failures_are_not_cached(engine, ratings, item_factory):
    ratings.failing = True
    first = await engine.enrich_item(item_factory(1, "Heat"))
    ratings.failing = False
    second = await engine.enrich_item(item_factory(1, "Heat"))

    assert first.imdb_rating is None
    assert second.imdb_rating == "7.5"
    assert len(ratings.calls) == 2


@pytest.mark.asyncio
async def test_ratings_are_cached_per_title_and_year(engine, ratings, clock, item_factory):
    await engine.enrich_item(item_factory(1, "Heat", release_date="1995-12-15"))
    await engine.enrich_item(item_factory(1, "Heat", release_date="1995-12-15"))
    assert len(ratings.calls) == 1

    clock.advance(60 * 60 * 24)
    await engine.enrich_item(item_factory(1, "Heat", release_date="1995-12-15"))
    assert len(ratings.calls) == 2


@pytest.mark.asyncio
async def test_resolve_and_enrich_miss_is_none(engine):
    assert await engine.resolve_and_enrich("Nothing Here", "2001", MediaType.MOVIE) is None
