"""Detail lookups and their cache policy."""

from __future__ import annotations

import pytest

from moviefinder.models.media import MediaType


@pytest.fixture()
def details(services):
    return services.details


@pytest.mark.asyncio
async def test_details_are_cached_for_an_hour(details, catalog, clock, item_factory):
    catalog.add("heat", item_factory(949, "Heat", release_date="1995-12-15"))

    first = await details.get_details("Heat", "1995", MediaType.MOVIE)
    searches = len(catalog.calls_to("search"))
    second = await details.get_details("heat", "1995", MediaType.MOVIE)

    assert first == second
    assert first.director == "Some Director"
    assert len(catalog.calls_to("search")) == searches

    clock.advance(60 * 60)
    await details.get_details("Heat", "1995", MediaType.MOVIE)
    assert len(catalog.calls_to("search")) > searches


@pytest.mark.asyncio
async def test_missing_titles_are_not_cached(details, catalog, cache, item_factory):
    assert await details.get_details("Heat", "1995", MediaType.MOVIE) is None
    assert len(cache) == 0

    catalog.add("heat", item_factory(949, "Heat", release_date="1995-12-15"))
    found = await details.get_details("Heat", "1995", MediaType.MOVIE)
    assert found.key == (949, MediaType.MOVIE)


@pytest.mark.asyncio
async def test_cache_key_includes_media_type(details, catalog, item_factory):
    catalog.add("dune", item_factory(1, "Dune"), item_factory(2, "Dune", MediaType.TV))

    movie = await details.get_details("Dune", None, MediaType.MOVIE)
    show = await details.get_details("Dune", None, MediaType.TV)

    assert movie.key == (1, MediaType.MOVIE)
    assert show.key == (2, MediaType.TV)
