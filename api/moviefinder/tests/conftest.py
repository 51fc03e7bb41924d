"""Shared pytest fixtures: fake providers, an isolated cache, and an API client."""

from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from moviefinder.api.deps import get_services
from moviefinder.main import app
from moviefinder.models.media import (
    CanonicalItem,
    CatalogDetail,
    MediaType,
    Ratings,
    StreamingProvider,
    TitleGuess,
)
from moviefinder.providers.base import CatalogProvider, RatingsProvider, TitleResolver
from moviefinder.providers.http import ProviderError
from moviefinder.providers.observability import provider_monitor
from moviefinder.services.cache import ResultCache
from moviefinder.services.container import ServiceContainer, build_container
from moviefinder.services.enrichment_service import EnrichmentEngine


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCatalog(CatalogProvider):
    """In-memory catalog keyed by (media type, lowercased query)."""
    source_name = "fake-catalog"

    def __init__(self) -> None:
        self.search_results: dict[tuple[MediaType, str], list[CanonicalItem]] = {}
        self.detail_map: dict[tuple[int, MediaType], CatalogDetail] = {}
        self.provider_map: dict[tuple[int, MediaType], list[StreamingProvider]] = {}
        self.trending_items: list[CanonicalItem] = []
        self.discover_results: dict[MediaType, list[CanonicalItem]] = {MediaType.MOVIE: [], MediaType.TV: []}
        self.similar_results: dict[tuple[int, MediaType], list[CanonicalItem]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, Any]] = []

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failing:
            raise ProviderError(f"{operation} unavailable")

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == operation]

    def add(self, query: str, *items: CanonicalItem, kind: MediaType | None = None) -> None:
        for item in items:
            key = (kind or item.media_type, query.lower())
            self.search_results.setdefault(key, []).append(item)

    async def search(self, kind: MediaType, query: str) -> list[CanonicalItem]:
        self._record("search", kind, query)
        return list(self.search_results.get((kind, query.lower()), []))

    async def details(self, item_id: int, kind: MediaType) -> CatalogDetail:
        self._record("details", item_id, kind)
        return self.detail_map.get(
            (item_id, kind),
            CatalogDetail(genres=("Drama",), director="Some Director", cast=("A", "B", "C")),
        )

    async def watch_providers(self, item_id: int, kind: MediaType) -> list[StreamingProvider]:
        self._record("watch_providers", item_id, kind)
        return list(self.provider_map.get((item_id, kind), [StreamingProvider("Netflix", "/netflix.png")]))

    async def trending(self) -> list[CanonicalItem]:
        self._record("trending")
        return list(self.trending_items)

    async def discover(self, kind: MediaType, params: dict[str, Any]) -> list[CanonicalItem]:
        self._record("discover", kind, dict(params))
        return list(self.discover_results.get(kind, []))

    async def similar(self, item_id: int, kind: MediaType) -> list[CanonicalItem]:
        self._record("similar", item_id, kind)
        return list(self.similar_results.get((item_id, kind), []))


class FakeRatings(RatingsProvider):
    source_name = "fake-ratings"

    def __init__(self) -> None:
        self.scores: dict[str, Ratings] = {}
        self.failing = False
        self.calls: list[tuple[str, str | None]] = []

    async def fetch(self, title: str, year: str | None) -> Ratings:
        self.calls.append((title, year))
        if self.failing:
            raise ProviderError("ratings unavailable")
        return self.scores.get(title, Ratings(imdb="7.5", rotten_tomatoes="80"))


class FakeResolver(TitleResolver):
    """Replays queued answers; an Exception instance in the queue is raised."""
    source_name = "fake-resolver"

    def __init__(self) -> None:
        self.answers: list[list[TitleGuess] | Exception] = []
        self.similar_answer: list[TitleGuess] | Exception = []
        self.calls: list[tuple[str, bool]] = []
        self.similar_calls: list[tuple[str, MediaType, str | None]] = []

    async def suggest_titles(self, query: str, *, grounded: bool) -> list[TitleGuess]:
        self.calls.append((query, grounded))
        answer = self.answers.pop(0) if self.answers else []
        if isinstance(answer, Exception):
            raise answer
        return list(answer)

    async def suggest_similar(self, title: str, media_type: MediaType, year: str | None) -> list[TitleGuess]:
        self.similar_calls.append((title, media_type, year))
        if isinstance(self.similar_answer, Exception):
            raise self.similar_answer
        return list(self.similar_answer)


def make_item(
    item_id: int,
    title: str,
    media_type: MediaType = MediaType.MOVIE,
    *,
    release_date: str | None = "2014-11-05",
    popularity: float = 10.0,
) -> CanonicalItem:
    return CanonicalItem(
        id=item_id,
        title=title,
        media_type=media_type,
        release_date=release_date,
        overview=f"{title} overview",
        poster_path=f"/{item_id}.jpg",
        vote_average=8.0,
        popularity=popularity,
    )


@pytest.fixture(autouse=True)
def _reset_provider_monitor():
    provider_monitor.reset()
    yield
    provider_monitor.reset()


@pytest.fixture()
def item_factory():
    return make_item


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> ResultCache:
    return ResultCache(clock=clock)


@pytest.fixture()
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture()
def ratings() -> FakeRatings:
    return FakeRatings()


@pytest.fixture()
def resolver() -> FakeResolver:
    return FakeResolver()


@pytest.fixture()
def engine(catalog: FakeCatalog, ratings: FakeRatings, cache: ResultCache) -> EnrichmentEngine:
    return EnrichmentEngine(catalog, ratings, cache)


@pytest.fixture()
def services(
    catalog: FakeCatalog, ratings: FakeRatings, resolver: FakeResolver, cache: ResultCache
) -> ServiceContainer:
    return build_container(catalog=catalog, ratings=ratings, resolver=resolver, cache=cache)


@pytest_asyncio.fixture()
async def client(services: ServiceContainer) -> AsyncClient:
    app.dependency_overrides[get_services] = lambda: services
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_services, None)
