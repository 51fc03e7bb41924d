"""Free-text query resolution: cache, title fast path, AI guesses, catalog fallback.

The cascade is an ordered list of named stages. Each stage returns a tagged
`StageOutcome`; the driver stops on a HIT (caching it at the stage's
lifetime) or a fatal error, and moves on after EMPTY or a recoverable error.

Invariants:
- Only a rate-limit answer from the resolver escapes `resolve`; every other
  provider failure degrades to the next stage.
- A rate-limited run writes nothing to the cache.
- A run that exhausts every stage caches the empty result at the fallback
  lifetime.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from moviefinder.core.config import settings
from moviefinder.models.media import CanonicalItem, MediaType, TitleGuess
from moviefinder.providers.base import TitleResolver
from moviefinder.providers.http import ProviderError, RateLimitedError
from moviefinder.services.cache import ResultCache, make_key
from moviefinder.services.catalog_service import search_direct
from moviefinder.services.enrichment_service import EnrichmentEngine, MediaItem
from moviefinder.services.intent import is_title_query, wants_tv

logger = logging.getLogger("moviefinder.services.pipeline")


class QueryValidationError(ValueError):
    """Raised when a query is missing or blank."""


class OutcomeKind(str, enum.Enum):
    HIT = "hit"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class StageOutcome:
    kind: OutcomeKind
    items: tuple[MediaItem, ...] = ()
    ttl_seconds: int | None = None
    error: Exception | None = None
    fatal: bool = False

    @classmethod
    def hit(cls, items: list[MediaItem] | tuple[MediaItem, ...], ttl_seconds: int | None = None) -> "StageOutcome":
        return cls(OutcomeKind.HIT, items=tuple(items), ttl_seconds=ttl_seconds)

    @classmethod
    def empty(cls) -> "StageOutcome":
        return cls(OutcomeKind.EMPTY)

    @classmethod
    def failure(cls, error: Exception, *, fatal: bool = False) -> "StageOutcome":
        return cls(OutcomeKind.ERROR, error=error, fatal=fatal)


@dataclass(slots=True)
class QueryContext:
    """Per-run state handed from stage to stage."""
    query: str
    cache_key: str
    title_like: bool
    tv_requested: bool
    direct_candidates: list[CanonicalItem] | None = None
    trace: list[tuple[str, OutcomeKind]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Resolution:
    items: tuple[MediaItem, ...]
    stage: str
    trace: tuple[tuple[str, OutcomeKind], ...] = ()


Stage = Callable[[QueryContext], Awaitable[StageOutcome]]


class QueryResolutionPipeline:
    def __init__(self, engine: EnrichmentEngine, resolver: TitleResolver, cache: ResultCache) -> None:
        self.engine = engine
        self.catalog = engine.catalog
        self.resolver = resolver
        self.cache = cache

    @property
    def stages(self) -> list[tuple[str, Stage]]:
        return [
            ("cache", self._from_cache),
            ("title_fast_path", self._title_fast_path),
            ("ai_guided", self._ai_guided),
            ("catalog_fallback", self._catalog_fallback),
        ]

    async def resolve(self, raw_query: str) -> list[MediaItem]:
        resolution = await self.run(raw_query)
        return list(resolution.items)

    async def run(self, raw_query: str) -> Resolution:
        query = (raw_query or "").strip()
        if not query:
            raise QueryValidationError("Description required")
        context = QueryContext(
            query=query,
            cache_key=make_key("search", query),
            title_like=is_title_query(query),
            tv_requested=wants_tv(query),
        )
        logger.info("Resolving %r (title_like=%s)", query[:50], context.title_like)

        for name, stage in self.stages:
            try:
                outcome = await stage(context)
            except RateLimitedError as exc:
                outcome = StageOutcome.failure(exc, fatal=True)
            except ProviderError as exc:
                outcome = StageOutcome.failure(exc)
            context.trace.append((name, outcome.kind))

            if outcome.kind is OutcomeKind.HIT:
                if outcome.ttl_seconds:
                    self.cache.set(context.cache_key, outcome.items, outcome.ttl_seconds)
                logger.info("Stage %s answered %r with %d items", name, query[:50], len(outcome.items))
                return Resolution(items=outcome.items, stage=name, trace=tuple(context.trace))
            if outcome.kind is OutcomeKind.ERROR:
                if outcome.fatal:
                    logger.warning("Stage %s aborted %r: %s", name, query[:50], outcome.error)
                    raise outcome.error
                logger.warning("Stage %s failed for %r, continuing: %s", name, query[:50], outcome.error)

        logger.info("No stage produced results for %r", query[:50])
        self.cache.set(context.cache_key, (), settings.fallback_cache_ttl_seconds)
        return Resolution(items=(), stage="exhausted", trace=tuple(context.trace))

    async def _from_cache(self, context: QueryContext) -> StageOutcome:
        cached = self.cache.get(context.cache_key)
        if cached is None:
            return StageOutcome.empty()
        return StageOutcome.hit(cached)

    async def _title_fast_path(self, context: QueryContext) -> StageOutcome:
        if not context.title_like:
            return StageOutcome.empty()
        candidates = await self._direct_candidates(context)
        if not candidates:
            return StageOutcome.empty()
        enriched = await self.engine.enrich(candidates, settings.search_enrich_limit)
        return StageOutcome.hit(enriched, settings.fast_path_cache_ttl_seconds)

    async def _ai_guided(self, context: QueryContext) -> StageOutcome:
        try:
            guesses = await self.suggest_titles(context.query)
        except RateLimitedError as exc:
            return StageOutcome.failure(exc, fatal=True)
        if not guesses:
            return StageOutcome.empty()

        override = MediaType.TV if context.tv_requested else None
        resolved = await asyncio.gather(
            *(
                self.engine.resolve_and_enrich(guess.title, guess.year, override or guess.media_type)
                for guess in guesses
            )
        )
        found: list[MediaItem] = []
        seen: set[tuple[int, MediaType]] = set()
        for item in resolved:
            if item is None or item.key in seen:
                continue
            seen.add(item.key)
            found.append(item)
        if not found:
            logger.info("None of %d suggestions for %r exist in the catalog", len(guesses), context.query[:50])
            return StageOutcome.empty()
        return StageOutcome.hit(found, settings.search_cache_ttl_seconds)

    async def _catalog_fallback(self, context: QueryContext) -> StageOutcome:
        candidates = await self._direct_candidates(context)
        if not candidates:
            return StageOutcome.empty()
        enriched = await self.engine.enrich(candidates, settings.search_enrich_limit)
        return StageOutcome.hit(enriched, settings.fallback_cache_ttl_seconds)

    async def suggest_titles(self, query: str) -> list[TitleGuess]:
        """Ask the resolver with search grounding, then from internal knowledge.

        A rate-limit answer from either attempt propagates immediately; any
        other failure or an empty answer moves on to the next mode.
        """
        for grounded in (True, False):
            try:
                guesses = await self.resolver.suggest_titles(query, grounded=grounded)
            except RateLimitedError:
                raise
            except ProviderError as exc:
                logger.warning("Resolver attempt failed (grounded=%s): %s", grounded, exc)
                continue
            if guesses:
                return guesses
        return []

    async def _direct_candidates(self, context: QueryContext) -> list[CanonicalItem]:
        # fast path and fallback share one keyword search per run
        if context.direct_candidates is None:
            context.direct_candidates = await search_direct(
                self.catalog, context.query, limit=settings.direct_search_limit
            )
        return context.direct_candidates
