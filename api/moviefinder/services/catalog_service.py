"""Catalog lookups shared by the search, similar and details flows.

Invariants:
- Provider failures surface as empty results, never as exceptions.
- A resolved item's media type is the namespace it was found in.
"""

from __future__ import annotations

import asyncio
import logging
import re

from moviefinder.models.media import CanonicalItem, MediaType
from moviefinder.providers.base import CatalogProvider
from moviefinder.providers.http import ProviderError

logger = logging.getLogger("moviefinder.services.catalog")

_YEAR_ANNOTATION_RE = re.compile(r"\(\d{4}\)")


def clean_title(title: str) -> str:
    """Strip "(1999)"-style year annotations that models and users append."""
    return _YEAR_ANNOTATION_RE.sub("", str(title)).strip()


async def safe_search(catalog: CatalogProvider, kind: MediaType, query: str) -> list[CanonicalItem]:
    try:
        return await catalog.search(kind, query)
    except ProviderError as exc:
        logger.warning("Catalog %s search failed for %r: %s", kind.value, query, exc)
        return []


async def search_direct(catalog: CatalogProvider, query: str, *, limit: int = 10) -> list[CanonicalItem]:
    """Keyword search across movies and tv, most popular first."""
    movies, shows = await asyncio.gather(
        safe_search(catalog, MediaType.MOVIE, query),
        safe_search(catalog, MediaType.TV, query),
    )
    combined = sorted([*movies, *shows], key=lambda item: item.popularity, reverse=True)
    return combined[:limit]


def _pick(results: list[CanonicalItem], year: str | None) -> CanonicalItem | None:
    if not results:
        return None
    if year:
        match = next((item for item in results if item.release_date and item.release_date.startswith(year)), None)
        if match:
            return match
    return results[0]


async def find_in(
    catalog: CatalogProvider, title: str, year: str | None, kind: MediaType
) -> CanonicalItem | None:
    """Search one namespace; prefer a release-year match over raw relevance."""
    return _pick(await safe_search(catalog, kind, title), str(year).strip() if year else None)


async def resolve_to_canonical(
    catalog: CatalogProvider,
    title: str,
    year: str | None = None,
    preferred_type: MediaType | None = None,
) -> CanonicalItem | None:
    """Resolve a loosely identified title to a catalog entry.

    The preferred namespace (movie when unspecified) is searched first and
    the opposite one once more if it comes back empty, since suggested media
    types are often wrong for ambiguous titles.
    """
    if not title:
        return None
    cleaned = clean_title(title)
    if not cleaned:
        return None
    first_kind = preferred_type or MediaType.MOVIE
    item = await find_in(catalog, cleaned, year, first_kind)
    if item:
        return item
    return await find_in(catalog, cleaned, year, first_kind.opposite)
