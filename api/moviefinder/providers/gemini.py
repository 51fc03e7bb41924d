"""Generative title resolver backed by the Gemini `generateContent` API."""

from __future__ import annotations

import logging
from typing import Any

from moviefinder.core.config import settings
from moviefinder.models.media import MediaType, TitleGuess
from moviefinder.providers.base import TitleResolver
from moviefinder.providers.http import ProviderError, fetch_json
from moviefinder.providers.observability import ProviderMonitor, provider_monitor
from moviefinder.utils.json_extract import extract_json_array

API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"
SIMILAR_COUNT = 5

logger = logging.getLogger("moviefinder.providers.gemini")

RESOLVE_PROMPT = """You are a precision media database assistant.
Task: identify the EXACT official movie or TV show title described by the user.

Rules:
1. Accuracy first. Do not guess and do not blend words into new titles
   (e.g. "Nolan magician" -> "The Prestige", never "The Lost Prestige").
2. Only return titles that exist in public catalogs such as TMDB or IMDb.
3. Media type: a TV series or show is "tv", a film is "movie".
4. Output a raw JSON array only, no markdown.

Format: [{"title": "Exact Title", "year": "YYYY", "media_type": "movie"}]"""

SIMILAR_PROMPT = """Recommendation engine.
Task: list {count} titles similar to "{title}" ({year}).
Rules: 1. Every title must be a {media_type}. 2. Output a raw JSON array only.
Format: [{{"title": "Title", "year": "YYYY", "media_type": "{media_type}"}}]"""


def parse_guesses(entries: list[Any], default_type: MediaType | None = None) -> list[TitleGuess]:
    """Keep well-formed `{title, year, media_type}` entries from model output."""
    guesses: list[TitleGuess] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        title = str(entry.get("title") or "").strip()
        if not title:
            continue
        year = str(entry.get("year") or "").strip() or None
        guesses.append(
            TitleGuess(
                title=title,
                year=year,
                media_type=MediaType.coerce(entry.get("media_type")) or default_type,
            )
        )
    return guesses


def _response_text(payload: Any) -> str | None:
    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [part.get("text") for part in parts if isinstance(part, dict) and part.get("text")]
    return "\n".join(texts) or None


class GeminiResolver(TitleResolver):
    source_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        monitor: ProviderMonitor | None = None,
    ) -> None:
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.monitor = monitor or provider_monitor

    async def _generate(
        self,
        operation: str,
        *,
        prompt: str,
        system_prompt: str,
        temperature: float,
        max_tokens: int,
        grounded: bool = False,
    ) -> str | None:
        if not self.api_key:
            raise ProviderError("Gemini API key missing; set GEMINI_API_KEY")
        payload: dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if grounded:
            payload["tools"] = [{"google_search": {}}]
        # single attempt, never retried
        data = await self.monitor.track(
            self.source_name,
            operation,
            lambda: fetch_json(
                f"{API_BASE}/{self.model}:generateContent",
                method="POST",
                headers={"Content-Type": "application/json"},
                params={"key": self.api_key},
                json=payload,
                attempts=1,
            ),
            context={"grounded": grounded},
        )
        return _response_text(data)

    async def suggest_titles(self, query: str, *, grounded: bool) -> list[TitleGuess]:
        text = await self._generate(
            "resolve_grounded" if grounded else "resolve_internal",
            prompt=query,
            system_prompt=RESOLVE_PROMPT,
            temperature=0.1,
            max_tokens=800,
            grounded=grounded,
        )
        guesses = parse_guesses(extract_json_array(text))
        if text and not guesses:
            logger.info("Gemini answer held no usable titles (grounded=%s)", grounded)
        return guesses

    async def suggest_similar(self, title: str, media_type: MediaType, year: str | None) -> list[TitleGuess]:
        text = await self._generate(
            "similar",
            prompt=f"Find titles similar to {title}",
            system_prompt=SIMILAR_PROMPT.format(
                count=SIMILAR_COUNT, title=title, year=year or "unknown year", media_type=media_type.value
            ),
            temperature=0.3,
            max_tokens=500,
        )
        return parse_guesses(extract_json_array(text), default_type=media_type)
