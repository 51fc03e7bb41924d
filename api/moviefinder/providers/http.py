from __future__ import annotations

from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from moviefinder.core.config import settings


class ProviderError(Exception):
    """Recoverable upstream failure; callers degrade to empty or partial data."""


class RateLimitedError(ProviderError):
    """Upstream answered 429; never retried."""


class _RetryableServerError(ProviderError):
    pass


async def fetch_json(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict | None = None,
    method: str = "GET",
    json: dict[str, Any] | None = None,
    attempts: int | None = None,
    timeout: float | None = None,
) -> Any:
    max_attempts = attempts if attempts is not None else settings.provider_retry_attempts
    request_timeout = timeout if timeout is not None else settings.provider_timeout_seconds
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(max(1, max_attempts)),
            wait=wait_exponential_jitter(initial=1, max=8),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableServerError)),
            reraise=True,
        ):
            with attempt:
                async with httpx.AsyncClient(timeout=request_timeout) as client:
                    response = await client.request(method, url, headers=headers, params=params, json=json)
                    if response.status_code == 429:
                        raise RateLimitedError(f"Rate limited by {response.request.url.host}")
                    if response.status_code >= 500:
                        raise _RetryableServerError(f"Server error {response.status_code}")
                    if response.status_code >= 400:
                        raise ProviderError(f"Client error {response.status_code}")
                    return response.json()
    except httpx.HTTPError as exc:
        raise ProviderError(f"{type(exc).__name__}: {exc}") from exc
    except ValueError as exc:
        raise ProviderError(f"Invalid JSON payload: {exc}") from exc
    raise ProviderError("Unreachable")
