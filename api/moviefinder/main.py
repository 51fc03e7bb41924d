"""FastAPI application entrypoint and health reporting utilities.

Invariants:
- Provider telemetry is only exposed to allowlisted hosts.
"""

import asyncio
import contextlib
import ipaddress
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from moviefinder.api.router import api_router
from moviefinder.core.config import settings
from moviefinder.core.logging_config import configure_logging
from moviefinder.providers.observability import provider_monitor
from moviefinder.services.container import get_container

logger = logging.getLogger("moviefinder.main")

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)
app.include_router(api_router, prefix=settings.api_prefix)

_sweeper: asyncio.Task | None = None


@app.on_event("startup")
async def _start_cache_sweeper() -> None:
    """Configure logging and start the periodic cache sweep."""
    global _sweeper
    configure_logging()
    cache = get_container().cache
    _sweeper = asyncio.create_task(cache.run_sweeper(settings.cache_sweep_interval_seconds))
    logger.info("%s started (%s)", settings.app_name, settings.environment)


@app.on_event("shutdown")
async def _stop_cache_sweeper() -> None:
    global _sweeper
    if _sweeper is None:
        return
    _sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await _sweeper
    _sweeper = None


REPEATED_FAILURE_THRESHOLD = 3


def _source_health(source: str, payload: dict[str, Any]) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Summarize one source; an open circuit or a failing operation marks it degraded."""
    circuit = payload.get("circuit", {})
    operations = payload.get("operations", {})
    issues: list[dict[str, Any]] = []

    cooldown = float(circuit.get("remaining_cooldown") or 0.0)
    if cooldown > 0:
        issues.append({"source": source, "reason": "circuit_open", "remaining_cooldown": round(cooldown, 2)})

    worst: dict[str, Any] | None = None
    for operation, stats in operations.items():
        failed = int(stats.get("failed") or 0)
        if failed >= REPEATED_FAILURE_THRESHOLD and (worst is None or failed > worst["failed"]):
            worst = {"operation": operation, "failed": failed}
        if stats.get("rate_limited"):
            issues.append(
                {"source": source, "operation": operation, "reason": "rate_limited", "count": int(stats["rate_limited"])}
            )
    if worst:
        issues.append({"source": source, "reason": "repeated_failures", **worst})

    summary = {
        "state": "degraded" if cooldown > 0 or worst else "ok",
        "circuit_open": cooldown > 0,
        "circuit": circuit,
        "operations": operations,
        "failure_total": sum(int(stats.get("failed") or 0) for stats in operations.values()),
        "repeated_failure": worst,
    }
    return summary, issues


def _summarize_providers(snapshot: dict[str, Any]) -> dict[str, Any]:
    sources: dict[str, Any] = {}
    issues: list[dict[str, Any]] = []
    for source, payload in snapshot.items():
        sources[source], source_issues = _source_health(source, payload)
        issues.extend(source_issues)
    return {"sources": sources, "issues": issues}


def _entry_matches(entry: str, candidate: str) -> bool:
    """Match an allowlist entry (CIDR, address or hostname) against a caller."""
    try:
        return ipaddress.ip_address(candidate) in ipaddress.ip_network(entry, strict=False)
    except ValueError:
        return entry.casefold() == candidate.casefold()


def _caller_allowlisted(request: Request) -> bool:
    candidates = []
    if request.client and request.client.host:
        candidates.append(request.client.host)
    if request.headers.get("host"):
        candidates.append(request.headers["host"].split(":")[0])
    entries = [entry for entry in settings.health_allowlist if entry]
    return any(_entry_matches(entry, candidate) for entry in entries for candidate in candidates)


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health(request: Request) -> dict[str, Any]:
    """Liveness check; allowlisted callers also get provider telemetry."""
    if not _caller_allowlisted(request):
        return {"status": "ok"}
    telemetry = _summarize_providers(await provider_monitor.snapshot())
    degraded = any(summary["state"] == "degraded" for summary in telemetry["sources"].values())
    return {"status": "degraded" if degraded else "ok", "providers": telemetry}
