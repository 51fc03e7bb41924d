"""Health endpoint visibility and provider telemetry summaries."""

from __future__ import annotations

import pytest

import moviefinder.main as main_module
from moviefinder.providers.http import ProviderError, RateLimitedError
from moviefinder.providers.observability import provider_monitor


async def _fail():
    raise ProviderError("upstream down")


async def _limited():
    raise RateLimitedError("quota")


@pytest.mark.asyncio
async def test_health_hides_telemetry_by_default(client, monkeypatch):
    monkeypatch.setattr(main_module.settings, "health_allowlist", [])

    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_reports_degraded_source_to_allowlisted_host(client, monkeypatch):
    monkeypatch.setattr(main_module.settings, "health_allowlist", ["testserver"])
    for _ in range(3):
        with pytest.raises(ProviderError):
            await provider_monitor.track("tmdb", "search", _fail)

    response = await client.get("/api/health")

    body = response.json()
    assert body["status"] == "degraded"
    tmdb = body["providers"]["sources"]["tmdb"]
    assert tmdb["state"] == "degraded"
    assert tmdb["circuit_open"] is True
    reasons = {issue["reason"] for issue in body["providers"]["issues"]}
    assert {"circuit_open", "repeated_failures"} <= reasons


@pytest.mark.asyncio
async def test_rate_limits_are_issues_not_degradation(client, monkeypatch):
    monkeypatch.setattr(main_module.settings, "health_allowlist", ["127.0.0.0/8", "testserver"])
    with pytest.raises(RateLimitedError):
        await provider_monitor.track("gemini", "resolve_grounded", _limited)

    body = (await client.get("/health")).json()

    assert body["status"] == "ok"
    assert body["providers"]["issues"] == [
        {"source": "gemini", "operation": "resolve_grounded", "reason": "rate_limited", "count": 1}
    ]


def test_allowlist_entries_match_networks_and_hosts():
    assert main_module._entry_matches("10.0.0.0/8", "10.1.2.3")
    assert not main_module._entry_matches("10.0.0.0/8", "192.168.0.1")
    assert main_module._entry_matches("Monitor.Internal", "monitor.internal")
