"""Per-source circuit breakers and call telemetry for upstream providers.

Invariants:
- A source with an open circuit is not called until its cooldown elapses.
- Rate-limit answers are counted apart from failures and never open a circuit.
- Error text is redacted before it is stored or logged.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, DefaultDict

from moviefinder.providers.http import ProviderError, RateLimitedError
from moviefinder.utils.redaction import redact_secrets

logger = logging.getLogger("moviefinder.providers")

Clock = Callable[[], float]


class CircuitOpenError(ProviderError):
    """Raised instead of calling a source whose circuit is cooling down."""


@dataclass
class SourceCircuit:
    threshold: int
    base_backoff_seconds: float
    max_backoff_seconds: float
    clock: Clock = time.monotonic
    failure_streak: int = 0
    open_until: float = 0.0
    opened_count: int = 0
    backoff: float = 0.0

    def __post_init__(self) -> None:
        self.backoff = self.base_backoff_seconds

    def cooldown(self) -> float:
        return max(0.0, self.open_until - self.clock())

    def close(self) -> None:
        self.failure_streak = 0
        self.open_until = 0.0
        self.backoff = self.base_backoff_seconds

    def trip(self) -> None:
        """Count a failure; the threshold-th one in a row opens the circuit."""
        self.failure_streak += 1
        if self.failure_streak < self.threshold:
            return
        self.failure_streak = 0
        self.opened_count += 1
        self.open_until = self.clock() + self.backoff
        self.backoff = min(self.backoff * 2, self.max_backoff_seconds)

    def describe(self) -> dict[str, Any]:
        return {
            "failure_streak": self.failure_streak,
            "open_until": self.open_until,
            "remaining_cooldown": self.cooldown(),
            "current_backoff": self.backoff,
            "opened_count": self.opened_count,
        }


@dataclass
class OperationStats:
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    rate_limited: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class ProviderMonitor:
    """Wrap provider calls with latency tracking and a per-source breaker."""

    def __init__(
        self,
        *,
        circuit_threshold: int = 3,
        base_backoff_seconds: float = 15.0,
        max_backoff_seconds: float = 300.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self._threshold = circuit_threshold
        self._base_backoff = base_backoff_seconds
        self._max_backoff = max_backoff_seconds
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        """Forget all stats and close every circuit."""
        self._lock = asyncio.Lock()
        self._stats: DefaultDict[str, DefaultDict[str, OperationStats]] = defaultdict(
            lambda: defaultdict(OperationStats)
        )
        self._circuits: dict[str, SourceCircuit] = {}

    def _circuit(self, source: str) -> SourceCircuit:
        if source not in self._circuits:
            self._circuits[source] = SourceCircuit(
                threshold=self._threshold,
                base_backoff_seconds=self._base_backoff,
                max_backoff_seconds=self._max_backoff,
                clock=self._clock,
            )
        return self._circuits[source]

    def allow_call(self, source: str) -> bool:
        return self._circuit(source).cooldown() == 0.0

    def _emit(self, level: int, event: str, source: str, operation: str, context: dict, **extra: Any) -> None:
        payload = {"event": event, "source": source, "operation": operation, "context": context, **extra}
        logger.log(level, json.dumps(payload, default=str))

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[Any]],
        *,
        context: dict[str, Any] | None = None,
    ) -> Any:
        """Run `func` unless the source circuit is open, recording the outcome."""
        context = context or {}
        async with self._lock:
            stats = self._stats[source][operation]
            remaining = self._circuit(source).cooldown()
            if remaining:
                stats.skipped += 1
            else:
                stats.started += 1
        if remaining:
            self._emit(
                logging.WARNING, "provider_circuit_open", source, operation, context,
                remaining_cooldown=round(remaining, 2),
            )
            raise CircuitOpenError(f"{source} circuit open for {remaining:.2f}s")

        start = self._clock()
        try:
            result = await func()
        except RateLimitedError as exc:
            latency_ms = (self._clock() - start) * 1000
            async with self._lock:
                stats.rate_limited += 1
                stats.last_latency_ms = latency_ms
                stats.last_error = redact_secrets(str(exc))
            self._emit(
                logging.WARNING, "provider_rate_limited", source, operation, context,
                latency_ms=round(latency_ms, 2),
            )
            raise
        except Exception as exc:  # noqa: BLE001
            latency_ms = (self._clock() - start) * 1000
            error = redact_secrets(str(exc))
            async with self._lock:
                stats.failed += 1
                stats.last_latency_ms = latency_ms
                stats.last_error = error
                circuit = self._circuit(source)
                circuit.trip()
                circuit_state = circuit.describe()
            self._emit(
                logging.WARNING, "provider_failure", source, operation, context,
                error=error, latency_ms=round(latency_ms, 2), circuit=circuit_state,
            )
            raise

        latency_ms = (self._clock() - start) * 1000
        async with self._lock:
            stats.succeeded += 1
            stats.last_latency_ms = latency_ms
            stats.last_error = None
            self._circuit(source).close()
        self._emit(logging.DEBUG, "provider_success", source, operation, context, latency_ms=round(latency_ms, 2))
        return result

    async def snapshot(self) -> dict[str, Any]:
        async with self._lock:
            return {
                source: {
                    "circuit": self._circuit(source).describe(),
                    "operations": {name: asdict(stats) for name, stats in operations.items()},
                }
                for source, operations in self._stats.items()
            }


provider_monitor = ProviderMonitor()
