"""Fallback orchestrator — runs one logical operation on the best provider.

Asks the ``HealthMonitor`` for the current primary/fallback pair, runs the
operation on the primary, and on failure demotes it and tries the fallback
exactly once.  Attempts are strictly sequential so a paid API is never hit
twice in parallel for the same call.  Backoff and per-request retries are
the provider client's job.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from newsocial.domain.exceptions import AIServiceError
from newsocial.shared.observability.metrics import (
    AI_PROVIDER_CALLS,
    AI_PROVIDER_FAILOVERS,
    AI_PROVIDER_LATENCY,
)
from newsocial.shared.providers.health import HealthMonitor
from newsocial.shared.providers.types import FallbackResult, ProviderAttempt

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class FallbackOrchestrator:
    """Single-level primary → fallback failover.

    Usage::

        orchestrator = FallbackOrchestrator(monitor)

        result = await orchestrator.execute(
            lambda name: registry[name].extract_highlights(request),
            operation_name="extract_highlights",
        )
        result.value, result.provider_used

    The operation receives the provider name and must return the result or
    raise on failure.
    """

    def __init__(self, monitor: HealthMonitor) -> None:
        self._monitor = monitor
        self._stats = self._empty_stats()

    @property
    def monitor(self) -> HealthMonitor:
        return self._monitor

    # ── Main entry-point ─────────────────────────────────────
    async def execute(
        self,
        operation: Callable[[str], Awaitable[T]],
        *,
        operation_name: str = "operation",
    ) -> FallbackResult[T]:
        """Run ``operation`` on the primary provider, falling back once.

        Raises:
            AIServiceError: ``NoProviderAvailable`` when the snapshot has no
                primary, ``AllProvidersFailed`` when every attempted provider
                failed.
        """
        self._stats["total_calls"] += 1
        snapshot = await self._monitor.get_snapshot(False)
        primary = snapshot.primary_service
        if primary is None:
            self._stats["failed_calls"] += 1
            logger.error("no_provider_available", operation=operation_name)
            raise AIServiceError.no_provider_available()

        fallback = snapshot.fallback_service
        if fallback == primary:
            fallback = None

        attempts: list[ProviderAttempt] = []
        failures: list[AIServiceError] = []

        for provider in (primary, fallback):
            if provider is None:
                continue
            if attempts:
                AI_PROVIDER_FAILOVERS.labels(from_provider=primary, to_provider=provider).inc()
                self._stats["failovers"] += 1
                logger.warning(
                    "provider_failover",
                    operation=operation_name,
                    from_provider=primary,
                    to_provider=provider,
                )

            attempt, value, error = await self._attempt(provider, operation, operation_name)
            attempts.append(attempt)
            if error is None:
                self._record_success(provider)
                return FallbackResult(value=value, provider_used=provider, attempts=tuple(attempts))  # type: ignore[arg-type]

            failures.append(error)
            self._monitor.mark_unhealthy(provider, error.message)

        self._stats["failed_calls"] += 1
        logger.error(
            "all_providers_failed",
            operation=operation_name,
            providers=[f.service for f in failures],
        )
        raise AIServiceError.all_providers_failed(failures)

    # ── Single attempt ───────────────────────────────────────
    async def _attempt(
        self,
        provider: str,
        operation: Callable[[str], Awaitable[T]],
        operation_name: str,
    ) -> tuple[ProviderAttempt, T | None, AIServiceError | None]:
        log = logger.bind(provider=provider, operation=operation_name)
        start = time.monotonic()
        try:
            value = await operation(provider)
        except Exception as exc:
            duration_ms = (time.monotonic() - start) * 1000
            error = AIServiceError.provider_operation_failed(provider, exc)
            AI_PROVIDER_CALLS.labels(provider=provider, operation=operation_name, status="failure").inc()
            AI_PROVIDER_LATENCY.labels(provider=provider, operation=operation_name).observe(duration_ms / 1000)
            log.warning(
                "provider_request_failed",
                error=error.message,
                latency_ms=round(duration_ms, 1),
            )
            return (
                ProviderAttempt(provider, success=False, duration_ms=duration_ms, error=error.message),
                None,
                error,
            )

        duration_ms = (time.monotonic() - start) * 1000
        AI_PROVIDER_CALLS.labels(provider=provider, operation=operation_name, status="success").inc()
        AI_PROVIDER_LATENCY.labels(provider=provider, operation=operation_name).observe(duration_ms / 1000)
        log.info("provider_request_success", latency_ms=round(duration_ms, 1))
        return ProviderAttempt(provider, success=True, duration_ms=duration_ms), value, None

    # ── Statistics ───────────────────────────────────────────
    def _record_success(self, provider: str) -> None:
        self._stats["successful_calls"] += 1
        usage = self._stats["provider_usage"]
        usage[provider] = usage.get(provider, 0) + 1

    @staticmethod
    def _empty_stats() -> dict[str, Any]:
        return {
            "total_calls": 0,
            "successful_calls": 0,
            "failed_calls": 0,
            "failovers": 0,
            "provider_usage": {},
        }

    def get_stats(self) -> dict[str, Any]:
        """Get usage statistics."""
        stats = dict(self._stats)
        stats["provider_usage"] = dict(self._stats["provider_usage"])
        return stats

    def reset_stats(self) -> None:
        self._stats = self._empty_stats()
