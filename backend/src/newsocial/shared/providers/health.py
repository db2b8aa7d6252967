"""Health monitor for the registered text-generation providers.

Probes every provider concurrently, caches the resulting snapshot for a
configurable interval, and derives the primary/fallback ranking.  The
snapshot is the only shared mutable state: it is swapped wholesale under a
lock, never edited in place.
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING

import structlog

from newsocial.domain.exceptions import AIServiceError
from newsocial.shared.observability.metrics import AI_HEALTH_PROBE_FAILURES, AI_PROVIDER_HEALTH
from newsocial.shared.providers.barrier import settle_all
from newsocial.shared.providers.ranking import rank_providers
from newsocial.shared.providers.types import HealthSnapshot, ProviderHealth

if TYPE_CHECKING:
    from newsocial.ports.outbound import ProviderClient

logger = structlog.get_logger(__name__)

DEFAULT_HEALTH_CHECK_INTERVAL_MS = 300_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _describe_failure(exc: BaseException, timeout_s: float | None) -> str:
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return f"Health probe timed out after {timeout_s}s"
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__


class HealthMonitor:
    """Cached, fan-out health checks plus primary/fallback selection."""

    def __init__(
        self,
        clients: Iterable[ProviderClient],
        *,
        health_check_interval_ms: float = DEFAULT_HEALTH_CHECK_INTERVAL_MS,
        preference_order: Sequence[str] = (),
        probe_timeout_s: float | None = 30.0,
        route_unhealthy: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        registry: dict[str, ProviderClient] = {}
        for client in clients:
            if client.name in registry:
                raise AIServiceError.configuration(f"Duplicate AI provider {client.name!r}")
            registry[client.name] = client
        if not registry:
            raise AIServiceError.configuration("At least one AI provider must be configured")
        if health_check_interval_ms <= 0:
            raise AIServiceError.configuration("health_check_interval_ms must be positive")

        self._registry: Mapping[str, ProviderClient] = MappingProxyType(registry)
        self._interval_ms = health_check_interval_ms
        self._preference = tuple(preference_order)
        self._probe_timeout_s = probe_timeout_s
        self._route_unhealthy = route_unhealthy
        self._clock = clock

        self._snapshot: HealthSnapshot | None = None
        self._stale = True
        # Demotions recorded while a refresh is in flight; None when idle.
        self._pending_demotions: dict[str, tuple[str, datetime]] | None = None
        self._lock = threading.Lock()
        self._refresh_lock = asyncio.Lock()

    # ── Introspection ────────────────────────────────────────
    @property
    def registry(self) -> Mapping[str, ProviderClient]:
        return self._registry

    @property
    def interval_ms(self) -> float:
        return self._interval_ms

    @property
    def preference_order(self) -> tuple[str, ...]:
        return self._preference

    @property
    def cached_snapshot(self) -> HealthSnapshot | None:
        with self._lock:
            return self._snapshot

    def client(self, service_name: str) -> ProviderClient:
        try:
            return self._registry[service_name]
        except KeyError:
            raise AIServiceError.configuration(
                f"AI provider {service_name!r} is not registered"
            ) from None

    # ── Snapshot access ──────────────────────────────────────
    async def get_snapshot(self, force_refresh: bool = False) -> HealthSnapshot:
        """Return the cached snapshot while fresh, otherwise probe every provider."""
        if not force_refresh:
            cached = self._fresh_snapshot()
            if cached is not None:
                return cached

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited.
            if not force_refresh:
                cached = self._fresh_snapshot()
                if cached is not None:
                    return cached
            return await self._refresh()

    def mark_unhealthy(self, service_name: str, reason: str) -> None:
        """Demote a provider in the cached snapshot without probing."""
        if service_name not in self._registry:
            logger.warning("mark_unhealthy_unknown_provider", provider=service_name)
            return

        now = self._clock()
        with self._lock:
            if self._pending_demotions is not None:
                self._pending_demotions[service_name] = (reason, now)
            current = self._snapshot
            if current is None or service_name not in current.providers:
                return
            updated = self._apply_demotions(current, {service_name: (reason, now)})
            self._snapshot = updated

        AI_PROVIDER_HEALTH.labels(provider=service_name).set(
            updated.providers[service_name].status.rank
        )
        logger.warning(
            "provider_marked_unhealthy",
            provider=service_name,
            reason=reason,
            primary=updated.primary_service,
            fallback=updated.fallback_service,
        )

    def reset_cache(self) -> None:
        """Force the next ``get_snapshot`` call to probe."""
        with self._lock:
            self._stale = True
        logger.info("health_cache_reset")

    # ── Internals ────────────────────────────────────────────
    def _fresh_snapshot(self) -> HealthSnapshot | None:
        now = self._clock()
        with self._lock:
            snapshot = self._snapshot
            if snapshot is not None and not self._stale and snapshot.is_fresh(now, self._interval_ms):
                return snapshot
        return None

    async def _refresh(self) -> HealthSnapshot:
        with self._lock:
            self._pending_demotions = {}
        try:
            try:
                healths = await self._probe_all()
                snapshot = self._build_snapshot(healths, self._clock())
            except Exception as exc:
                previous = self.cached_snapshot
                if previous is None:
                    raise AIServiceError.configuration(
                        f"Unable to build provider health snapshot: {exc}", cause=exc
                    ) from exc
                logger.error("health_refresh_failed", error=str(exc), using_previous=True)
                snapshot = replace(previous, computed_at=self._clock())

            with self._lock:
                if self._pending_demotions:
                    snapshot = self._apply_demotions(snapshot, self._pending_demotions)
                self._snapshot = snapshot
                self._stale = False
        finally:
            with self._lock:
                self._pending_demotions = None

        logger.info(
            "health_snapshot_refreshed",
            primary=snapshot.primary_service,
            fallback=snapshot.fallback_service,
            statuses={name: h.status.value for name, h in snapshot.providers.items()},
        )
        return snapshot

    async def _probe_all(self) -> dict[str, ProviderHealth]:
        names = list(self._registry)
        settled = await settle_all(self._probe(self._registry[name]) for name in names)
        now = self._clock()

        healths: dict[str, ProviderHealth] = {}
        for outcome in settled:
            name = names[outcome.index]
            health = outcome.value
            if outcome.ok and isinstance(health, ProviderHealth):
                if health.service_name != name:
                    health = replace(health, service_name=name)
            else:
                reason = (
                    _describe_failure(outcome.error, self._probe_timeout_s)
                    if outcome.error is not None
                    else f"Invalid health result: {health!r}"
                )
                AI_HEALTH_PROBE_FAILURES.labels(provider=name).inc()
                logger.warning("health_probe_failed", provider=name, error=reason)
                health = ProviderHealth.unhealthy(name, reason, now)
            healths[name] = health
            AI_PROVIDER_HEALTH.labels(provider=name).set(health.status.rank)
        return healths

    async def _probe(self, client: ProviderClient) -> ProviderHealth:
        if self._probe_timeout_s is None:
            return await client.probe_health()
        return await asyncio.wait_for(client.probe_health(), timeout=self._probe_timeout_s)

    def _build_snapshot(
        self, healths: Mapping[str, ProviderHealth], computed_at: datetime
    ) -> HealthSnapshot:
        ranked = rank_providers(
            healths, self._preference, include_unhealthy=self._route_unhealthy
        )
        return HealthSnapshot(
            providers=healths,
            computed_at=computed_at,
            primary_service=ranked[0] if ranked else None,
            fallback_service=ranked[1] if len(ranked) > 1 else None,
            ranked=tuple(ranked),
        )

    def _apply_demotions(
        self,
        snapshot: HealthSnapshot,
        demotions: Mapping[str, tuple[str, datetime]],
    ) -> HealthSnapshot:
        """Caller must hold lock."""
        providers = dict(snapshot.providers)
        for name, (reason, at) in demotions.items():
            health = providers.get(name)
            if health is not None:
                providers[name] = health.demoted(reason, at)
        return self._build_snapshot(providers, snapshot.computed_at)
