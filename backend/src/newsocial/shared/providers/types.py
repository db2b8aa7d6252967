"""Core types for the multi-provider orchestration layer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Generic, Mapping, TypeVar

from newsocial.domain.enums import ProviderStatus

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ProviderHealth:
    """Result of one health probe against one provider.

    Superseded by the next probe, never mutated in place.
    """

    service_name: str
    status: ProviderStatus
    last_checked_at: datetime
    response_time_ms: float | None = None
    error: str | None = None

    @classmethod
    def unhealthy(
        cls,
        service_name: str,
        reason: str,
        at: datetime,
        *,
        response_time_ms: float | None = None,
    ) -> ProviderHealth:
        return cls(
            service_name=service_name,
            status=ProviderStatus.UNHEALTHY,
            last_checked_at=at,
            response_time_ms=response_time_ms,
            error=reason,
        )

    def demoted(self, reason: str, at: datetime) -> ProviderHealth:
        return replace(self, status=ProviderStatus.UNHEALTHY, error=reason, last_checked_at=at)

    @property
    def is_usable(self) -> bool:
        return self.status != ProviderStatus.UNHEALTHY


@dataclass(frozen=True, slots=True)
class HealthSnapshot:
    """Health of every registered provider plus the derived ranking.

    Owned by ``HealthMonitor`` and replaced wholesale on every change.
    """

    providers: Mapping[str, ProviderHealth]
    computed_at: datetime
    primary_service: str | None = None
    fallback_service: str | None = None
    ranked: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "providers", MappingProxyType(dict(self.providers)))

    def get(self, service_name: str) -> ProviderHealth | None:
        return self.providers.get(service_name)

    def age(self, now: datetime) -> timedelta:
        return now - self.computed_at

    def is_fresh(self, now: datetime, interval_ms: float) -> bool:
        return self.age(now) < timedelta(milliseconds=interval_ms)


@dataclass(frozen=True, slots=True)
class ProviderAttempt:
    """Record of a single provider attempt."""

    provider: str
    success: bool
    duration_ms: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    """Successful outcome of ``FallbackOrchestrator.execute``."""

    value: T
    provider_used: str
    attempts: tuple[ProviderAttempt, ...] = field(default_factory=tuple)

    @property
    def used_fallback(self) -> bool:
        return len(self.attempts) > 1

    @property
    def total_duration_ms(self) -> float:
        return sum(a.duration_ms for a in self.attempts)
