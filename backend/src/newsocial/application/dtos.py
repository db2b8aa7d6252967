"""Data Transfer Objects — Pydantic models for serialising results.

An outer HTTP layer renders health snapshots and errors through these;
the orchestration core itself only deals in domain types.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from newsocial.domain.exceptions import AIServiceError
from newsocial.shared.providers.types import HealthSnapshot, ProviderHealth


# ═══════════════════════════════════════════════════════════════
#  Health
# ═══════════════════════════════════════════════════════════════
class ProviderHealthDTO(BaseModel):
    service_name: str
    status: str
    response_time_ms: float | None = None
    last_checked_at: datetime
    error: str | None = None

    @classmethod
    def from_health(cls, health: ProviderHealth) -> ProviderHealthDTO:
        return cls(
            service_name=health.service_name,
            status=health.status.value,
            response_time_ms=health.response_time_ms,
            last_checked_at=health.last_checked_at,
            error=health.error,
        )


class HealthSnapshotDTO(BaseModel):
    primary_service: str | None = None
    fallback_service: str | None = None
    computed_at: datetime
    providers: list[ProviderHealthDTO] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: HealthSnapshot) -> HealthSnapshotDTO:
        return cls(
            primary_service=snapshot.primary_service,
            fallback_service=snapshot.fallback_service,
            computed_at=snapshot.computed_at,
            providers=[ProviderHealthDTO.from_health(h) for h in snapshot.providers.values()],
        )


# ═══════════════════════════════════════════════════════════════
#  Errors
# ═══════════════════════════════════════════════════════════════
class AIServiceErrorDTO(BaseModel):
    kind: str
    message: str
    service: str | None = None
    services: list[str] = Field(default_factory=list)

    @classmethod
    def from_error(cls, error: AIServiceError) -> AIServiceErrorDTO:
        return cls(**error.to_dict())
