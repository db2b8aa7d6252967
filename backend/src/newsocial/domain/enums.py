"""Domain enumerations for the news-to-social pipeline."""

from __future__ import annotations

import enum
from collections.abc import Iterable


class ProviderStatus(str, enum.Enum):
    """Health status of a text-generation provider."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def rank(self) -> int:
        """Lower is better."""
        return _STATUS_RANK[self]


_STATUS_RANK: dict[ProviderStatus, int] = {
    ProviderStatus.HEALTHY: 0,
    ProviderStatus.DEGRADED: 1,
    ProviderStatus.UNHEALTHY: 2,
}


class SocialPlatform(str, enum.Enum):
    """Platforms the content pipeline can target."""

    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"

    @classmethod
    def supported(cls) -> tuple[str, ...]:
        return tuple(p.value for p in cls)

    @classmethod
    def parse_many(cls, names: Iterable[str]) -> list[SocialPlatform]:
        """Keep recognised platform names in request order, dropping the rest."""
        known = {p.value: p for p in cls}
        selected: list[SocialPlatform] = []
        for name in names:
            platform = known.get(str(name).strip().lower())
            if platform is not None and platform not in selected:
                selected.append(platform)
        return selected


class ContentTone(str, enum.Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ENTHUSIASTIC = "enthusiastic"


class HighlightCategory(str, enum.Enum):
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    STRATEGIC = "strategic"
    MARKET = "market"
    GENERAL = "general"


class AIErrorKind(str, enum.Enum):
    """Closed set of failure kinds surfaced by the orchestration core."""

    CONFIGURATION_ERROR = "ConfigurationError"
    NO_PROVIDER_AVAILABLE = "NoProviderAvailable"
    ALL_PROVIDERS_FAILED = "AllProvidersFailed"
    VALIDATION_FAILED = "ValidationFailed"
    PROVIDER_OPERATION_FAILED = "ProviderOperationFailed"
