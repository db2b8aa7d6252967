"""Dependency wiring — builds the orchestration stack from settings.

Concrete provider clients live outside this package; callers hand in one
factory per provider name and the wiring instantiates every provider that
has an API key configured.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import lru_cache

import structlog

from newsocial.application.services import ContentOrchestrationService
from newsocial.config import Settings, get_settings
from newsocial.domain.exceptions import AIServiceError
from newsocial.ports.outbound import ContentFormatterPort, ProviderClient
from newsocial.shared.providers.gateway import FallbackOrchestrator
from newsocial.shared.providers.health import HealthMonitor

logger = structlog.get_logger(__name__)

ProviderFactory = Callable[[str, Settings], ProviderClient]


# ── Settings ─────────────────────────────────────────────────
@lru_cache(maxsize=1)
def get_cached_settings() -> Settings:
    return get_settings()


# ── Provider registry ────────────────────────────────────────
def build_provider_registry(
    factories: Mapping[str, ProviderFactory],
    settings: Settings | None = None,
) -> list[ProviderClient]:
    """Instantiate a client for every provider that has both a key and a factory.

    A factory that raises is logged and skipped.  Ending up with no client
    at all is a configuration error.
    """
    s = settings or get_cached_settings()
    clients: list[ProviderClient] = []

    for name, api_key in s.provider_api_keys.items():
        factory = factories.get(name)
        if factory is None:
            logger.warning("provider_factory_missing", provider=name)
            continue
        try:
            clients.append(factory(api_key, s))
        except Exception as exc:
            logger.warning("provider_init_failed", provider=name, error=str(exc))
            continue
        logger.info("provider_registered", provider=name)

    if not clients:
        raise AIServiceError.configuration(
            "At least one AI service must be available (OPENAI_API_KEY or CLAUDE_API_KEY)"
        )
    return clients


# ── Orchestration stack ──────────────────────────────────────
def build_health_monitor(
    clients: list[ProviderClient],
    settings: Settings | None = None,
) -> HealthMonitor:
    s = settings or get_cached_settings()
    return HealthMonitor(
        clients,
        health_check_interval_ms=s.health_check_interval_ms,
        preference_order=s.preference_order,
        probe_timeout_s=s.probe_timeout_s,
        route_unhealthy=s.ai_route_unhealthy_providers,
    )


def build_content_service(
    factories: Mapping[str, ProviderFactory],
    settings: Settings | None = None,
    *,
    formatter: ContentFormatterPort | None = None,
) -> ContentOrchestrationService:
    """Settings → provider registry → health monitor → orchestrator → service."""
    s = settings or get_cached_settings()
    clients = build_provider_registry(factories, s)
    monitor = build_health_monitor(clients, s)
    return ContentOrchestrationService(FallbackOrchestrator(monitor), formatter)
