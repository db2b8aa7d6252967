"""Multi-provider orchestration framework.

Health monitoring with a time-boxed cache, deterministic primary/fallback
ranking, and single-level failover for interchangeable AI providers.
"""

from newsocial.shared.providers.types import (
    FallbackResult,
    HealthSnapshot,
    ProviderAttempt,
    ProviderHealth,
)
from newsocial.shared.providers.barrier import Settled, partition, settle_all
from newsocial.shared.providers.ranking import rank_providers, select_primary_and_fallback
from newsocial.shared.providers.health import HealthMonitor
from newsocial.shared.providers.gateway import FallbackOrchestrator

__all__ = [
    "FallbackOrchestrator",
    "FallbackResult",
    "HealthMonitor",
    "HealthSnapshot",
    "ProviderAttempt",
    "ProviderHealth",
    "Settled",
    "partition",
    "rank_providers",
    "select_primary_and_fallback",
    "settle_all",
]
