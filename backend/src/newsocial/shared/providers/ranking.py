"""Primary/fallback ranking over a set of provider health results.

Pure functions: the same inputs always give the same order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from newsocial.shared.providers.types import ProviderHealth


def rank_providers(
    healths: Mapping[str, ProviderHealth],
    preference_order: Sequence[str] = (),
    *,
    include_unhealthy: bool = True,
) -> list[str]:
    """Order provider names best-first.

    Sort key, in order: health status (healthy < degraded < unhealthy),
    position in ``preference_order`` (unlisted names after listed ones),
    observed response time (missing counts as infinitely slow), and finally
    registration order.
    """
    preference = {name: idx for idx, name in enumerate(preference_order)}
    unlisted = len(preference)
    registration = {name: idx for idx, name in enumerate(healths)}

    def sort_key(name: str) -> tuple[int, int, float, int]:
        health = healths[name]
        latency = health.response_time_ms
        return (
            health.status.rank,
            preference.get(name, unlisted),
            float("inf") if latency is None else latency,
            registration[name],
        )

    candidates = [
        name for name, health in healths.items() if include_unhealthy or health.is_usable
    ]
    return sorted(candidates, key=sort_key)


def select_primary_and_fallback(
    healths: Mapping[str, ProviderHealth],
    preference_order: Sequence[str] = (),
    *,
    include_unhealthy: bool = True,
) -> tuple[str | None, str | None]:
    ranked = rank_providers(healths, preference_order, include_unhealthy=include_unhealthy)
    primary = ranked[0] if ranked else None
    fallback = ranked[1] if len(ranked) > 1 else None
    return primary, fallback
