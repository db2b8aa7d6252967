"""Prometheus metrics for the AI orchestration layer."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


# ── Provider calls ───────────────────────────────────────────
AI_PROVIDER_CALLS = Counter(
    "ai_provider_calls_total",
    "Total AI provider operation attempts",
    ["provider", "operation", "status"],
)

AI_PROVIDER_LATENCY = Histogram(
    "ai_provider_latency_seconds",
    "AI provider operation latency",
    ["provider", "operation"],
    buckets=(0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)

AI_PROVIDER_FAILOVERS = Counter(
    "ai_provider_failovers_total",
    "Operations retried on the fallback provider",
    ["from_provider", "to_provider"],
)

# ── Health monitoring ────────────────────────────────────────
AI_PROVIDER_HEALTH = Gauge(
    "ai_provider_health_status",
    "Provider health (0 = healthy, 1 = degraded, 2 = unhealthy)",
    ["provider"],
)

AI_HEALTH_PROBE_FAILURES = Counter(
    "ai_health_probe_failures_total",
    "Health probes that raised or timed out",
    ["provider"],
)

# ── Content pipeline ─────────────────────────────────────────
CONTENT_PIPELINE_ERRORS = Counter(
    "content_pipeline_errors_total",
    "Content orchestration failures by error kind",
    ["operation", "kind"],
)

CONTENT_PROCESSING_DURATION = Histogram(
    "content_processing_duration_seconds",
    "Wall-clock duration of social content generation",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
