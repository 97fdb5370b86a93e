"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


analysis_requests_total = Counter(
    "analysis_requests_total",
    "Total number of item analysis requests.",
    ["status"],
)

analysis_fallbacks_total = Counter(
    "analysis_fallbacks_total",
    "Fallback rungs taken while deciding category or box.",
    ["rung"],
)

upstream_failures_total = Counter(
    "upstream_failures_total",
    "Failed calls to inference endpoints.",
    ["signal"],
)

analysis_latency_seconds = Histogram(
    "analysis_latency_seconds",
    "End-to-end latency of item analysis.",
)
