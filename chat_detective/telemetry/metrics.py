"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.01,
        0.05,
        0.1,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
        30.0,
        60.0,
        120.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

ANALYSIS_COUNTER = Counter(
    "chat_analysis_requests_total",
    "Chat analysis requests by source format and outcome",
    ("source_format", "outcome"),
)

INSTANCES_RETURNED = Histogram(
    "chat_analysis_instances_returned",
    "Number of flagged instances returned per successful analysis",
    ("source_format",),
    buckets=(0, 1, 2, 3, 5, 8, 10, 15, 25),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_analysis(source_format: str, outcome: str, instances: int | None = None) -> None:
    """Record the outcome of one analysis request.

    ``outcome`` is ``"success"`` or the error code of the failure.
    """

    ANALYSIS_COUNTER.labels(source_format=source_format, outcome=outcome).inc()
    if instances is not None:
        INSTANCES_RETURNED.labels(source_format=source_format).observe(instances)
