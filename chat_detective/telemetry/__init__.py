"""Telemetry helpers and metrics."""

from .metrics import (
    ANALYSIS_COUNTER,
    ERROR_COUNTER,
    INSTANCES_RETURNED,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_analysis,
    observe_request,
)

__all__ = [
    "ANALYSIS_COUNTER",
    "ERROR_COUNTER",
    "INSTANCES_RETURNED",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_analysis",
    "observe_request",
]
