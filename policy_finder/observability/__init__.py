"""
Observability hooks for policy-finder.
"""

from policy_finder.observability.hooks import (
    METRIC_FIND_COMBINED,
    METRIC_FIND_ERRORS,
    METRIC_FIND_LATENCY,
    METRIC_FIND_NO_MATCH,
    METRIC_FIND_REQUESTS,
    METRIC_FIND_SINGLE,
    METRIC_LOAD_FAILED,
    METRIC_LOAD_PARSED,
    METRIC_REFERENCE_REQUESTS,
    METRIC_REFERENCE_UNRESOLVED,
    METRIC_STORE_DELETES,
    METRIC_STORE_SIZE,
    HistogramStats,
    InMemoryMetricHook,
    LoggingMetricHook,
    MetricHook,
    MetricType,
    ObservabilityHooks,
)

__all__ = [
    "HistogramStats",
    "InMemoryMetricHook",
    "LoggingMetricHook",
    "METRIC_FIND_COMBINED",
    "METRIC_FIND_ERRORS",
    "METRIC_FIND_LATENCY",
    "METRIC_FIND_NO_MATCH",
    "METRIC_FIND_REQUESTS",
    "METRIC_FIND_SINGLE",
    "METRIC_LOAD_FAILED",
    "METRIC_LOAD_PARSED",
    "METRIC_REFERENCE_REQUESTS",
    "METRIC_REFERENCE_UNRESOLVED",
    "METRIC_STORE_DELETES",
    "METRIC_STORE_SIZE",
    "MetricHook",
    "MetricType",
    "ObservabilityHooks",
]
