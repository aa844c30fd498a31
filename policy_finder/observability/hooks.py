"""
Metric hooks for policy-finder.

The finder reports what it does (lookups, loads, store size) through
pluggable metric hooks instead of writing to any particular backend.
Register one or more hooks on an ObservabilityHooks registry and pass
that registry to the finder, or use the process-wide instance.

Quick Start:
    >>> from policy_finder.observability import ObservabilityHooks, InMemoryMetricHook
    >>>
    >>> hooks = ObservabilityHooks()
    >>> memory_hook = InMemoryMetricHook()
    >>> hooks.add_metric_hook(memory_hook)
    >>>
    >>> finder = UpdatablePolicyFinderModule(hooks=hooks)
    >>> finder.find_policy({"action": "read"})
    >>> memory_hook.get_counter(METRIC_FIND_REQUESTS)
    1.0

Integration with Prometheus:
    >>> from prometheus_client import Counter
    >>>
    >>> class PrometheusMetricHook:
    ...     def __init__(self):
    ...         self.lookups = Counter(
    ...             "policy_finder_find_requests_total",
    ...             "Context-based policy lookups",
    ...         )
    ...
    ...     def increment(self, name, value=1.0, tags=None):
    ...         if name == METRIC_FIND_REQUESTS:
    ...             self.lookups.inc(value)
    ...
    ...     def gauge(self, name, value, tags=None): pass
    ...     def histogram(self, name, value, tags=None): pass
    ...     def timing(self, name, duration_ms, tags=None): pass
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class MetricType(Enum):
    """Types of metrics that can be emitted."""

    COUNTER = "counter"
    """A monotonically increasing counter."""

    GAUGE = "gauge"
    """A value that can go up or down."""

    HISTOGRAM = "histogram"
    """Distribution of values."""

    TIMING = "timing"
    """Duration measurement in milliseconds."""


@runtime_checkable
class MetricHook(Protocol):
    """
    Protocol for metric backends (Prometheus, StatsD, OpenTelemetry, etc.).

    Example:
        >>> class MyMetricHook:
        ...     def increment(self, name, value=1.0, tags=None):
        ...         pass
        ...
        ...     def gauge(self, name, value, tags=None):
        ...         pass
        ...
        ...     def histogram(self, name, value, tags=None):
        ...         pass
        ...
        ...     def timing(self, name, duration_ms, tags=None):
        ...         pass
    """

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        """Increment a counter metric."""
        ...

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Set a gauge metric."""
        ...

    def histogram(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        """Record a value in a histogram."""
        ...

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        """Record a duration in milliseconds."""
        ...


class LoggingMetricHook:
    """
    Hook that writes metrics to a logger (for development and debugging).

    Example:
        >>> hook = LoggingMetricHook()
        >>> hook.increment("policy_finder.find.requests", 1.0, {"outcome": "single_policy"})
        DEBUG:policy_finder.metrics:COUNTER policy_finder.find.requests=1.0 tags={...}
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("policy_finder.metrics")
        self.level = level

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"COUNTER {name}={value} tags={tags}")

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"GAUGE {name}={value} tags={tags}")

    def histogram(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"HISTOGRAM {name}={value} tags={tags}")

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        self.logger.log(self.level, f"TIMING {name}={duration_ms}ms tags={tags}")


@dataclass
class HistogramStats:
    """Statistics for a histogram or timing metric."""

    count: int
    total: float
    min: float
    max: float
    avg: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
        }


class InMemoryMetricHook:
    """
    In-memory metrics for testing and simple use cases.

    Example:
        >>> hook = InMemoryMetricHook()
        >>> hook.increment("lookups", tags={"outcome": "no_match"})
        >>> hook.increment("lookups", tags={"outcome": "no_match"})
        >>> hook.get_counter("lookups", {"outcome": "no_match"})
        2.0
    """

    def __init__(self):
        self.counters: dict[str, float] = defaultdict(float)
        self.gauges: dict[str, float] = {}
        self.histograms: dict[str, list[float]] = defaultdict(list)
        self.timings: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def _make_key(self, name: str, tags: dict[str, Any] | None) -> str:
        if not tags:
            return name
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
        return f"{name}[{tag_str}]"

    def increment(self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None) -> None:
        with self._lock:
            self.counters[self._make_key(name, tags)] += value

    def gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        with self._lock:
            self.gauges[self._make_key(name, tags)] = value

    def histogram(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        with self._lock:
            self.histograms[self._make_key(name, tags)].append(value)

    def timing(self, name: str, duration_ms: float, tags: dict[str, Any] | None = None) -> None:
        with self._lock:
            self.timings[self._make_key(name, tags)].append(duration_ms)

    def get_counter(self, name: str, tags: dict[str, Any] | None = None) -> float:
        """Current counter value, or 0.0 if never incremented."""
        with self._lock:
            return self.counters.get(self._make_key(name, tags), 0.0)

    def get_gauge(self, name: str, tags: dict[str, Any] | None = None) -> float | None:
        """Current gauge value, or None if never set."""
        with self._lock:
            return self.gauges.get(self._make_key(name, tags))

    def get_timing_stats(
        self, name: str, tags: dict[str, Any] | None = None
    ) -> HistogramStats | None:
        """
        Get statistics for timing measurements.

        Returns:
            HistogramStats with count, sum, min, max, avg, or None if empty.
        """
        with self._lock:
            values = list(self.timings.get(self._make_key(name, tags), []))
        if not values:
            return None
        return HistogramStats(
            count=len(values),
            total=sum(values),
            min=min(values),
            max=max(values),
            avg=sum(values) / len(values),
        )

    def get_all_counters(self) -> dict[str, float]:
        with self._lock:
            return dict(self.counters)

    def reset(self) -> None:
        """Reset all metrics to initial state."""
        with self._lock:
            self.counters.clear()
            self.gauges.clear()
            self.histograms.clear()
            self.timings.clear()


class ObservabilityHooks:
    """
    Registry of metric hooks.

    Finders take an instance explicitly; ``get_instance()`` returns the
    process-wide one used when none is given.

    Example:
        >>> hooks = ObservabilityHooks.get_instance()
        >>> hooks.add_metric_hook(InMemoryMetricHook())
        >>> hooks.emit_counter(METRIC_FIND_REQUESTS)
    """

    _instance: ObservabilityHooks | None = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._metric_hooks: list[MetricHook] = []

    @classmethod
    def get_instance(cls) -> ObservabilityHooks:
        """Get the process-wide ObservabilityHooks instance."""
        if cls._instance is not None:
            return cls._instance
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide instance. Useful in tests."""
        with cls._instance_lock:
            cls._instance = None

    def add_metric_hook(self, hook: MetricHook) -> None:
        self._metric_hooks.append(hook)

    def remove_metric_hook(self, hook: MetricHook) -> bool:
        """
        Remove a metric hook.

        Returns:
            True if the hook was removed, False if not found.
        """
        try:
            self._metric_hooks.remove(hook)
            return True
        except ValueError:
            return False

    def clear_metric_hooks(self) -> None:
        self._metric_hooks.clear()

    @property
    def metric_hooks(self) -> list[MetricHook]:
        """Get a copy of the registered metric hooks."""
        return list(self._metric_hooks)

    def emit_metric(
        self,
        metric_type: MetricType,
        name: str,
        value: float,
        tags: dict[str, Any] | None = None,
    ) -> None:
        """
        Emit a metric to all registered hooks.

        Args:
            metric_type: The type of metric.
            name: The metric name.
            value: The metric value.
            tags: Optional tags/labels for the metric.
        """
        for hook in list(self._metric_hooks):
            if metric_type == MetricType.COUNTER:
                hook.increment(name, value, tags)
            elif metric_type == MetricType.GAUGE:
                hook.gauge(name, value, tags)
            elif metric_type == MetricType.HISTOGRAM:
                hook.histogram(name, value, tags)
            elif metric_type == MetricType.TIMING:
                hook.timing(name, value, tags)

    def emit_counter(
        self, name: str, value: float = 1.0, tags: dict[str, Any] | None = None
    ) -> None:
        self.emit_metric(MetricType.COUNTER, name, value, tags)

    def emit_gauge(self, name: str, value: float, tags: dict[str, Any] | None = None) -> None:
        self.emit_metric(MetricType.GAUGE, name, value, tags)

    def emit_timing(
        self, name: str, duration_ms: float, tags: dict[str, Any] | None = None
    ) -> None:
        self.emit_metric(MetricType.TIMING, name, duration_ms, tags)


# Metric names emitted by the finder modules

METRIC_FIND_REQUESTS = "policy_finder.find.requests"
"""Counter: Context-based lookups."""

METRIC_FIND_NO_MATCH = "policy_finder.find.no_match"
"""Counter: Lookups where no stored policy applied."""

METRIC_FIND_SINGLE = "policy_finder.find.single"
"""Counter: Lookups resolved to exactly one policy."""

METRIC_FIND_COMBINED = "policy_finder.find.combined"
"""Counter: Lookups resolved to a synthetic combined policy set."""

METRIC_FIND_ERRORS = "policy_finder.find.errors"
"""Counter: Lookups ending in an error, tagged with the error kind."""

METRIC_FIND_LATENCY = "policy_finder.find.latency_ms"
"""Timing: Context-based lookup latency in milliseconds."""

METRIC_REFERENCE_REQUESTS = "policy_finder.reference.requests"
"""Counter: Identifier-based lookups."""

METRIC_REFERENCE_UNRESOLVED = "policy_finder.reference.unresolved"
"""Counter: Identifier-based lookups that could not be resolved."""

METRIC_LOAD_PARSED = "policy_finder.load.parsed"
"""Counter: Documents parsed and stored by load operations."""

METRIC_LOAD_FAILED = "policy_finder.load.failed"
"""Counter: Documents skipped because they failed to parse."""

METRIC_STORE_SIZE = "policy_finder.store.size"
"""Gauge: Number of stored policies after a write."""

METRIC_STORE_DELETES = "policy_finder.store.deletes"
"""Counter: Policies removed from the store."""
