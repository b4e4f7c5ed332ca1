"""
Shared metrics configuration for the Summary Widget condition engine.
"""

from typing import Dict, Any, Optional
import time
import threading
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, Info, CollectorRegistry


class MetricsCollector:
    """Centralized metrics collector for the condition engine.

    Each collector owns its registry unless one is supplied, so several
    evaluators can live in one process without duplicate registration.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up metrics for the condition engine."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        self._metrics["condition_evaluations_total"] = Counter(
            "condition_evaluations_total",
            "Total single condition evaluations",
            ["outcome"],
            registry=self.registry
        )

        self._metrics["malformed_conditions_total"] = Counter(
            "malformed_conditions_total",
            "Total malformed conditions skipped during evaluation",
            ["reason"],
            registry=self.registry
        )

        self._metrics["rule_evaluations_total"] = Counter(
            "rule_evaluations_total",
            "Total rule set evaluations",
            ["mode", "result"],
            registry=self.registry
        )

        self._metrics["rule_evaluation_duration_seconds"] = Histogram(
            "rule_evaluation_duration_seconds",
            "Rule set evaluation duration in seconds",
            ["mode"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels)

    def record_condition(self, outcome: str):
        """Record the tri-state outcome of one condition."""
        self.increment_counter("condition_evaluations_total", outcome=outcome)

    def record_malformed(self, reason: str):
        """Record a malformed condition."""
        self.increment_counter("malformed_conditions_total", reason=reason)

    def record_rule(self, mode: str, result: bool):
        """Record a rule set evaluation result."""
        self.increment_counter("rule_evaluations_total", mode=mode, result=str(result).lower())

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                self._metrics[operation_name].labels(**labels).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            with self._lock:
                self._metrics[metric_name].labels(**labels).inc()

    def observe_histogram(self, metric_name: str, value: float, **labels):
        """Observe a histogram metric."""
        if metric_name in self._metrics:
            self._metrics[metric_name].labels(**labels).observe(value)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
