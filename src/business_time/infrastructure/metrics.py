"""
Application Metrics.

Provides Prometheus-compatible metrics for monitoring.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, List, Optional, Tuple

from flask import Flask, Response, g, request


@dataclass
class MetricValue:
    """A single metric value with labels."""
    value: float
    labels: Dict[str, str] = field(default_factory=dict)
    suffix: str = ""


def _labels_key(labels: Dict[str, str]) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted((k, str(v)) for k, v in labels.items()))


class Counter:
    """A monotonically increasing counter metric."""

    kind = "counter"

    def __init__(self, name: str, description: str) -> None:
        self.name = name
        self.description = description
        self._values: Dict[Tuple[Tuple[str, str], ...], float] = defaultdict(float)
        self._lock = Lock()

    def inc(self, value: float = 1.0, **labels: str) -> None:
        """Increment the counter."""
        key = _labels_key(labels)
        with self._lock:
            self._values[key] += value

    def get(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(_labels_key(labels), 0.0)

    def collect(self) -> List[MetricValue]:
        with self._lock:
            return [MetricValue(value=v, labels=dict(k)) for k, v in self._values.items()]


class Gauge(Counter):
    """A gauge metric holding the last value set."""

    kind = "gauge"

    def set(self, value: float, **labels: str) -> None:
        """Set the gauge value."""
        key = _labels_key(labels)
        with self._lock:
            self._values[key] = value


class Histogram:
    """A histogram metric for tracking distributions."""

    kind = "histogram"
    DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)

    def __init__(
        self,
        name: str,
        description: str,
        buckets: tuple = DEFAULT_BUCKETS,
    ) -> None:
        self.name = name
        self.description = description
        self.buckets = buckets
        self._counts: Dict[Tuple[Tuple[str, str], ...], Dict[float, int]] = defaultdict(lambda: defaultdict(int))
        self._sums: Dict[Tuple[Tuple[str, str], ...], float] = defaultdict(float)
        self._totals: Dict[Tuple[Tuple[str, str], ...], int] = defaultdict(int)
        self._lock = Lock()

    def observe(self, value: float, **labels: str) -> None:
        """Record an observation."""
        key = _labels_key(labels)
        with self._lock:
            self._sums[key] += value
            self._totals[key] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    self._counts[key][bucket] += 1

    def collect(self) -> List[MetricValue]:
        values = []
        with self._lock:
            for key, total in self._totals.items():
                labels = dict(key)
                for bucket in self.buckets:
                    values.append(MetricValue(
                        value=self._counts[key][bucket],
                        labels={**labels, "le": str(bucket)},
                        suffix="_bucket",
                    ))
                values.append(MetricValue(value=total, labels={**labels, "le": "+Inf"}, suffix="_bucket"))
                values.append(MetricValue(value=self._sums[key], labels=labels, suffix="_sum"))
                values.append(MetricValue(value=total, labels=labels, suffix="_count"))
        return values


class MetricsRegistry:
    """Registry for all application metrics."""

    def __init__(self) -> None:
        # HTTP metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
        )

        # Holiday provider metrics
        self.holiday_fetch_attempts_total = Counter(
            "holiday_fetch_attempts_total",
            "Total number of holiday source fetch attempts",
        )
        self.holiday_results_total = Counter(
            "holiday_results_total",
            "Holiday lookups served, by data source and service status",
        )
        self.circuit_breaker_state = Gauge(
            "circuit_breaker_state",
            "Current state of circuit breakers (0=closed, 1=half-open, 2=open)",
        )

    def all(self) -> list:
        return [
            self.http_requests_total,
            self.http_request_duration_seconds,
            self.holiday_fetch_attempts_total,
            self.holiday_results_total,
            self.circuit_breaker_state,
        ]

    def to_prometheus_format(self) -> str:
        """Export metrics in Prometheus text format."""
        lines = []
        for metric in self.all():
            lines.append(f"# HELP {metric.name} {metric.description}")
            lines.append(f"# TYPE {metric.name} {metric.kind}")
            for mv in metric.collect():
                labels = ",".join(f'{k}="{v}"' for k, v in mv.labels.items())
                label_str = f"{{{labels}}}" if labels else ""
                lines.append(f"{metric.name}{mv.suffix}{label_str} {mv.value}")
        return "\n".join(lines) + "\n"


# Global metrics registry
_metrics: Optional[MetricsRegistry] = None


def get_metrics() -> MetricsRegistry:
    """Get global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics


def setup_metrics_middleware(app: Flask) -> None:
    """
    Setup Flask middleware for automatic HTTP metrics collection.

    Args:
        app: Flask application instance.
    """
    metrics = get_metrics()

    @app.before_request
    def before_request() -> None:
        g.metrics_start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(g, "metrics_start_time", time.time())
        endpoint = request.endpoint or "unknown"

        metrics.http_requests_total.inc(
            method=request.method,
            endpoint=endpoint,
            status=str(response.status_code),
        )
        metrics.http_request_duration_seconds.observe(
            duration,
            method=request.method,
            endpoint=endpoint,
        )

        return response


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint handler."""
    return Response(
        get_metrics().to_prometheus_format(),
        mimetype="text/plain; charset=utf-8",
    )
