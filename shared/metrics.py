"""
Shared metrics configuration for the repository access services.
"""

from typing import Dict, Any, Optional

from prometheus_client import Counter, Histogram, Info, CollectorRegistry


class MetricsCollector:
    """Metrics collector for a service.

    Each collector owns its own registry so several service instances can
    live in one process (tests, workers) without duplicate registrations.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Outbound calls
        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Total requests made to upstream services",
            ["upstream", "outcome"],
            registry=self.registry
        )

        self._metrics["upstream_request_duration_seconds"] = Histogram(
            "upstream_request_duration_seconds",
            "Upstream request duration in seconds",
            ["upstream"],
            registry=self.registry
        )

        # Reconciliation
        self._metrics["grant_decisions_total"] = Counter(
            "grant_decisions_total",
            "Total grant reconciliation outcomes",
            ["action", "status_code"],
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_upstream_call(self, upstream: str, outcome: str, duration: float):
        """Record one outbound call and how it ended."""
        self._metrics["upstream_requests_total"].labels(upstream=upstream, outcome=outcome).inc()
        self._metrics["upstream_request_duration_seconds"].labels(upstream=upstream).observe(duration)

    def record_grant_decision(self, action: str, status_code: int):
        """Record the terminal outcome of a reconciliation."""
        self._metrics["grant_decisions_total"].labels(
            action=action,
            status_code=str(status_code)
        ).inc()


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
