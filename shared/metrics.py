"""
Shared metrics configuration for the Random Data Service.
"""

from typing import Dict, Any

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        # One registry per collector; several apps may share a process
        self.registry = CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

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

        # Auth metrics
        self._metrics["token_validations_total"] = Counter(
            "token_validations_total",
            "Total token validations",
            ["status"],
            registry=self.registry
        )

        self._metrics["jwks_fetch_total"] = Counter(
            "jwks_fetch_total",
            "Total JWKS fetches",
            ["status"],
            registry=self.registry
        )

        # Payload metrics
        self._metrics["records_generated_total"] = Counter(
            "records_generated_total",
            "Total random records generated",
            ["endpoint"],
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

    def record_token_validation(self, status: str):
        """Record the outcome of a bearer token check."""
        self._metrics["token_validations_total"].labels(status=status).inc()

    def record_jwks_fetch(self, status: str):
        self._metrics["jwks_fetch_total"].labels(status=status).inc()

    def record_records_generated(self, endpoint: str, count: int):
        self._metrics["records_generated_total"].labels(endpoint=endpoint).inc(count)

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def render(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)

    content_type = CONTENT_TYPE_LATEST


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name)
