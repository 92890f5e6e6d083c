"""
Prometheus metrics for the Orbita secrets service.
"""
from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry


class Metrics:
    """
    Centralized metrics for the Orbita secrets service.
    """

    def __init__(self, service_name: str = "orbita-secrets", version: str = "0.1.0", registry=None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()

        # HTTP Metrics
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["service", "method", "path", "status"],
            registry=self.registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["service", "method", "path"],
            registry=self.registry,
        )

        self.http_requests_active = Gauge(
            "http_requests_active",
            "Number of active HTTP requests",
            ["service"],
            registry=self.registry,
        )
        self.http_requests_active.labels(service=service_name).set(0)

        # Application Info
        self.app_info = Info(
            "app",
            "Application information",
            registry=self.registry,
        )
        self.app_info.info({"service": service_name, "version": version})

        self.app_up = Gauge(
            "app_up",
            "Application up status (1=up, 0=down)",
            ["service", "version"],
            registry=self.registry,
        )
        self.app_up.labels(service=service_name, version=version).set(1)

        # Business Metrics - secrets specific
        self.secret_operations_total = Counter(
            "orbita_secret_operations_total",
            "Secret encrypt/decrypt operations",
            ["operation", "outcome"],
            registry=self.registry,
        )

        self.oauth_state_total = Counter(
            "orbita_oauth_state_total",
            "OAuth state tokens issued, accepted and rejected",
            ["outcome"],
            registry=self.registry,
        )

    def record_secret_operation(self, operation: str, outcome: str):
        """Record an encrypt or decrypt call and whether it succeeded."""
        self.secret_operations_total.labels(operation=operation, outcome=outcome).inc()

    def record_oauth_state(self, outcome: str):
        """Record an OAuth state issuance or verification result."""
        self.oauth_state_total.labels(outcome=outcome).inc()
