# Copyright (c) anonid Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Prometheus Metrics Integration.

Provides metrics collection and export for anonid.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest


class MetricsCollector:
    """
    Prometheus metrics collector for anonid.

    Each collector owns its registry, so several engines in one process
    never clash on metric names.

    Exposes metrics:
    - anonid_credentials_issued_total
    - anonid_verifications_total{kind="credential|presentation", result="valid|invalid"}
    - anonid_sessions_total{event="created|expired|terminated|extended"}
    - anonid_storage_operations_total{backend="...", operation="...", outcome="ok|error"}
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics collector."""
        self.registry = registry or CollectorRegistry()

        self.credentials_issued_total = Counter(
            "anonid_credentials_issued_total",
            "Total number of credentials issued",
            registry=self.registry,
        )

        self.verifications_total = Counter(
            "anonid_verifications_total",
            "Total number of verifications by kind and result",
            ["kind", "result"],
            registry=self.registry,
        )

        self.sessions_total = Counter(
            "anonid_sessions_total",
            "Session lifecycle events",
            ["event"],
            registry=self.registry,
        )

        self.storage_operations_total = Counter(
            "anonid_storage_operations_total",
            "Storage backend operations",
            ["backend", "operation", "outcome"],
            registry=self.registry,
        )

    def record_credential_issued(self):
        """Record credential issuance."""
        self.credentials_issued_total.inc()

    def record_verification(self, kind: str, valid: bool):
        """Record a credential or presentation verification."""
        result = "valid" if valid else "invalid"
        self.verifications_total.labels(kind=kind, result=result).inc()

    def record_session_event(self, event: str):
        """Record a session lifecycle event."""
        self.sessions_total.labels(event=event).inc()

    def record_storage_operation(self, backend: str, operation: str, success: bool):
        """Record a storage backend operation."""
        outcome = "ok" if success else "error"
        self.storage_operations_total.labels(
            backend=backend,
            operation=operation,
            outcome=outcome,
        ).inc()

    def sample(self, name: str, labels: Optional[dict] = None) -> float:
        """Current value of a sample, 0.0 when it has not been recorded."""
        value = self.registry.get_sample_value(name, labels or {})
        return value or 0.0

    def export(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def setup_metrics() -> MetricsCollector:
    """
    Setup Prometheus metrics.

    Returns:
        MetricsCollector instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()

    return _metrics_collector


def get_metrics() -> Optional[MetricsCollector]:
    """Get metrics collector instance."""
    return _metrics_collector
