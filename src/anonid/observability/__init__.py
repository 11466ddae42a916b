"""
Observability components for anonid.

Provides Prometheus metrics for issuance, verification, sessions and storage.
"""

from .metrics import MetricsCollector, setup_metrics, get_metrics

__all__ = [
    "MetricsCollector",
    "setup_metrics",
    "get_metrics",
]
