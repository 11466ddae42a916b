"""Tests for anonid Prometheus metrics."""

import pytest
from prometheus_client import CollectorRegistry, Counter

from anonid.identity import CredentialIssuer
from anonid.observability import MetricsCollector, get_metrics, setup_metrics


class TestMetricsCollector:
    def test_counters_created(self):
        metrics = MetricsCollector()
        assert isinstance(metrics.credentials_issued_total, Counter)
        assert isinstance(metrics.verifications_total, Counter)
        assert isinstance(metrics.sessions_total, Counter)
        assert isinstance(metrics.storage_operations_total, Counter)

    def test_collectors_isolated(self):
        a, b = MetricsCollector(), MetricsCollector()
        a.record_credential_issued()
        assert a.sample("anonid_credentials_issued_total") == 1
        assert b.sample("anonid_credentials_issued_total") == 0

    def test_custom_registry(self):
        registry = CollectorRegistry()
        metrics = MetricsCollector(registry=registry)
        metrics.record_session_event("created")
        assert registry.get_sample_value("anonid_sessions_total", {"event": "created"}) == 1

    def test_unrecorded_sample_is_zero(self):
        assert MetricsCollector().sample("anonid_verifications_total", {"kind": "x", "result": "y"}) == 0

    def test_export(self):
        metrics = MetricsCollector()
        metrics.record_storage_operation("redis", "save", False)
        text = metrics.export().decode()
        assert "anonid_storage_operations_total" in text
        assert 'outcome="error"' in text

    def test_setup_metrics_is_singleton(self):
        metrics = setup_metrics()
        assert setup_metrics() is metrics
        assert get_metrics() is metrics


class TestIssuerMetrics:
    @pytest.mark.asyncio
    async def test_issuance_counted(self, clock):
        metrics = MetricsCollector()
        issuer = CredentialIssuer(clock=clock, metrics=metrics)
        identity = await issuer.issue_identity("Alice", {"givenName": "Alice"})
        await issuer.add_credential(identity, {"email": "alice@example.com"})
        assert metrics.sample("anonid_credentials_issued_total") == 2
