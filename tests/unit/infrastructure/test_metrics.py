"""Unit tests for IntegrityMetrics."""

import pytest
from prometheus_client import CollectorRegistry

from certengine.infrastructure.monitoring.metrics import (
    IntegrityMetrics,
    generate_metrics,
    get_integrity_metrics,
    reset_integrity_metrics,
)
from tests.helpers import metric_value


class TestIntegrityMetrics:
    """Tests for metric recording."""

    def test_record_ledger_operation(self, metrics: IntegrityMetrics) -> None:
        metrics.record_ledger_operation("issue", "confirmed", 0.3)
        metrics.record_ledger_operation("issue", "degraded", 1.2)

        assert metric_value(metrics, "ledger_operations_total", operation="issue") == 2.0
        assert (
            metric_value(metrics, "ledger_operation_duration_seconds_count", operation="issue")
            == 2.0
        )

    def test_labels_include_service_and_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        monkeypatch.setenv("SERVICE_NAME", "registry")
        metrics = IntegrityMetrics(registry=CollectorRegistry())

        metrics.increment_audit_entries("dropped")

        assert (
            metric_value(
                metrics,
                "audit_entries_total",
                service="registry",
                environment="staging",
                outcome="dropped",
            )
            == 1.0
        )

    def test_isolated_registries(self) -> None:
        first = IntegrityMetrics(registry=CollectorRegistry())
        second = IntegrityMetrics(registry=CollectorRegistry())

        first.increment_verifications("green", "qr")

        assert metric_value(second, "certificate_verifications_total") == 0.0


class TestGlobalCollector:
    """Tests for the process-wide collector."""

    def test_singleton_and_reset(self) -> None:
        reset_integrity_metrics()
        try:
            collector = get_integrity_metrics()
            assert get_integrity_metrics() is collector

            collector.increment_verifications("amber", "api")
            assert b"certificate_verifications_total" in generate_metrics()
        finally:
            reset_integrity_metrics()

        assert get_integrity_metrics() is not collector
        reset_integrity_metrics()
