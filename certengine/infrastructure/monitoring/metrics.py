"""Prometheus metrics for the integrity engine.

Operational metrics only: ledger round-trips (and how often they degraded),
verification verdicts, and audit entries recorded or dropped.

Labels: service, environment on every metric.
"""

import os
import threading

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Thread lock for singleton initialization
_collector_lock = threading.Lock()

# Ledger round-trips include confirmation waits, so buckets reach 2 minutes
LEDGER_HISTOGRAM_BUCKETS = (0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0)


class IntegrityMetrics:
    """Collects and manages integrity engine metrics.

    Attributes:
        ledger_operations_total: Ledger calls by operation and outcome
            (confirmed, degraded, mock).
        ledger_operation_duration_seconds: Ledger call latency.
        certificate_verifications_total: Verdicts by badge and channel.
        audit_entries_total: Audit entries by outcome (recorded, dropped).
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "certengine")

        self.ledger_operations_total = Counter(
            name="ledger_operations_total",
            documentation="Ledger operations by outcome",
            labelnames=["service", "environment", "operation", "outcome"],
            registry=self._registry,
        )

        self.ledger_operation_duration_seconds = Histogram(
            name="ledger_operation_duration_seconds",
            documentation="Ledger operation duration in seconds",
            labelnames=["service", "environment", "operation"],
            buckets=LEDGER_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )

        self.certificate_verifications_total = Counter(
            name="certificate_verifications_total",
            documentation="Certificate verifications by badge",
            labelnames=["service", "environment", "badge", "channel"],
            registry=self._registry,
        )

        self.audit_entries_total = Counter(
            name="audit_entries_total",
            documentation="Audit entries by ingestion outcome",
            labelnames=["service", "environment", "outcome"],
            registry=self._registry,
        )

    def record_ledger_operation(
        self, operation: str, outcome: str, duration_seconds: float
    ) -> None:
        """Record one ledger call.

        Args:
            operation: issue, issue_batch, verify or revoke.
            outcome: confirmed, degraded or mock.
            duration_seconds: Wall time spent in the call.
        """
        self.ledger_operations_total.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
            outcome=outcome,
        ).inc()
        self.ledger_operation_duration_seconds.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
        ).observe(duration_seconds)

    def increment_verifications(self, badge: str, channel: str) -> None:
        """Count a verification verdict."""
        self.certificate_verifications_total.labels(
            service=self._service_name,
            environment=self._environment,
            badge=badge,
            channel=channel,
        ).inc()

    def increment_audit_entries(self, outcome: str) -> None:
        """Count an audit ingestion outcome (recorded or dropped)."""
        self.audit_entries_total.labels(
            service=self._service_name,
            environment=self._environment,
            outcome=outcome,
        ).inc()

    def get_registry(self) -> CollectorRegistry:
        """Get the Prometheus registry backing these metrics."""
        return self._registry


_integrity_metrics: IntegrityMetrics | None = None


def get_integrity_metrics() -> IntegrityMetrics:
    """Get or create the process-wide metrics collector.

    Returns:
        The global IntegrityMetrics instance.
    """
    global _integrity_metrics
    if _integrity_metrics is None:
        with _collector_lock:
            if _integrity_metrics is None:
                _integrity_metrics = IntegrityMetrics()
    return _integrity_metrics


def generate_metrics() -> bytes:
    """Render the global collector in Prometheus exposition format."""
    return generate_latest(get_integrity_metrics().get_registry())


def reset_integrity_metrics() -> None:
    """Reset the global collector (for testing)."""
    global _integrity_metrics
    with _collector_lock:
        _integrity_metrics = None
