"""Operational metrics for certengine."""

from certengine.infrastructure.monitoring.metrics import (
    IntegrityMetrics,
    generate_metrics,
    get_integrity_metrics,
    reset_integrity_metrics,
)

__all__: list[str] = [
    "IntegrityMetrics",
    "generate_metrics",
    "get_integrity_metrics",
    "reset_integrity_metrics",
]
