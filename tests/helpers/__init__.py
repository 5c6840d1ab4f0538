"""Test helpers for certengine.

Usage:
    from tests.helpers import make_certificate, metric_value
"""

from tests.helpers.factories import make_certificate
from tests.helpers.metrics import metric_value

__all__ = ["make_certificate", "metric_value"]
