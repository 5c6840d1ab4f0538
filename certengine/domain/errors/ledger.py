"""Ledger transport errors.

These never reach callers of the ledger adapter: they are raised by
ledger client implementations and converted into degraded results.
"""

from __future__ import annotations

from certengine.domain.exceptions import CertEngineError


class LedgerTransportError(CertEngineError):
    """Raised by a ledger client when a call to the ledger fails.

    Attributes:
        operation: Contract operation that failed (issue, verify, ...).
        reason: Underlying error description.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Ledger {operation} failed: {reason}")
