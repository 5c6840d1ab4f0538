"""Ledger port used by application services.

All operations are fail-open: implementations return degraded results
instead of raising on transport failures.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from certengine.domain.models.fingerprint import Fingerprint
    from certengine.domain.models.ledger_record import LedgerRecord, TxResult


@runtime_checkable
class LedgerPort(Protocol):
    """Issue, verify and revoke fingerprints against a ledger."""

    async def issue(self, fingerprint: Fingerprint) -> TxResult:
        """Anchor one fingerprint."""
        ...

    async def issue_batch(self, fingerprints: Sequence[Fingerprint]) -> TxResult:
        """Anchor several fingerprints in one transaction."""
        ...

    async def verify(self, fingerprint: Fingerprint) -> LedgerRecord:
        """Read the ledger state of a fingerprint."""
        ...

    async def revoke(self, fingerprint: Fingerprint, reason: str) -> TxResult:
        """Mark a fingerprint revoked."""
        ...
