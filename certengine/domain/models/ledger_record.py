"""Ledger result models.

``LedgerRecord`` is the externally observed state of a fingerprint and
``TxResult`` is the receipt of a ledger write. Both carry a ``degraded``
flag that is True whenever the value was produced without a successful
round-trip to a real ledger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Final

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

MOCK_LEDGER_STATUS: Final[str] = "mock"
UNAVAILABLE_LEDGER_STATUS: Final[str] = "degraded: unavailable"
NOT_FOUND_LEDGER_STATUS: Final[str] = "Not found on ledger"


@dataclass(frozen=True, eq=True)
class LedgerRecord:
    """Observed ledger state of a fingerprint.

    Attributes:
        exists: Whether the ledger knows the fingerprint.
        issuer: Address that issued it, if known.
        issued_at: Issue time in Unix seconds, if known.
        revoked: Whether it has been revoked on the ledger.
        status: Human-readable status line.
        degraded: True when produced by the mock or fallback path.
        error: Swallowed transport error message on the fallback path.
    """

    exists: bool
    issuer: str | None
    issued_at: int | None
    revoked: bool
    status: str
    degraded: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Snapshot as a plain dict for persistence."""
        return asdict(self)


@dataclass(frozen=True, eq=True)
class TxResult:
    """Receipt of a ledger write (issue, batch issue, revoke).

    Attributes:
        transaction_id: ``0x``-prefixed transaction hash.
        block_number: Block the transaction was mined in.
        cost_used: Gas consumed.
        confirmed: True once at least one confirmation was observed.
        degraded: True for synthetic receipts.
        network: Network label for display.
        count: Number of fingerprints covered (batch operations).
        error: Swallowed transport error message on the fallback path.
    """

    transaction_id: str
    block_number: int
    cost_used: int
    confirmed: bool
    degraded: bool = False
    network: str = ""
    count: int = 1
    error: str | None = None
