"""Verification classifier (badge state machine).

Combines the local certificate lookup with the ledger's view of the same
fingerprint and produces exactly one badge. Pure function: no I/O and no
mutation, so the whole decision table can be tested without a network.

Decision order (first match wins):

    1. no local record                      -> red,   invalid, not found
    2. record revoked                       -> red,   invalid, revoked
    3. record anchored and ledger has it    -> green, valid
    4. record is legacy                     -> amber, valid
    5. anything else                        -> blue,  valid
"""

from __future__ import annotations

from typing import Final

from certengine.domain.models.certificate import Certificate
from certengine.domain.models.ledger_record import LedgerRecord
from certengine.domain.models.verification import Badge, VerdictSummary

NOT_FOUND_STATUS: Final[str] = "Not found"
REVOKED_STATUS: Final[str] = "Certificate revoked"
LEGACY_STATUS: Final[str] = "Legacy certificate (not on blockchain)"
DATABASE_ONLY_STATUS: Final[str] = "Database record found"


def classify(record: Certificate | None, ledger: LedgerRecord) -> VerdictSummary:
    """Classify a verification attempt.

    Revocation in the local record always wins over ledger state; the
    ledger record is still kept by the caller for the audit snapshot.

    Args:
        record: Stored certificate matching the fingerprint, or None.
        ledger: Ledger state for the same fingerprint.

    Returns:
        VerdictSummary with one of green/amber/blue/red.
    """
    if record is None:
        return VerdictSummary(
            badge=Badge.RED,
            is_valid=False,
            exists=False,
            blockchain_status=NOT_FOUND_STATUS,
        )

    if record.is_revoked:
        return VerdictSummary(
            badge=Badge.RED,
            is_valid=False,
            exists=True,
            revoked=True,
            blockchain_status=REVOKED_STATUS,
        )

    if record.blockchain.is_on_chain and ledger.exists:
        return VerdictSummary(
            badge=Badge.GREEN,
            is_valid=True,
            exists=True,
            blockchain_status=ledger.status,
            issuer=ledger.issuer,
            issued_at=ledger.issued_at,
        )

    if record.is_legacy:
        return VerdictSummary(
            badge=Badge.AMBER,
            is_valid=True,
            exists=True,
            blockchain_status=LEGACY_STATUS,
        )

    return VerdictSummary(
        badge=Badge.BLUE,
        is_valid=True,
        exists=True,
        blockchain_status=DATABASE_ONLY_STATUS,
    )
