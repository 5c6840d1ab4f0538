"""Verification domain models.

Covers the badge verdict produced by the classifier and the append-only
record written for every verification attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Final
from uuid import UUID

# Certificate id recorded when a fingerprint matches no stored certificate
UNKNOWN_CERTIFICATE_ID: Final[str] = "UNKNOWN"


class Badge(str, Enum):
    """User-facing trust verdict. No other value is ever produced."""

    GREEN = "green"
    """Found locally and confirmed on the ledger."""

    AMBER = "amber"
    """Legacy certificate that was never anchored."""

    BLUE = "blue"
    """Found locally but not confirmed on the ledger."""

    RED = "red"
    """Unknown or revoked."""


class VerificationChannel(str, Enum):
    """How a verification was requested."""

    QR = "qr"
    LEDGER = "ledger"
    MANUAL = "manual"
    API = "api"


@dataclass(frozen=True, eq=True)
class VerdictSummary:
    """Classifier output.

    Attributes:
        badge: Trust verdict.
        is_valid: Whether the certificate should be trusted.
        exists: Whether a local record was found.
        revoked: Whether the local record is revoked.
        blockchain_status: Human-readable status line.
        issuer: Ledger issuer address (green verdicts only).
        issued_at: Ledger issue time in Unix seconds (green verdicts only).
    """

    badge: Badge
    is_valid: bool
    exists: bool
    blockchain_status: str
    revoked: bool = False
    issuer: str | None = None
    issued_at: int | None = None


@dataclass(frozen=True, eq=True)
class Verifier:
    """Who asked for a verification. All fields optional (anonymous allowed)."""

    user_id: UUID | None = None
    name: str | None = None
    organization: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, eq=True)
class VerificationRecord:
    """Immutable record of one verification attempt.

    Attributes:
        verification_id: Unique record id (UUIDv7, time ordered).
        certificate_id: Resolved certificate id or ``UNKNOWN``.
        certificate_ref: Storage id of the resolved certificate, if any.
        fingerprint: ``0x``-prefixed fingerprint that was verified.
        channel: Verification channel.
        verifier: Optional verifier identity.
        badge: Computed badge.
        is_valid: Computed validity.
        result: Ledger state snapshot at verification time.
        verified_at: When the attempt was made (UTC).
        is_manual: True for manually attested verifications.
        notes: Free-form notes (manual verifications).
    """

    verification_id: UUID
    certificate_id: str
    certificate_ref: UUID | None
    fingerprint: str
    channel: VerificationChannel
    verifier: Verifier | None
    badge: Badge
    is_valid: bool
    result: dict[str, Any]
    verified_at: datetime
    is_manual: bool = False
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate record invariants.

        Raises:
            ValueError: If certificate_id or fingerprint is empty.
        """
        if not self.certificate_id:
            raise ValueError("certificate_id is required (use UNKNOWN when unresolved)")
        if not self.fingerprint:
            raise ValueError("fingerprint is required")

    @property
    def is_unresolved(self) -> bool:
        """Check if no stored certificate matched."""
        return self.certificate_id == UNKNOWN_CERTIFICATE_ID


@dataclass(frozen=True, eq=True)
class VerificationStats:
    """Aggregate verification statistics."""

    total: int = 0
    valid: int = 0
    invalid: int = 0
    by_badge: dict[str, int] = field(default_factory=dict)
    by_channel: dict[str, int] = field(default_factory=dict)
