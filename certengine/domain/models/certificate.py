"""Certificate domain models.

Two views of a certificate live here:

- ``CertificateContent``: the semantic fields that are fingerprinted.
- ``Certificate``: the stored record owned by the surrounding CRUD layer.
  The engine reads it and only ever changes the verification counter and
  the last-verified timestamp.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID


class CertificateStatus(str, Enum):
    """Lifecycle status of a stored certificate."""

    PENDING = "pending"
    ISSUED = "issued"
    REVOKED = "revoked"
    EXPIRED = "expired"


# Accepted spellings for each content field, checked in order.
# Dotted names address nested mappings (``{"learner": {"email": ...}}``).
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "certificate_id": ("certificate_id", "certificateId"),
    "learner_email": ("learner_email", "learnerEmail", "learner.email"),
    "learner_name": ("learner_name", "learnerName", "learner.name"),
    "course_name": ("course_name", "courseName", "course.name"),
    "completion_date": (
        "completion_date",
        "completionDate",
        "course.completion_date",
        "course.completionDate",
    ),
    "issuer_organization": (
        "issuer_organization",
        "issuerOrganization",
        "issuer.organization",
    ),
    "timestamp": ("timestamp",),
}


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    current: Any = data
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return None
        current = current[part]
    return current


@dataclass(frozen=True, eq=True)
class CertificateContent:
    """Semantic certificate fields that make up a fingerprint.

    Field order here has no effect on the fingerprint; the canonical
    encoder applies its own fixed order.

    Attributes:
        certificate_id: Human-facing certificate identifier.
        learner_email: Learner's email address.
        learner_name: Learner's full name.
        course_name: Name of the completed course.
        completion_date: ISO-8601 string, date or datetime.
        issuer_organization: Issuing organization name.
        timestamp: Milliseconds since the Unix epoch, or a datetime.
            Required for a reproducible fingerprint.
    """

    certificate_id: str | None = None
    learner_email: str | None = None
    learner_name: str | None = None
    course_name: str | None = None
    completion_date: str | date | datetime | None = None
    issuer_organization: str | None = None
    timestamp: int | datetime | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CertificateContent:
        """Build content from a flat or nested mapping in any key order.

        Args:
            data: Mapping using snake_case, camelCase or nested
                ``learner``/``course``/``issuer`` sub-mappings.

        Returns:
            CertificateContent with every recognised field populated.
        """
        values: dict[str, Any] = {}
        for name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                value = _lookup(data, alias)
                if value is not None:
                    values[name] = value
                    break
        return cls(**values)


@dataclass(frozen=True, eq=True)
class BlockchainAnchor:
    """Ledger anchoring state stored on a certificate.

    Attributes:
        is_on_chain: True only when issuance was confirmed on a real ledger.
        fingerprint: ``0x``-prefixed fingerprint hex.
        transaction_id: Issuing transaction id, if any.
        block_number: Issuing block number, if any.
    """

    is_on_chain: bool = False
    fingerprint: str | None = None
    transaction_id: str | None = None
    block_number: int | None = None


@dataclass(frozen=True, eq=True)
class Certificate:
    """Stored certificate record, read-only from the engine's perspective.

    Attributes:
        id: Storage identifier.
        certificate_id: Human-facing identifier (e.g. ``CERT-2024-0001``).
        status: Lifecycle status.
        is_legacy: True for certificates migrated from a pre-ledger system.
        blockchain: Ledger anchoring state.
        verification_count: Number of recorded verifications.
        last_verified_at: Time of the most recent verification.
    """

    id: UUID
    certificate_id: str
    status: CertificateStatus = CertificateStatus.ISSUED
    is_legacy: bool = False
    blockchain: BlockchainAnchor = field(default_factory=BlockchainAnchor)
    verification_count: int = 0
    last_verified_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        """Check if this certificate has been revoked."""
        return self.status == CertificateStatus.REVOKED
