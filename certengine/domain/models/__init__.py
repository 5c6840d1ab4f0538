"""Domain models for certengine."""

from certengine.domain.models.audit_entry import (
    AuditAction,
    AuditActor,
    AuditChanges,
    AuditDetails,
    AuditEntry,
    AuditEntryInput,
    AuditMetadata,
    AuditStatus,
    AuditTarget,
    AuditTargetType,
    BlockchainReference,
    JsonDetails,
    TextDetails,
    TruncatedDetails,
)
from certengine.domain.models.certificate import (
    BlockchainAnchor,
    Certificate,
    CertificateContent,
    CertificateStatus,
)
from certengine.domain.models.fingerprint import FINGERPRINT_SIZE, Fingerprint
from certengine.domain.models.ledger_record import LedgerRecord, TxResult
from certengine.domain.models.merkle import MerkleProofEntry
from certengine.domain.models.verification import (
    UNKNOWN_CERTIFICATE_ID,
    Badge,
    VerdictSummary,
    VerificationChannel,
    VerificationRecord,
    VerificationStats,
    Verifier,
)

__all__: list[str] = [
    "AuditAction",
    "AuditActor",
    "AuditChanges",
    "AuditDetails",
    "AuditEntry",
    "AuditEntryInput",
    "AuditMetadata",
    "AuditStatus",
    "AuditTarget",
    "AuditTargetType",
    "Badge",
    "BlockchainAnchor",
    "BlockchainReference",
    "Certificate",
    "CertificateContent",
    "CertificateStatus",
    "FINGERPRINT_SIZE",
    "Fingerprint",
    "JsonDetails",
    "LedgerRecord",
    "MerkleProofEntry",
    "TextDetails",
    "TruncatedDetails",
    "TxResult",
    "UNKNOWN_CERTIFICATE_ID",
    "VerdictSummary",
    "VerificationChannel",
    "VerificationRecord",
    "VerificationStats",
    "Verifier",
]
