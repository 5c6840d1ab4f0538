"""Application services for certengine."""

from certengine.application.services.audit_recorder_service import (
    AuditRecorderService,
)
from certengine.application.services.audit_trail_service import (
    ActivitySummaryItem,
    AuditTrailService,
)
from certengine.application.services.certificate_integrity_service import (
    CertificateIntegrityService,
    VerificationOutcome,
)
from certengine.application.services.fingerprint_service import (
    FingerprintService,
    keccak256,
)
from certengine.application.services.merkle_tree_service import (
    MerkleTreeService,
    hash_pair,
)
from certengine.application.services.verification_ledger_service import (
    VerificationInput,
    VerificationLedgerService,
)

__all__: list[str] = [
    "ActivitySummaryItem",
    "AuditRecorderService",
    "AuditTrailService",
    "CertificateIntegrityService",
    "FingerprintService",
    "MerkleTreeService",
    "VerificationInput",
    "VerificationLedgerService",
    "VerificationOutcome",
    "hash_pair",
    "keccak256",
]
