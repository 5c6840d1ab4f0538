"""Application ports (interfaces implemented by infrastructure)."""

from certengine.application.ports.audit_sink import AuditQuery, AuditSink
from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.application.ports.ledger import LedgerPort
from certengine.application.ports.ledger_client import (
    LedgerClient,
    OnChainCertificate,
    TransactionDetails,
    TransactionReceipt,
)
from certengine.application.ports.verification_repository import (
    VerificationRepository,
)

__all__: list[str] = [
    "AuditQuery",
    "AuditSink",
    "CertificateRepository",
    "LedgerClient",
    "LedgerPort",
    "OnChainCertificate",
    "TransactionDetails",
    "TransactionReceipt",
    "VerificationRepository",
]
