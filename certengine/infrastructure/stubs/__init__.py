"""In-memory stub implementations of application ports.

For development, demos and tests. NOT suitable for production use.
"""

from certengine.infrastructure.stubs.audit_sink_stub import AuditSinkStub
from certengine.infrastructure.stubs.certificate_repository_stub import (
    CertificateRepositoryStub,
)
from certengine.infrastructure.stubs.ledger_client_stub import LedgerClientStub
from certengine.infrastructure.stubs.verification_repository_stub import (
    VerificationRepositoryStub,
)

__all__: list[str] = [
    "AuditSinkStub",
    "CertificateRepositoryStub",
    "LedgerClientStub",
    "VerificationRepositoryStub",
]
