"""PostgreSQL persistence adapters (SQLAlchemy async, asyncpg driver)."""

from certengine.infrastructure.adapters.persistence.audit_sink import (
    PostgresAuditSink,
)
from certengine.infrastructure.adapters.persistence.certificate_repository import (
    PostgresCertificateRepository,
)
from certengine.infrastructure.adapters.persistence.verification_repository import (
    PostgresVerificationRepository,
)

__all__ = [
    "PostgresAuditSink",
    "PostgresCertificateRepository",
    "PostgresVerificationRepository",
]
