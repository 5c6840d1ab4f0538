"""Bootstrap wiring for the certificate integrity engine.

Everything is constructed explicitly and returned; there are no module-level
engine or ledger singletons. Persistence uses PostgreSQL when a session
factory is supplied and the in-memory stubs otherwise.

Usage:
    engine = build_integrity_engine(session_factory=get_session_factory())
    outcome = await engine.verify(fingerprint, VerificationChannel.QR)
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from certengine.application.ports.audit_sink import AuditSink
from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.application.ports.ledger_client import LedgerClient
from certengine.application.ports.verification_repository import (
    VerificationRepository,
)
from certengine.application.services.audit_recorder_service import (
    AuditRecorderService,
)
from certengine.application.services.certificate_integrity_service import (
    CertificateIntegrityService,
)
from certengine.application.services.verification_ledger_service import (
    VerificationLedgerService,
)
from certengine.config.audit_config import AuditConfig
from certengine.config.ledger_config import LedgerConfig
from certengine.infrastructure.adapters.ledger import LedgerAdapter, Web3LedgerClient
from certengine.infrastructure.adapters.persistence import (
    PostgresAuditSink,
    PostgresCertificateRepository,
    PostgresVerificationRepository,
)
from certengine.infrastructure.monitoring.metrics import (
    IntegrityMetrics,
    get_integrity_metrics,
)
from certengine.infrastructure.stubs import (
    AuditSinkStub,
    CertificateRepositoryStub,
    VerificationRepositoryStub,
)

logger = get_logger()


def build_ledger_adapter(
    config: LedgerConfig,
    metrics: IntegrityMetrics | None = None,
    client: LedgerClient | None = None,
) -> LedgerAdapter:
    """Build the ledger adapter, creating a Web3 client when enabled.

    A client that cannot be constructed (malformed key or address) leaves
    the adapter disabled rather than failing startup.
    """
    if client is None and config.ledger_enabled:
        try:
            client = Web3LedgerClient(config)
        except ValueError as exc:
            logger.bind(component="ledger_bootstrap").error(
                "ledger_client_init_failed", error=str(exc)
            )
    return LedgerAdapter(config, client=client, metrics=metrics)


def build_integrity_engine(
    ledger_config: LedgerConfig | None = None,
    audit_config: AuditConfig | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    metrics: IntegrityMetrics | None = None,
    ledger_client: LedgerClient | None = None,
) -> CertificateIntegrityService:
    """Wire the engine facade from configuration.

    Args:
        ledger_config: Ledger settings (default: from environment).
        audit_config: Audit settings (default: from environment).
        session_factory: PostgreSQL session factory; stubs are used if None.
        metrics: Metrics collector (default: process-wide collector).
        ledger_client: Pre-built contract transport (tests, custom RPC).

    Returns:
        Ready-to-use CertificateIntegrityService.
    """
    ledger_config = ledger_config or LedgerConfig.from_environment()
    audit_config = audit_config or AuditConfig.from_environment()
    metrics = metrics or get_integrity_metrics()

    certificates: CertificateRepository
    verifications: VerificationRepository
    sink: AuditSink
    if session_factory is not None:
        certificates = PostgresCertificateRepository(session_factory)
        verifications = PostgresVerificationRepository(session_factory)
        sink = PostgresAuditSink(session_factory)
    else:
        certificates = CertificateRepositoryStub()
        verifications = VerificationRepositoryStub()
        sink = AuditSinkStub()

    ledger = build_ledger_adapter(ledger_config, metrics, ledger_client)

    logger.bind(component="engine_bootstrap").info(
        "integrity_engine_created",
        ledger_mode=ledger.mode,
        network=ledger_config.network_name,
        persistence="postgres" if session_factory is not None else "memory",
    )

    return CertificateIntegrityService(
        ledger=ledger,
        certificates=certificates,
        verifications=VerificationLedgerService(verifications, certificates, metrics),
        audit=AuditRecorderService(sink, audit_config, metrics),
    )
