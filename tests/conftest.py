"""
Pytest configuration and shared fixtures for certengine tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/ and are marked ``integration``
"""

from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from certengine.config.ledger_config import LedgerConfig
from certengine.domain.models.certificate import CertificateContent
from certengine.infrastructure.monitoring.metrics import IntegrityMetrics
from certengine.infrastructure.stubs import (
    AuditSinkStub,
    CertificateRepositoryStub,
    LedgerClientStub,
    VerificationRepositoryStub,
)

SAMPLE_TIMESTAMP_MS = 1714521600000  # 2024-05-01T00:00:00Z

LIVE_LEDGER_CONFIG = LedgerConfig(
    rpc_url="http://localhost:8545",
    private_key="0x" + "01" * 32,
    contract_address="0x" + "22" * 20,
)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from certengine import __version__

    return __version__


@pytest.fixture
def sample_content() -> CertificateContent:
    """Fully populated certificate content with an explicit timestamp."""
    return CertificateContent(
        certificate_id="CERT-2024-0001",
        learner_email="ada@example.org",
        learner_name="Ada Lovelace",
        course_name="Analytical Engines",
        completion_date="2024-05-01",
        issuer_organization="Example University",
        timestamp=SAMPLE_TIMESTAMP_MS,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def metrics() -> IntegrityMetrics:
    """Metrics collector on an isolated registry."""
    return IntegrityMetrics(registry=CollectorRegistry())


@pytest.fixture
def live_ledger_config() -> LedgerConfig:
    return LIVE_LEDGER_CONFIG


@pytest.fixture
def ledger_client() -> LedgerClientStub:
    return LedgerClientStub()


@pytest.fixture
def certificate_repository() -> CertificateRepositoryStub:
    return CertificateRepositoryStub()


@pytest.fixture
def verification_repository() -> VerificationRepositoryStub:
    return VerificationRepositoryStub()


@pytest.fixture
def audit_sink() -> AuditSinkStub:
    return AuditSinkStub()
