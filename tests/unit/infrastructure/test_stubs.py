"""Unit tests for the in-memory port stubs."""

import asyncio
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from certengine.application.ports.audit_sink import AuditSink
from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.application.ports.ledger_client import LedgerClient
from certengine.application.ports.verification_repository import (
    VerificationRepository,
)
from certengine.domain.errors import CertificateNotFoundError, LedgerTransportError
from certengine.infrastructure.stubs import (
    AuditSinkStub,
    CertificateRepositoryStub,
    LedgerClientStub,
    VerificationRepositoryStub,
)
from tests.helpers import make_certificate

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestProtocolConformance:
    """Stubs satisfy the runtime-checkable ports."""

    def test_stubs_implement_ports(self) -> None:
        assert isinstance(CertificateRepositoryStub(), CertificateRepository)
        assert isinstance(VerificationRepositoryStub(), VerificationRepository)
        assert isinstance(AuditSinkStub(), AuditSink)
        assert isinstance(LedgerClientStub(), LedgerClient)


class TestCertificateRepositoryStub:
    """Tests for CertificateRepositoryStub."""

    async def test_find_by_fingerprint_case_insensitive(
        self, certificate_repository: CertificateRepositoryStub
    ) -> None:
        certificate = make_certificate("0x" + "ab" * 32)
        certificate_repository.seed(certificate)

        found = await certificate_repository.find_by_fingerprint("0x" + "AB" * 32)

        assert found == certificate

    async def test_increment_unknown_raises(
        self, certificate_repository: CertificateRepositoryStub
    ) -> None:
        with pytest.raises(CertificateNotFoundError):
            await certificate_repository.increment_verification_count(
                make_certificate().id, NOW
            )

    async def test_concurrent_increments_are_not_lost(
        self, certificate_repository: CertificateRepositoryStub
    ) -> None:
        certificate = make_certificate()
        certificate_repository.seed(certificate)

        await asyncio.gather(
            *(
                certificate_repository.increment_verification_count(certificate.id, NOW)
                for _ in range(50)
            )
        )

        stored = certificate_repository.get(certificate.id)
        assert stored is not None
        assert stored.verification_count == 50

    async def test_read_modify_write_loses_updates(
        self, certificate_repository: CertificateRepositoryStub
    ) -> None:
        """A read/await/save counter loses increments; the atomic one does not."""
        certificate = make_certificate()
        certificate_repository.seed(certificate)

        async def read_modify_write() -> None:
            current = await certificate_repository.find_by_id(certificate.certificate_id)
            assert current is not None
            await asyncio.sleep(0)
            await certificate_repository.save(
                replace(current, verification_count=current.verification_count + 1)
            )

        await asyncio.gather(*(read_modify_write() for _ in range(10)))

        stored = certificate_repository.get(certificate.id)
        assert stored is not None
        assert stored.verification_count == 1


class TestLedgerClientStub:
    """Tests for LedgerClientStub."""

    async def test_issue_and_verify(self, ledger_client: LedgerClientStub) -> None:
        digest = b"\xaa" * 32

        transaction_id = await ledger_client.submit("issueCertificate", (digest,), 60_000)
        receipt = await ledger_client.wait_for_receipt(transaction_id, 1, 1.0)
        on_chain = await ledger_client.call_verify(digest)

        assert receipt.succeeded is True
        assert on_chain.exists is True
        assert on_chain.issuer == ledger_client.issuer

    async def test_revoke_unissued_reverts(self, ledger_client: LedgerClientStub) -> None:
        with pytest.raises(LedgerTransportError, match="not issued"):
            await ledger_client.submit(
                "revokeCertificate", (b"\xaa" * 32, "fraud"), 60_000
            )

    async def test_fail_and_reset(self, ledger_client: LedgerClientStub) -> None:
        ledger_client.fail("get_block_number")

        with pytest.raises(LedgerTransportError):
            await ledger_client.get_block_number()

        ledger_client.reset()
        assert await ledger_client.get_block_number() == 1_000


class TestAuditSinkStub:
    """Tests for AuditSinkStub."""

    async def test_failure_mode(self, audit_sink: AuditSinkStub) -> None:
        audit_sink.set_failure(RuntimeError("down"))

        with pytest.raises(RuntimeError):
            await audit_sink.append(object())  # type: ignore[arg-type]

        audit_sink.reset()
        assert audit_sink.entries == []
