"""Unit tests for VerificationLedgerService."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from certengine.application.services.verification_ledger_service import (
    VerificationInput,
    VerificationLedgerService,
)
from certengine.domain.errors import VerificationPersistenceError
from certengine.domain.models.certificate import CertificateStatus
from certengine.domain.models.verification import (
    UNKNOWN_CERTIFICATE_ID,
    Badge,
    VerdictSummary,
    VerificationChannel,
    Verifier,
)
from certengine.infrastructure.monitoring.metrics import IntegrityMetrics
from certengine.infrastructure.stubs import (
    CertificateRepositoryStub,
    VerificationRepositoryStub,
)
from tests.helpers import make_certificate, metric_value

FINGERPRINT = "0x" + "aa" * 32
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

GREEN = VerdictSummary(
    badge=Badge.GREEN, is_valid=True, exists=True, blockchain_status="Valid"
)
RED = VerdictSummary(
    badge=Badge.RED, is_valid=False, exists=False, blockchain_status="Not found"
)


@pytest.fixture
def service(
    verification_repository: VerificationRepositoryStub,
    certificate_repository: CertificateRepositoryStub,
    metrics: IntegrityMetrics,
) -> VerificationLedgerService:
    return VerificationLedgerService(
        verification_repository,
        certificate_repository,
        metrics=metrics,
        clock=lambda: NOW,
    )


class TestRecordVerification:
    """Tests for record_verification."""

    async def test_resolved_certificate(
        self,
        service: VerificationLedgerService,
        verification_repository: VerificationRepositoryStub,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        certificate = make_certificate(FINGERPRINT, is_on_chain=True)
        certificate_repository.seed(certificate)

        record = await service.record_verification(
            VerificationInput(
                fingerprint=FINGERPRINT,
                verdict=GREEN,
                channel=VerificationChannel.QR,
                certificate=certificate,
                ledger_snapshot={"exists": True, "status": "Valid"},
            )
        )

        assert record.certificate_id == "CERT-2024-0001"
        assert record.certificate_ref == certificate.id
        assert record.badge == Badge.GREEN
        assert record.result == {"exists": True, "status": "Valid"}
        assert record.verified_at == NOW
        assert verification_repository.records == [record]

        stored = certificate_repository.get(certificate.id)
        assert stored is not None
        assert stored.verification_count == 1
        assert stored.last_verified_at == NOW

    async def test_unknown_fingerprint_is_still_recorded(
        self,
        service: VerificationLedgerService,
        verification_repository: VerificationRepositoryStub,
    ) -> None:
        record = await service.record_verification(
            VerificationInput(
                fingerprint=FINGERPRINT,
                verdict=RED,
                channel=VerificationChannel.API,
            )
        )

        assert record.certificate_id == UNKNOWN_CERTIFICATE_ID
        assert record.certificate_ref is None
        assert record.is_valid is False
        assert record.result == {}
        assert len(verification_repository.records) == 1

    async def test_persistence_failure_raises(
        self,
        service: VerificationLedgerService,
        verification_repository: VerificationRepositoryStub,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        certificate = make_certificate(FINGERPRINT)
        certificate_repository.seed(certificate)
        verification_repository.set_failure(ConnectionError("db down"))

        with pytest.raises(VerificationPersistenceError, match="db down"):
            await service.record_verification(
                VerificationInput(
                    fingerprint=FINGERPRINT,
                    verdict=GREEN,
                    channel=VerificationChannel.QR,
                    certificate=certificate,
                )
            )

        # Counter is not touched when the record could not be stored
        stored = certificate_repository.get(certificate.id)
        assert stored is not None
        assert stored.verification_count == 0

    async def test_counter_failure_raises_persistence_error(
        self,
        verification_repository: VerificationRepositoryStub,
    ) -> None:
        certificates = AsyncMock()
        certificates.increment_verification_count.side_effect = RuntimeError("db down")
        service = VerificationLedgerService(verification_repository, certificates)
        certificate = make_certificate(FINGERPRINT)

        with pytest.raises(VerificationPersistenceError, match="db down") as exc_info:
            await service.record_verification(
                VerificationInput(
                    fingerprint=FINGERPRINT,
                    verdict=GREEN,
                    channel=VerificationChannel.QR,
                    certificate=certificate,
                )
            )

        # The appended record is kept and identified by the error
        assert len(verification_repository.records) == 1
        assert (
            exc_info.value.verification_id
            == verification_repository.records[0].verification_id
        )

    async def test_ids_are_unique(self, service: VerificationLedgerService) -> None:
        data = VerificationInput(
            fingerprint=FINGERPRINT, verdict=RED, channel=VerificationChannel.API
        )

        first = await service.record_verification(data)
        second = await service.record_verification(data)

        assert first.verification_id != second.verification_id

    async def test_increments_verification_metric(
        self, service: VerificationLedgerService, metrics: IntegrityMetrics
    ) -> None:
        await service.record_verification(
            VerificationInput(
                fingerprint=FINGERPRINT, verdict=RED, channel=VerificationChannel.QR
            )
        )

        assert (
            metric_value(
                metrics, "certificate_verifications_total", badge="red", channel="qr"
            )
            == 1.0
        )

    async def test_uses_atomic_repository_increment(self) -> None:
        verifications = AsyncMock()
        certificates = AsyncMock()
        certificates.increment_verification_count.return_value = 7
        service = VerificationLedgerService(verifications, certificates)
        certificate = make_certificate(FINGERPRINT)

        await service.record_verification(
            VerificationInput(
                fingerprint=FINGERPRINT,
                verdict=GREEN,
                channel=VerificationChannel.QR,
                certificate=certificate,
            )
        )

        verifications.append.assert_awaited_once()
        certificates.increment_verification_count.assert_awaited_once()
        certificates.save.assert_not_called()


class TestConcurrentVerifications:
    """Concurrent verifications of one certificate are all counted."""

    async def test_fifty_concurrent_verifications(
        self,
        service: VerificationLedgerService,
        verification_repository: VerificationRepositoryStub,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        certificate = make_certificate(FINGERPRINT, is_on_chain=True)
        certificate_repository.seed(certificate)
        data = VerificationInput(
            fingerprint=FINGERPRINT,
            verdict=GREEN,
            channel=VerificationChannel.QR,
            certificate=certificate,
        )

        await asyncio.gather(*(service.record_verification(data) for _ in range(50)))

        stored = certificate_repository.get(certificate.id)
        assert stored is not None
        assert stored.verification_count == 50
        assert len(verification_repository.records) == 50


class TestManualVerification:
    """Tests for record_manual_verification."""

    async def test_manual_record(
        self,
        service: VerificationLedgerService,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        certificate = make_certificate(FINGERPRINT)
        certificate_repository.seed(certificate)
        verifier = Verifier(user_id=uuid4(), name="Registrar")

        record = await service.record_manual_verification(
            certificate, verifier, notes="Checked paper original"
        )

        assert record.is_manual is True
        assert record.channel == VerificationChannel.MANUAL
        assert record.badge == Badge.BLUE
        assert record.is_valid is True
        assert record.result == {"method": "manual"}
        assert record.notes == "Checked paper original"
        assert record.fingerprint == FINGERPRINT

    async def test_revoked_is_red_and_invalid(
        self,
        service: VerificationLedgerService,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        certificate = make_certificate(status=CertificateStatus.REVOKED)
        certificate_repository.seed(certificate)

        record = await service.record_manual_verification(
            certificate, Verifier(name="Registrar")
        )

        assert record.is_valid is False
        assert record.badge == Badge.RED
        assert record.fingerprint == "N/A"


class TestQueries:
    """Tests for history and stats."""

    async def test_history_and_stats(
        self,
        verification_repository: VerificationRepositoryStub,
        certificate_repository: CertificateRepositoryStub,
    ) -> None:
        times = iter(
            [
                datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
                datetime(2024, 6, 1, 12, 5, tzinfo=timezone.utc),
                datetime(2024, 6, 1, 12, 10, tzinfo=timezone.utc),
            ]
        )
        service = VerificationLedgerService(
            verification_repository, certificate_repository, clock=lambda: next(times)
        )
        certificate = make_certificate(FINGERPRINT)
        certificate_repository.seed(certificate)

        first = await service.record_verification(
            VerificationInput(FINGERPRINT, GREEN, VerificationChannel.QR, certificate)
        )
        second = await service.record_verification(
            VerificationInput(FINGERPRINT, GREEN, VerificationChannel.API, certificate)
        )
        await service.record_verification(
            VerificationInput("0x" + "bb" * 32, RED, VerificationChannel.QR)
        )

        history = await service.get_verifications_for_certificate("CERT-2024-0001")
        stats = await service.get_stats()

        assert [r.verification_id for r in history] == [
            second.verification_id,
            first.verification_id,
        ]
        assert stats.total == 3
        assert stats.valid == 2
        assert stats.invalid == 1
        assert stats.by_badge == {"green": 2, "red": 1}
        assert stats.by_channel == {"qr": 2, "api": 1}
