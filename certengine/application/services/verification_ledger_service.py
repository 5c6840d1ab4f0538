"""Verification ledger service (local, append-only).

Persists one immutable ``VerificationRecord`` per verification attempt and
keeps the per-certificate verification counter current.

Ordering:
    1. Append the record. A failure here raises
       ``VerificationPersistenceError``; an attempt is never dropped.
    2. For a resolved certificate, increment its counter through the
       repository's atomic primitive. Concurrent verifications of the same
       certificate are each counted. A failed increment also raises
       ``VerificationPersistenceError``; the appended record is kept.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from uuid6 import uuid7

from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.application.ports.verification_repository import (
    VerificationRepository,
)
from certengine.application.services.base import LoggingMixin
from certengine.domain.errors.verification import VerificationPersistenceError
from certengine.domain.models.certificate import Certificate
from certengine.domain.models.verification import (
    UNKNOWN_CERTIFICATE_ID,
    Badge,
    VerdictSummary,
    VerificationChannel,
    VerificationRecord,
    VerificationStats,
    Verifier,
)
from certengine.infrastructure.monitoring.metrics import IntegrityMetrics


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class VerificationInput:
    """Everything needed to record one verification attempt.

    Attributes:
        fingerprint: ``0x``-prefixed fingerprint that was verified.
        verdict: Classifier output.
        channel: How the verification was requested.
        certificate: Resolved certificate, or None when unknown.
        ledger_snapshot: Ledger state at verification time.
        verifier: Optional verifier identity.
    """

    fingerprint: str
    verdict: VerdictSummary
    channel: VerificationChannel
    certificate: Certificate | None = None
    ledger_snapshot: Mapping[str, Any] | None = None
    verifier: Verifier | None = None


class VerificationLedgerService(LoggingMixin):
    """Records verification attempts and maintains verification counters."""

    def __init__(
        self,
        verifications: VerificationRepository,
        certificates: CertificateRepository,
        metrics: IntegrityMetrics | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the verification ledger.

        Args:
            verifications: Append-only verification store.
            certificates: Certificate store (counter updates only).
            metrics: Optional metrics collector.
            clock: UTC clock for verified_at.
        """
        self._verifications = verifications
        self._certificates = certificates
        self._metrics = metrics
        self._clock = clock
        self._init_logger(component="verification")

    async def record_verification(self, data: VerificationInput) -> VerificationRecord:
        """Persist a verification attempt.

        Args:
            data: Verdict, fingerprint and context of the attempt.

        Returns:
            The persisted record.

        Raises:
            VerificationPersistenceError: If the record could not be stored.
        """
        certificate = data.certificate
        record = VerificationRecord(
            verification_id=uuid7(),
            certificate_id=(
                certificate.certificate_id if certificate else UNKNOWN_CERTIFICATE_ID
            ),
            certificate_ref=certificate.id if certificate else None,
            fingerprint=data.fingerprint,
            channel=data.channel,
            verifier=data.verifier,
            badge=data.verdict.badge,
            is_valid=data.verdict.is_valid,
            result=dict(data.ledger_snapshot or {}),
            verified_at=self._clock(),
        )
        return await self._persist(record)

    async def record_manual_verification(
        self,
        certificate: Certificate,
        verifier: Verifier,
        notes: str | None = None,
    ) -> VerificationRecord:
        """Record a verification attested by a human verifier.

        Manual verifications carry the blue badge: the record exists but
        no ledger confirmation was involved. A revoked certificate is
        recorded red and invalid.

        Args:
            certificate: Certificate being attested.
            verifier: Who attested it.
            notes: Free-form notes from the verifier.

        Returns:
            The persisted record.

        Raises:
            VerificationPersistenceError: If the record could not be stored.
        """
        record = VerificationRecord(
            verification_id=uuid7(),
            certificate_id=certificate.certificate_id,
            certificate_ref=certificate.id,
            fingerprint=certificate.blockchain.fingerprint or "N/A",
            channel=VerificationChannel.MANUAL,
            verifier=verifier,
            badge=Badge.RED if certificate.is_revoked else Badge.BLUE,
            is_valid=not certificate.is_revoked,
            result={"method": "manual"},
            verified_at=self._clock(),
            is_manual=True,
            notes=notes,
        )
        return await self._persist(record)

    async def _persist(self, record: VerificationRecord) -> VerificationRecord:
        log = self._log_operation(
            "record_verification",
            verification_id=str(record.verification_id),
            certificate_id=record.certificate_id,
            channel=record.channel.value,
        )

        try:
            await self._verifications.append(record)
        except Exception as exc:
            log.error("verification_persist_failed", error=str(exc), exc_info=True)
            raise VerificationPersistenceError(record.verification_id, str(exc)) from exc

        if record.certificate_ref is not None:
            try:
                count = await self._certificates.increment_verification_count(
                    record.certificate_ref, record.verified_at
                )
            except Exception as exc:
                log.error(
                    "verification_counter_update_failed",
                    error=str(exc),
                    exc_info=True,
                )
                raise VerificationPersistenceError(
                    record.verification_id, f"counter update failed: {exc}"
                ) from exc
            log = log.bind(verification_count=count)

        if self._metrics is not None:
            self._metrics.increment_verifications(
                record.badge.value, record.channel.value
            )

        log.info(
            "verification_recorded",
            badge=record.badge.value,
            is_valid=record.is_valid,
        )
        return record

    async def get_verifications_for_certificate(
        self, certificate_id: str
    ) -> list[VerificationRecord]:
        """Get a certificate's verification history, most recent first."""
        return await self._verifications.list_for_certificate(certificate_id)

    async def get_stats(self) -> VerificationStats:
        """Get aggregate verification statistics."""
        return await self._verifications.get_stats()
