"""Certificate integrity engine facade.

Single entry point for the surrounding system. Wires fingerprinting, Merkle
aggregation, the ledger, the badge classifier, the verification ledger and
the audit recorder together.

Audit entries for issue/revoke/verify are recorded explicitly by each
operation, in the background: a slow or failing audit sink never delays or
fails the operation itself. Call ``drain_audit()`` to wait for them.

Usage:
    engine = CertificateIntegrityService(ledger, certificates, verifications, audit)
    fingerprint = engine.fingerprint(content)
    receipt = await engine.issue_certificate(fingerprint)
    outcome = await engine.verify(fingerprint, VerificationChannel.QR)
    outcome.verdict.badge   # green / amber / blue / red
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.application.ports.ledger import LedgerPort
from certengine.application.services.audit_recorder_service import (
    AuditRecorderService,
)
from certengine.application.services.base import LoggingMixin
from certengine.application.services.fingerprint_service import FingerprintService
from certengine.application.services.merkle_tree_service import MerkleTreeService
from certengine.application.services.verification_ledger_service import (
    VerificationInput,
    VerificationLedgerService,
)
from certengine.domain.errors.verification import CertificateNotFoundError
from certengine.domain.models.audit_entry import (
    AuditAction,
    AuditActor,
    AuditEntry,
    AuditEntryInput,
    AuditStatus,
    AuditTarget,
    AuditTargetType,
    BlockchainReference,
)
from certengine.domain.models.certificate import Certificate, CertificateContent
from certengine.domain.models.fingerprint import Fingerprint
from certengine.domain.models.ledger_record import LedgerRecord, TxResult
from certengine.domain.models.verification import (
    UNKNOWN_CERTIFICATE_ID,
    VerdictSummary,
    VerificationChannel,
    VerificationRecord,
    Verifier,
)
from certengine.domain.services.verification_classifier import classify

FingerprintLike = Union[Fingerprint, str, bytes]
VerificationSubject = Union[CertificateContent, Mapping[str, Any], Fingerprint, str, bytes]


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of the verify workflow.

    Attributes:
        fingerprint: ``0x``-prefixed fingerprint that was verified.
        verdict: Classifier output.
        record: Persisted verification record.
        certificate: Matching stored certificate, if any.
        ledger: Ledger state at verification time.
    """

    fingerprint: str
    verdict: VerdictSummary
    record: VerificationRecord
    certificate: Certificate | None
    ledger: LedgerRecord


def _actor_from_verifier(verifier: Verifier | None) -> AuditActor | None:
    if verifier is None:
        return None
    return AuditActor(
        user_id=verifier.user_id,
        username=verifier.name,
        ip_address=verifier.ip_address,
        user_agent=verifier.user_agent,
    )


def _tx_audit_fields(tx: TxResult, fingerprint: str | None) -> dict[str, Any]:
    return {
        "status": AuditStatus.WARNING if tx.error else AuditStatus.SUCCESS,
        "error_message": tx.error,
        "blockchain": BlockchainReference(
            transaction_id=tx.transaction_id,
            fingerprint=fingerprint,
            network=tx.network,
        ),
    }


class CertificateIntegrityService(LoggingMixin):
    """Facade over the certificate integrity and verification engine."""

    def __init__(
        self,
        ledger: LedgerPort,
        certificates: CertificateRepository,
        verifications: VerificationLedgerService,
        audit: AuditRecorderService,
        fingerprints: FingerprintService | None = None,
        merkle: MerkleTreeService | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            ledger: Fail-open ledger adapter.
            certificates: Stored certificate lookup.
            verifications: Local verification ledger.
            audit: Fail-open audit recorder.
            fingerprints: Fingerprint service (default instance if None).
            merkle: Merkle service (default instance if None).
        """
        self._ledger = ledger
        self._certificates = certificates
        self._verifications = verifications
        self._audit = audit
        self._fingerprints = fingerprints or FingerprintService()
        self._merkle = merkle or MerkleTreeService()
        self._init_logger(component="engine")

    # Pure operations

    def fingerprint(
        self,
        content: CertificateContent | Mapping[str, Any],
        allow_wall_clock: bool = False,
    ) -> str:
        """Fingerprint certificate content.

        Args:
            content: Certificate content or a mapping accepted by
                ``CertificateContent.from_mapping``.
            allow_wall_clock: Use the current time when no timestamp is given.

        Returns:
            ``0x``-prefixed Keccak-256 fingerprint.

        Raises:
            EncodingError: If a required field is missing or malformed.
        """
        if not isinstance(content, CertificateContent):
            content = CertificateContent.from_mapping(content)
        return self._fingerprints.fingerprint(
            content, allow_wall_clock=allow_wall_clock
        ).hex

    def merkle_root(self, fingerprints: Sequence[FingerprintLike]) -> str:
        """Merkle root of a batch of fingerprints.

        Raises:
            EmptyBatchError: If the batch is empty.
            EncodingError: If an element is not a valid fingerprint.
        """
        return self._merkle.merkle_root(
            [Fingerprint.coerce(fp) for fp in fingerprints]
        ).hex

    def classify_verification(
        self, record: Certificate | None, ledger_result: LedgerRecord
    ) -> VerdictSummary:
        """Classify a certificate/ledger pair into a badge verdict."""
        return classify(record, ledger_result)

    # Ledger operations

    async def issue_certificate(
        self,
        fingerprint: FingerprintLike,
        actor: AuditActor | None = None,
        target: AuditTarget | None = None,
    ) -> TxResult:
        """Anchor a certificate fingerprint on the ledger.

        Returns:
            Ledger receipt; ``degraded`` when not anchored on a real ledger.
        """
        fp = Fingerprint.coerce(fingerprint)
        tx = await self._ledger.issue(fp)
        self._audit.record_nowait(
            AuditEntryInput(
                action=AuditAction.CERTIFICATE_ISSUE,
                actor=actor,
                target=target,
                details={"degraded": tx.degraded, "block_number": tx.block_number},
                **_tx_audit_fields(tx, fp.hex),
            )
        )
        return tx

    async def batch_issue(
        self,
        fingerprints: Sequence[FingerprintLike],
        actor: AuditActor | None = None,
    ) -> TxResult:
        """Anchor a batch of fingerprints in one transaction.

        Raises:
            EmptyBatchError: If the batch is empty.
        """
        fps = [Fingerprint.coerce(fp) for fp in fingerprints]
        root = self._merkle.merkle_root(fps)
        tx = await self._ledger.issue_batch(fps)
        self._audit.record_nowait(
            AuditEntryInput(
                action=AuditAction.CERTIFICATE_BATCH_ISSUE,
                actor=actor,
                target=AuditTarget(type=AuditTargetType.CERTIFICATE),
                details={
                    "count": tx.count,
                    "merkle_root": root.hex,
                    "degraded": tx.degraded,
                },
                **_tx_audit_fields(tx, root.hex),
            )
        )
        return tx

    async def revoke_certificate(
        self,
        fingerprint: FingerprintLike,
        reason: str,
        actor: AuditActor | None = None,
        target: AuditTarget | None = None,
    ) -> TxResult:
        """Revoke a fingerprint on the ledger."""
        fp = Fingerprint.coerce(fingerprint)
        tx = await self._ledger.revoke(fp, reason)
        self._audit.record_nowait(
            AuditEntryInput(
                action=AuditAction.CERTIFICATE_REVOKE,
                actor=actor,
                target=target,
                details={"reason": reason, "degraded": tx.degraded},
                **_tx_audit_fields(tx, fp.hex),
            )
        )
        return tx

    async def verify_certificate(
        self,
        fingerprint: FingerprintLike,
        actor: AuditActor | None = None,
    ) -> LedgerRecord:
        """Read the ledger state of a fingerprint."""
        fp = Fingerprint.coerce(fingerprint)
        ledger = await self._ledger.verify(fp)
        self._audit.record_nowait(
            AuditEntryInput(
                action=AuditAction.VERIFICATION_BLOCKCHAIN,
                status=AuditStatus.WARNING if ledger.degraded else AuditStatus.SUCCESS,
                actor=actor,
                blockchain=BlockchainReference(fingerprint=fp.hex),
                details=ledger.to_dict(),
            )
        )
        return ledger

    # Audit

    async def audit(self, entry: AuditEntryInput | Mapping[str, Any]) -> AuditEntry | None:
        """Record an audit entry. Never raises; None if it was dropped."""
        return await self._audit.record(entry)

    async def drain_audit(self) -> None:
        """Wait for background audit entries to be written."""
        await self._audit.drain()

    # Workflows

    async def verify(
        self,
        subject: VerificationSubject,
        channel: VerificationChannel = VerificationChannel.API,
        verifier: Verifier | None = None,
    ) -> VerificationOutcome:
        """Verify a certificate end to end.

        fingerprint -> local lookup -> ledger verify -> classify -> persist
        -> audit (background).

        Args:
            subject: Certificate content (or mapping), or a fingerprint.
            channel: How the verification was requested.
            verifier: Optional verifier identity.

        Returns:
            VerificationOutcome; always carries a badge.

        Raises:
            EncodingError: If the subject cannot be fingerprinted.
            VerificationPersistenceError: If the record could not be stored.
        """
        if isinstance(subject, (CertificateContent, Mapping)):
            fp = Fingerprint.from_hex(self.fingerprint(subject))
        else:
            fp = Fingerprint.coerce(subject)

        log = self._log_operation("verify", fingerprint=fp.hex, channel=channel.value)

        certificate = await self._certificates.find_by_fingerprint(fp.hex)
        ledger = await self._ledger.verify(fp)
        verdict = classify(certificate, ledger)

        record = await self._verifications.record_verification(
            VerificationInput(
                fingerprint=fp.hex,
                verdict=verdict,
                channel=channel,
                certificate=certificate,
                ledger_snapshot=ledger.to_dict(),
                verifier=verifier,
            )
        )

        self._audit.record_nowait(
            AuditEntryInput(
                action=(
                    AuditAction.VERIFICATION_QR
                    if channel == VerificationChannel.QR
                    else AuditAction.VERIFICATION_BLOCKCHAIN
                ),
                status=AuditStatus.SUCCESS if verdict.is_valid else AuditStatus.WARNING,
                actor=_actor_from_verifier(verifier),
                target=AuditTarget(
                    type=AuditTargetType.CERTIFICATE,
                    id=certificate.id if certificate else None,
                    identifier=(
                        certificate.certificate_id
                        if certificate
                        else UNKNOWN_CERTIFICATE_ID
                    ),
                ),
                badge=verdict.badge.value,
                blockchain=BlockchainReference(fingerprint=fp.hex),
                details={
                    "verification_id": str(record.verification_id),
                    "channel": channel.value,
                    "is_valid": verdict.is_valid,
                    "blockchain_status": verdict.blockchain_status,
                    "ledger_degraded": ledger.degraded,
                },
            )
        )

        log.info(
            "certificate_verified",
            badge=verdict.badge.value,
            is_valid=verdict.is_valid,
            ledger_degraded=ledger.degraded,
        )
        return VerificationOutcome(
            fingerprint=fp.hex,
            verdict=verdict,
            record=record,
            certificate=certificate,
            ledger=ledger,
        )

    async def manual_verification(
        self,
        certificate_id: str,
        verifier: Verifier,
        notes: str | None = None,
    ) -> VerificationRecord:
        """Record a human attestation of a stored certificate.

        Args:
            certificate_id: Human-facing certificate id or its fingerprint.
            verifier: Who attested it.
            notes: Free-form notes.

        Returns:
            The persisted manual verification record (blue, or red when
            the certificate is revoked).

        Raises:
            CertificateNotFoundError: If no stored certificate matches.
            VerificationPersistenceError: If the record could not be stored.
        """
        certificate = await self._certificates.find_by_id(certificate_id)
        if certificate is None and certificate_id.lower().startswith("0x"):
            certificate = await self._certificates.find_by_fingerprint(
                certificate_id.lower()
            )
        if certificate is None:
            raise CertificateNotFoundError(certificate_id)

        record = await self._verifications.record_manual_verification(
            certificate, verifier, notes
        )

        self._audit.record_nowait(
            AuditEntryInput(
                action=AuditAction.VERIFICATION_MANUAL,
                actor=_actor_from_verifier(verifier),
                target=AuditTarget(
                    type=AuditTargetType.VERIFICATION,
                    id=record.verification_id,
                    identifier=certificate.certificate_id,
                ),
                badge=record.badge.value,
                details={"notes": notes, "fingerprint": record.fingerprint},
            )
        )
        return record
