"""Verification ledger errors."""

from __future__ import annotations

from uuid import UUID

from certengine.domain.exceptions import CertEngineError


class VerificationPersistenceError(CertEngineError):
    """Raised when a verification record cannot be persisted.

    Losing a verification attempt silently is not acceptable, so this
    error is fatal to the verification request.

    Attributes:
        verification_id: ID of the record that failed to persist.
        reason: Underlying storage error description.
    """

    def __init__(self, verification_id: UUID, reason: str) -> None:
        """Initialize VerificationPersistenceError.

        Args:
            verification_id: ID of the verification record.
            reason: Description of the storage failure.
        """
        self.verification_id = verification_id
        self.reason = reason
        super().__init__(
            f"Verification {verification_id} could not be persisted: {reason}"
        )


class CertificateNotFoundError(CertEngineError):
    """Raised when a certificate to be attested manually does not exist.

    Attributes:
        certificate_id: Identifier or fingerprint that was looked up.
    """

    def __init__(self, certificate_id: str) -> None:
        self.certificate_id = certificate_id
        super().__init__(f"Certificate not found: {certificate_id}")
