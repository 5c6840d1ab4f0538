"""Certificate repository stub implementation.

In-memory ``CertificateRepository`` for development and testing.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import UUID

from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.domain.errors.verification import CertificateNotFoundError
from certengine.domain.models.certificate import Certificate


class CertificateRepositoryStub(CertificateRepository):
    """In-memory stub implementation of CertificateRepository.

    ``increment_verification_count`` reads and writes without awaiting in
    between, so it is atomic with respect to other coroutines on the loop.

    Attributes:
        _certificates: Dictionary mapping storage id to Certificate.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._certificates: dict[UUID, Certificate] = {}

    def seed(self, *certificates: Certificate) -> None:
        """Add certificates directly (test setup)."""
        for certificate in certificates:
            self._certificates[certificate.id] = certificate

    def get(self, certificate_ref: UUID) -> Certificate | None:
        """Synchronous lookup by storage id (test assertions)."""
        return self._certificates.get(certificate_ref)

    def reset(self) -> None:
        """Clear all stored certificates."""
        self._certificates.clear()

    async def find_by_fingerprint(self, fingerprint: str) -> Certificate | None:
        wanted = fingerprint.lower()
        for certificate in self._certificates.values():
            stored = certificate.blockchain.fingerprint
            if stored is not None and stored.lower() == wanted:
                return certificate
        return None

    async def find_by_id(self, certificate_id: str) -> Certificate | None:
        for certificate in self._certificates.values():
            if certificate.certificate_id == certificate_id:
                return certificate
        return None

    async def save(self, certificate: Certificate) -> None:
        self._certificates[certificate.id] = certificate

    async def increment_verification_count(
        self, certificate_ref: UUID, verified_at: datetime
    ) -> int:
        current = self._certificates.get(certificate_ref)
        if current is None:
            raise CertificateNotFoundError(str(certificate_ref))
        updated = replace(
            current,
            verification_count=current.verification_count + 1,
            last_verified_at=verified_at,
        )
        self._certificates[certificate_ref] = updated
        return updated.verification_count
