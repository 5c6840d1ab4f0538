"""Certificate repository port.

The certificate store belongs to the surrounding CRUD system. The engine
reads certificates and only ever updates the verification counter, which
implementations MUST do atomically.

Usage:
    class PostgresCertificateRepository(CertificateRepository):
        async def find_by_fingerprint(self, fingerprint: str) -> Certificate | None:
            ...
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from certengine.domain.models.certificate import Certificate


@runtime_checkable
class CertificateRepository(Protocol):
    """Read/update access to stored certificates (never delete)."""

    async def find_by_fingerprint(self, fingerprint: str) -> Certificate | None:
        """Find the certificate anchored with a fingerprint.

        Args:
            fingerprint: ``0x``-prefixed lowercase fingerprint hex.

        Returns:
            The certificate, or None if no certificate carries it.
        """
        ...

    async def find_by_id(self, certificate_id: str) -> Certificate | None:
        """Find a certificate by its human-facing identifier.

        Args:
            certificate_id: Certificate identifier (e.g. ``CERT-2024-0001``).

        Returns:
            The certificate, or None if not found.
        """
        ...

    async def save(self, certificate: Certificate) -> None:
        """Insert or replace a certificate record.

        Not safe for counter updates: use increment_verification_count.
        """
        ...

    async def increment_verification_count(
        self, certificate_ref: UUID, verified_at: datetime
    ) -> int:
        """Atomically add one to the verification counter.

        Concurrent calls for the same certificate MUST each be counted.

        Args:
            certificate_ref: Storage id of the certificate.
            verified_at: New value for last_verified_at.

        Returns:
            The counter value after the increment.

        Raises:
            CertificateNotFoundError: If no certificate has this id.
        """
        ...
