"""PostgreSQL certificate repository.

The verification counter is incremented inside the UPDATE itself
(``verification_count = verification_count + 1 ... RETURNING``), so
concurrent verifications never overwrite each other's increment.

SQL Pattern:
    UPDATE certificates
    SET verification_count = verification_count + 1, last_verified_at = $2
    WHERE id = $1
    RETURNING verification_count
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from certengine.application.ports.certificate_repository import CertificateRepository
from certengine.domain.errors.verification import CertificateNotFoundError
from certengine.domain.models.certificate import (
    BlockchainAnchor,
    Certificate,
    CertificateStatus,
)

_SELECT_COLUMNS = """
    SELECT id, certificate_id, status, is_legacy, is_on_chain, fingerprint,
           transaction_id, block_number, verification_count, last_verified_at
    FROM certificates
"""


def _row_to_certificate(row: Any) -> Certificate:
    return Certificate(
        id=row.id,
        certificate_id=row.certificate_id,
        status=CertificateStatus(row.status),
        is_legacy=row.is_legacy,
        blockchain=BlockchainAnchor(
            is_on_chain=row.is_on_chain,
            fingerprint=row.fingerprint,
            transaction_id=row.transaction_id,
            block_number=row.block_number,
        ),
        verification_count=row.verification_count,
        last_verified_at=row.last_verified_at,
    )


class PostgresCertificateRepository(CertificateRepository):
    """CertificateRepository backed by the ``certificates`` table.

    Attributes:
        _session_factory: SQLAlchemy async session factory for DB access.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_fingerprint(self, fingerprint: str) -> Certificate | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(_SELECT_COLUMNS + " WHERE fingerprint = :fingerprint LIMIT 1"),
                {"fingerprint": fingerprint.lower()},
            )
            row = result.fetchone()
        return _row_to_certificate(row) if row else None

    async def find_by_id(self, certificate_id: str) -> Certificate | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(_SELECT_COLUMNS + " WHERE certificate_id = :certificate_id"),
                {"certificate_id": certificate_id},
            )
            row = result.fetchone()
        return _row_to_certificate(row) if row else None

    async def save(self, certificate: Certificate) -> None:
        anchor = certificate.blockchain
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO certificates (
                        id, certificate_id, status, is_legacy, is_on_chain,
                        fingerprint, transaction_id, block_number,
                        verification_count, last_verified_at
                    ) VALUES (
                        :id, :certificate_id, :status, :is_legacy, :is_on_chain,
                        :fingerprint, :transaction_id, :block_number,
                        :verification_count, :last_verified_at
                    )
                    ON CONFLICT (id) DO UPDATE SET
                        certificate_id = EXCLUDED.certificate_id,
                        status = EXCLUDED.status,
                        is_legacy = EXCLUDED.is_legacy,
                        is_on_chain = EXCLUDED.is_on_chain,
                        fingerprint = EXCLUDED.fingerprint,
                        transaction_id = EXCLUDED.transaction_id,
                        block_number = EXCLUDED.block_number,
                        verification_count = EXCLUDED.verification_count,
                        last_verified_at = EXCLUDED.last_verified_at
                """),
                {
                    "id": certificate.id,
                    "certificate_id": certificate.certificate_id,
                    "status": certificate.status.value,
                    "is_legacy": certificate.is_legacy,
                    "is_on_chain": anchor.is_on_chain,
                    "fingerprint": anchor.fingerprint.lower() if anchor.fingerprint else None,
                    "transaction_id": anchor.transaction_id,
                    "block_number": anchor.block_number,
                    "verification_count": certificate.verification_count,
                    "last_verified_at": certificate.last_verified_at,
                },
            )

    async def increment_verification_count(
        self, certificate_ref: UUID, verified_at: datetime
    ) -> int:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("""
                    UPDATE certificates
                    SET verification_count = verification_count + 1,
                        last_verified_at = :verified_at
                    WHERE id = :id
                    RETURNING verification_count
                """),
                {"id": certificate_ref, "verified_at": verified_at},
            )
            count = result.scalar()
        if count is None:
            raise CertificateNotFoundError(str(certificate_ref))
        return int(count)
