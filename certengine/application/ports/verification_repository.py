"""Verification repository port.

Append-only store of verification records: records are never updated or
deleted once appended.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from certengine.domain.models.verification import (
        VerificationRecord,
        VerificationStats,
    )


@runtime_checkable
class VerificationRepository(Protocol):
    """Durable append-only sink for verification records."""

    async def append(self, record: VerificationRecord) -> None:
        """Persist a new verification record.

        Raises:
            Exception: Any storage failure; callers treat it as fatal.
        """
        ...

    async def list_for_certificate(
        self, certificate_id: str
    ) -> list[VerificationRecord]:
        """Get records for a certificate, most recent first."""
        ...

    async def get_stats(self) -> VerificationStats:
        """Aggregate totals by validity, badge and channel."""
        ...
