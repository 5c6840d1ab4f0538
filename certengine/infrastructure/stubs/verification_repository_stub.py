"""Verification repository stub implementation.

In-memory, append-only ``VerificationRepository`` for development and
testing. Can be switched into a failure mode to exercise persistence errors.
"""

from __future__ import annotations

from collections import Counter

from certengine.application.ports.verification_repository import (
    VerificationRepository,
)
from certengine.domain.models.verification import (
    VerificationRecord,
    VerificationStats,
)


class VerificationRepositoryStub(VerificationRepository):
    """In-memory stub implementation of VerificationRepository.

    Attributes:
        _records: Appended records in insertion order.
        _fail_with: Exception raised by append() while set.
    """

    def __init__(self) -> None:
        """Initialize the stub with empty storage."""
        self._records: list[VerificationRecord] = []
        self._fail_with: Exception | None = None

    @property
    def records(self) -> list[VerificationRecord]:
        """Copy of all appended records."""
        return list(self._records)

    def set_failure(self, error: Exception | None) -> None:
        """Make append() raise ``error`` (None restores normal behaviour)."""
        self._fail_with = error

    def reset(self) -> None:
        """Clear all records and the failure mode."""
        self._records.clear()
        self._fail_with = None

    async def append(self, record: VerificationRecord) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self._records.append(record)

    async def list_for_certificate(
        self, certificate_id: str
    ) -> list[VerificationRecord]:
        matching = [r for r in self._records if r.certificate_id == certificate_id]
        return sorted(matching, key=lambda r: r.verified_at, reverse=True)

    async def get_stats(self) -> VerificationStats:
        valid = sum(1 for r in self._records if r.is_valid)
        return VerificationStats(
            total=len(self._records),
            valid=valid,
            invalid=len(self._records) - valid,
            by_badge=dict(Counter(r.badge.value for r in self._records)),
            by_channel=dict(Counter(r.channel.value for r in self._records)),
        )
