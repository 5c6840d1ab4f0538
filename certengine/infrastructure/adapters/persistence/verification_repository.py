"""PostgreSQL verification repository (append-only).

Only INSERT and SELECT statements are issued against ``verifications``.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from certengine.application.ports.verification_repository import (
    VerificationRepository,
)
from certengine.domain.models.verification import (
    Badge,
    VerificationChannel,
    VerificationRecord,
    VerificationStats,
    Verifier,
)
from certengine.infrastructure.adapters.persistence._json import from_jsonb, to_jsonb


def _verifier_to_json(verifier: Verifier | None) -> dict[str, Any] | None:
    if verifier is None:
        return None
    data = asdict(verifier)
    if verifier.user_id is not None:
        data["user_id"] = str(verifier.user_id)
    return data


def _verifier_from_json(data: dict[str, Any] | None) -> Verifier | None:
    if not data:
        return None
    user_id = data.get("user_id")
    return Verifier(**{**data, "user_id": UUID(user_id) if user_id else None})


def _row_to_record(row: Any) -> VerificationRecord:
    return VerificationRecord(
        verification_id=row.verification_id,
        certificate_id=row.certificate_id,
        certificate_ref=row.certificate_ref,
        fingerprint=row.fingerprint,
        channel=VerificationChannel(row.channel),
        verifier=_verifier_from_json(from_jsonb(row.verifier)),
        badge=Badge(row.badge),
        is_valid=row.is_valid,
        result=from_jsonb(row.result) or {},
        verified_at=row.verified_at,
        is_manual=row.is_manual,
        notes=row.notes,
    )


class PostgresVerificationRepository(VerificationRepository):
    """VerificationRepository backed by the ``verifications`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, record: VerificationRecord) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO verifications (
                        verification_id, certificate_id, certificate_ref,
                        fingerprint, channel, verifier, badge, is_valid,
                        result, is_manual, notes, verified_at
                    ) VALUES (
                        :verification_id, :certificate_id, :certificate_ref,
                        :fingerprint, :channel, CAST(:verifier AS JSONB), :badge,
                        :is_valid, CAST(:result AS JSONB), :is_manual, :notes,
                        :verified_at
                    )
                """),
                {
                    "verification_id": record.verification_id,
                    "certificate_id": record.certificate_id,
                    "certificate_ref": record.certificate_ref,
                    "fingerprint": record.fingerprint,
                    "channel": record.channel.value,
                    "verifier": to_jsonb(_verifier_to_json(record.verifier)),
                    "badge": record.badge.value,
                    "is_valid": record.is_valid,
                    "result": to_jsonb(record.result),
                    "is_manual": record.is_manual,
                    "notes": record.notes,
                    "verified_at": record.verified_at,
                },
            )

    async def list_for_certificate(
        self, certificate_id: str
    ) -> list[VerificationRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                text("""
                    SELECT verification_id, certificate_id, certificate_ref,
                           fingerprint, channel, verifier, badge, is_valid,
                           result, is_manual, notes, verified_at
                    FROM verifications
                    WHERE certificate_id = :certificate_id
                    ORDER BY verified_at DESC
                """),
                {"certificate_id": certificate_id},
            )
            rows = result.fetchall()
        return [_row_to_record(row) for row in rows]

    async def get_stats(self) -> VerificationStats:
        async with self._session_factory() as session:
            totals = (
                await session.execute(
                    text("""
                        SELECT COUNT(*) AS total,
                               COUNT(*) FILTER (WHERE is_valid) AS valid
                        FROM verifications
                    """)
                )
            ).one()
            badges = (
                await session.execute(
                    text("SELECT badge, COUNT(*) FROM verifications GROUP BY badge")
                )
            ).fetchall()
            channels = (
                await session.execute(
                    text("SELECT channel, COUNT(*) FROM verifications GROUP BY channel")
                )
            ).fetchall()

        return VerificationStats(
            total=totals.total,
            valid=totals.valid,
            invalid=totals.total - totals.valid,
            by_badge={badge: count for badge, count in badges},
            by_channel={channel: count for channel, count in channels},
        )
