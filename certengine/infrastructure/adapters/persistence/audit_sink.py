"""PostgreSQL audit sink (append-only).

The full entry is stored as JSONB; action, status, actor and creation time
are duplicated into indexed columns for filtering.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from certengine.application.ports.audit_sink import AuditQuery, AuditSink
from certengine.domain.models.audit_entry import AuditEntry
from certengine.infrastructure.adapters.persistence._json import from_jsonb, to_jsonb


class PostgresAuditSink(AuditSink):
    """AuditSink backed by the ``audit_entries`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: AuditEntry) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO audit_entries (
                        entry_id, action, status, actor_user_id, created_at, payload
                    ) VALUES (
                        :entry_id, :action, :status, :actor_user_id, :created_at,
                        CAST(:payload AS JSONB)
                    )
                """),
                {
                    "entry_id": entry.entry_id,
                    "action": entry.action.value,
                    "status": entry.status.value,
                    "actor_user_id": entry.actor.user_id if entry.actor else None,
                    "created_at": entry.created_at,
                    "payload": to_jsonb(entry.to_dict()),
                },
            )

    async def list_entries(self, query: AuditQuery) -> list[AuditEntry]:
        clauses: list[str] = []
        params: dict[str, Any] = {}
        if query.action is not None:
            clauses.append("action = :action")
            params["action"] = query.action.value
        if query.actor_user_id is not None:
            clauses.append("actor_user_id = :actor_user_id")
            params["actor_user_id"] = query.actor_user_id
        if query.since is not None:
            clauses.append("created_at >= :since")
            params["since"] = query.since
        if query.until is not None:
            clauses.append("created_at <= :until")
            params["until"] = query.until

        sql = "SELECT payload FROM audit_entries"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC"
        if query.limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = query.limit

        async with self._session_factory() as session:
            result = await session.execute(text(sql), params)
            rows = result.fetchall()
        return [AuditEntry.from_dict(from_jsonb(row.payload)) for row in rows]
