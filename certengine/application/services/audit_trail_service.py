"""Audit trail read service.

Filtered listing, per-user activity summaries and exports (JSON or CSV) of
recorded audit entries. Read-only: entries are never modified.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal
from uuid import UUID

from certengine.application.ports.audit_sink import AuditQuery, AuditSink
from certengine.application.services.base import LoggingMixin
from certengine.domain.models.audit_entry import (
    AuditEntry,
    JsonDetails,
    TruncatedDetails,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ActivitySummaryItem:
    """Entries of one action performed by a user within the window."""

    action: str
    count: int
    last_activity: datetime


class AuditTrailService(LoggingMixin):
    """Reads and exports the audit trail."""

    CSV_HEADERS = ["timestamp", "action", "actor", "status", "target", "details"]

    def __init__(
        self,
        sink: AuditSink,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._sink = sink
        self._clock = clock
        self._init_logger(component="audit")

    async def list_entries(self, query: AuditQuery | None = None) -> list[AuditEntry]:
        """List entries matching the filters, most recent first."""
        return await self._sink.list_entries(query or AuditQuery())

    async def activity_summary(
        self, user_id: UUID, days: int = 30
    ) -> list[ActivitySummaryItem]:
        """Summarize a user's actions over the last ``days`` days.

        Args:
            user_id: Actor to summarize.
            days: Window length.

        Returns:
            One item per action, most frequent first.
        """
        since = self._clock() - timedelta(days=days)
        entries = await self._sink.list_entries(
            AuditQuery(actor_user_id=user_id, since=since)
        )

        grouped: dict[str, ActivitySummaryItem] = {}
        for entry in entries:
            action = entry.action.value
            current = grouped.get(action)
            if current is None:
                grouped[action] = ActivitySummaryItem(action, 1, entry.created_at)
            else:
                grouped[action] = ActivitySummaryItem(
                    action,
                    current.count + 1,
                    max(current.last_activity, entry.created_at),
                )

        return sorted(grouped.values(), key=lambda item: (-item.count, item.action))

    async def export(
        self,
        format: Literal["json", "csv"] = "json",
        query: AuditQuery | None = None,
    ) -> str:
        """Export entries as a JSON document or CSV text.

        Args:
            format: ``json`` or ``csv``.
            query: Optional filters.

        Returns:
            The serialized export.

        Raises:
            ValueError: If the format is not supported.
        """
        if format not in ("json", "csv"):
            raise ValueError(f"Unsupported export format: {format}")

        entries = await self.list_entries(query)
        self._log_operation("export", format=format).info(
            "audit_trail_exported", entry_count=len(entries)
        )

        if format == "csv":
            return self._to_csv(entries)
        return json.dumps(
            {
                "exported_at": self._clock().isoformat(),
                "entries": [entry.to_dict() for entry in entries],
            },
            default=str,
        )

    def _to_csv(self, entries: list[AuditEntry]) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(self.CSV_HEADERS)
        for entry in entries:
            writer.writerow(self._csv_row(entry))
        return output.getvalue()

    def _csv_row(self, entry: AuditEntry) -> list[Any]:
        actor = entry.actor.username if entry.actor and entry.actor.username else "System"
        target = entry.target.identifier if entry.target and entry.target.identifier else "-"
        if entry.details is None:
            details = "{}"
        elif isinstance(entry.details, JsonDetails):
            details = json.dumps(entry.details.data, default=str)
        elif isinstance(entry.details, TruncatedDetails):
            details = entry.details.preview
        else:
            details = entry.details.text
        return [
            entry.created_at.isoformat(),
            entry.action.value,
            actor,
            entry.status.value,
            target,
            details,
        ]
