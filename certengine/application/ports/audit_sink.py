"""Audit sink port.

Append-only persistence for audit entries plus the filtered reads used by
audit trail exports.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import UUID

if TYPE_CHECKING:
    from certengine.domain.models.audit_entry import AuditAction, AuditEntry


@dataclass(frozen=True)
class AuditQuery:
    """Filters for reading audit entries. None means unfiltered.

    Attributes:
        action: Only entries with this action.
        actor_user_id: Only entries performed by this user.
        since: Only entries created at or after this time.
        until: Only entries created at or before this time.
        limit: Maximum number of entries returned.
    """

    action: AuditAction | None = None
    actor_user_id: UUID | None = None
    since: datetime | None = None
    until: datetime | None = None
    limit: int | None = None


@runtime_checkable
class AuditSink(Protocol):
    """Durable append-capable store for audit entries."""

    async def append(self, entry: AuditEntry) -> None:
        """Persist an audit entry."""
        ...

    async def list_entries(self, query: AuditQuery) -> list[AuditEntry]:
        """Get entries matching the filters, most recent first."""
        ...
