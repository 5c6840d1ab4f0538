"""Audit sink stub implementation.

In-memory ``AuditSink`` for development and testing. Supports a failure
mode and an artificial write delay to exercise the recorder's fail-open
behaviour.
"""

from __future__ import annotations

import asyncio

from certengine.application.ports.audit_sink import AuditQuery, AuditSink
from certengine.domain.models.audit_entry import AuditEntry


class AuditSinkStub(AuditSink):
    """In-memory stub implementation of AuditSink.

    Attributes:
        _entries: Appended entries in insertion order.
        _fail_with: Exception raised by append() while set.
        _delay_seconds: Sleep before each append.
    """

    def __init__(self, delay_seconds: float = 0.0) -> None:
        """Initialize the stub with empty storage.

        Args:
            delay_seconds: Artificial latency for every append.
        """
        self._entries: list[AuditEntry] = []
        self._fail_with: Exception | None = None
        self._delay_seconds = delay_seconds

    @property
    def entries(self) -> list[AuditEntry]:
        """Copy of all appended entries."""
        return list(self._entries)

    def set_failure(self, error: Exception | None) -> None:
        """Make append() raise ``error`` (None restores normal behaviour)."""
        self._fail_with = error

    def reset(self) -> None:
        """Clear entries, failure mode and delay."""
        self._entries.clear()
        self._fail_with = None
        self._delay_seconds = 0.0

    async def append(self, entry: AuditEntry) -> None:
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        if self._fail_with is not None:
            raise self._fail_with
        self._entries.append(entry)

    async def list_entries(self, query: AuditQuery) -> list[AuditEntry]:
        result = []
        for entry in self._entries:
            if query.action is not None and entry.action != query.action:
                continue
            if query.actor_user_id is not None and (
                entry.actor is None or entry.actor.user_id != query.actor_user_id
            ):
                continue
            if query.since is not None and entry.created_at < query.since:
                continue
            if query.until is not None and entry.created_at > query.until:
                continue
            result.append(entry)

        result.sort(key=lambda e: e.created_at, reverse=True)
        if query.limit is not None:
            result = result[: query.limit]
        return result
