"""Fail-open audit recorder.

Records sensitive actions without ever being able to abort them. Call sites
hand over whatever they have (an ``AuditEntryInput`` or a plain mapping);
the recorder coerces it into a well-formed ``AuditEntry`` and appends it to
the sink. Every failure (coercion, sink error, timeout) is logged, counted
and turned into a ``None`` return.

Coercions, in order:
    1. Legacy/alias action names map to canonical actions (case-insensitive).
    2. Unset or unknown actions become ``system_error``; the raw value is
       kept in ``original_action``.
    3. Target type aliases map to canonical lowercase types; unmappable
       types are dropped.
    4. Missing/invalid status becomes ``failure`` when an error message is
       present, otherwise ``success``.
    5. String ids become UUIDs. A non-UUID target id is kept as the target's
       human identifier; a non-UUID actor id is dropped.
    6. Details that serialize past the configured limit are replaced with a
       bounded preview.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Final
from uuid import UUID

from uuid6 import uuid7

from certengine.application.ports.audit_sink import AuditSink
from certengine.application.services.base import LoggingMixin
from certengine.config.audit_config import DEFAULT_AUDIT_CONFIG, AuditConfig
from certengine.domain.models.audit_entry import (
    AuditAction,
    AuditActor,
    AuditChanges,
    AuditDetails,
    AuditEntry,
    AuditEntryInput,
    AuditMetadata,
    AuditStatus,
    AuditTarget,
    AuditTargetType,
    BlockchainReference,
    JsonDetails,
    TextDetails,
    TruncatedDetails,
)
from certengine.domain.models.verification import Badge
from certengine.infrastructure.monitoring.metrics import IntegrityMetrics

ACTION_ALIASES: Final[dict[str, AuditAction]] = {
    "certificate_issued": AuditAction.CERTIFICATE_ISSUE,
    "batch_issue": AuditAction.CERTIFICATE_BATCH_ISSUE,
    "certificate_revoked": AuditAction.CERTIFICATE_REVOKE,
    "certificate_verified": AuditAction.VERIFICATION_BLOCKCHAIN,
    "manual_verification": AuditAction.VERIFICATION_MANUAL,
    "user_updated": AuditAction.USER_UPDATE,
    "user_activated": AuditAction.USER_UPDATE,
    "user_deactivated": AuditAction.USER_UPDATE,
    "role_changed": AuditAction.ROLE_CHANGE,
    "user_created": AuditAction.USER_REGISTER,
    "user_deleted": AuditAction.USER_DELETE,
    "legacy_migration": AuditAction.CERTIFICATE_MIGRATE,
    "legacy_approval": AuditAction.CERTIFICATE_MIGRATE,
}

TARGET_TYPE_ALIASES: Final[dict[str, AuditTargetType]] = {
    "user": AuditTargetType.USER,
    "users": AuditTargetType.USER,
    "learner": AuditTargetType.USER,
    "certificate": AuditTargetType.CERTIFICATE,
    "certificates": AuditTargetType.CERTIFICATE,
    "cert": AuditTargetType.CERTIFICATE,
    "verification": AuditTargetType.VERIFICATION,
    "verifications": AuditTargetType.VERIFICATION,
    "audit": AuditTargetType.AUDIT,
    "auditlog": AuditTargetType.AUDIT,
    "audit_log": AuditTargetType.AUDIT,
    "system": AuditTargetType.SYSTEM,
}

# Mapping keys accepted for each AuditEntryInput field
_INPUT_KEYS: Final[dict[str, tuple[str, ...]]] = {
    "action": ("action",),
    "status": ("status",),
    "actor": ("actor",),
    "target": ("target",),
    "details": ("details",),
    "changes": ("changes",),
    "blockchain": ("blockchain",),
    "badge": ("badge",),
    "error_message": ("error_message", "errorMessage"),
    "metadata": ("metadata",),
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def _parse_uuid(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _input_from_mapping(data: Mapping[str, Any]) -> AuditEntryInput:
    values: dict[str, Any] = {}
    consumed: set[str] = set()
    for name, keys in _INPUT_KEYS.items():
        values[name] = _pick(data, *keys)
        consumed.update(keys)
    extra = {key: value for key, value in data.items() if key not in consumed}
    return AuditEntryInput(**values, extra=extra)


def coerce_action(raw: Any) -> tuple[AuditAction, str | None]:
    """Map a raw action to a canonical one.

    Returns:
        Tuple of (action, original) where original is the raw string when
        it was unset or unknown, None otherwise.
    """
    if isinstance(raw, AuditAction):
        return raw, None
    text = "" if raw is None else str(raw).strip()
    key = text.lower()
    try:
        return AuditAction(key), None
    except ValueError:
        pass
    if key in ACTION_ALIASES:
        return ACTION_ALIASES[key], None
    return AuditAction.SYSTEM_ERROR, text or None


def coerce_target_type(raw: Any) -> AuditTargetType | None:
    """Map a raw target type to a canonical one, None if unmappable."""
    if raw is None or isinstance(raw, AuditTargetType):
        return raw
    return TARGET_TYPE_ALIASES.get(str(raw).strip().lower())


def coerce_status(raw: Any, error_message: str | None) -> AuditStatus:
    """Validate a status, inferring it from the error message if needed."""
    if isinstance(raw, AuditStatus):
        return raw
    if raw is not None:
        try:
            return AuditStatus(str(raw).strip().lower())
        except ValueError:
            pass
    return AuditStatus.FAILURE if error_message else AuditStatus.SUCCESS


def _coerce_actor(raw: Any) -> AuditActor | None:
    if raw is None or isinstance(raw, AuditActor):
        return raw
    if not isinstance(raw, Mapping):
        return None
    return AuditActor(
        user_id=_parse_uuid(_pick(raw, "user_id", "userId")),
        username=_optional_str(raw.get("username")),
        role=_optional_str(raw.get("role")),
        ip_address=_optional_str(_pick(raw, "ip_address", "ipAddress")),
        user_agent=_optional_str(_pick(raw, "user_agent", "userAgent")),
    )


def _coerce_target(raw: Any) -> AuditTarget | None:
    if raw is None:
        return None
    if isinstance(raw, AuditTarget):
        return AuditTarget(
            type=coerce_target_type(raw.type),
            id=raw.id,
            identifier=raw.identifier,
            name=raw.name,
        )
    if not isinstance(raw, Mapping):
        return None

    raw_id = _pick(raw, "id", "target_id", "targetId")
    target_id = _parse_uuid(raw_id)
    identifier = _optional_str(raw.get("identifier"))
    if target_id is None and raw_id is not None and identifier is None:
        identifier = str(raw_id)

    return AuditTarget(
        type=coerce_target_type(raw.get("type")),
        id=target_id,
        identifier=identifier,
        name=_optional_str(raw.get("name")),
    )


def _coerce_changes(raw: Any) -> AuditChanges | None:
    if raw is None or isinstance(raw, AuditChanges):
        return raw
    if isinstance(raw, Mapping):
        return AuditChanges(before=raw.get("before"), after=raw.get("after"))
    return AuditChanges(after=raw)


def _coerce_blockchain(raw: Any) -> BlockchainReference | None:
    if raw is None or isinstance(raw, BlockchainReference):
        return raw
    if not isinstance(raw, Mapping):
        return None
    return BlockchainReference(
        transaction_id=_optional_str(
            _pick(raw, "transaction_id", "transactionId", "tx_hash", "txHash")
        ),
        fingerprint=_optional_str(
            _pick(raw, "fingerprint", "cert_hash", "certHash")
        ),
        network=_optional_str(raw.get("network")),
    )


def _coerce_metadata(raw: Any) -> AuditMetadata | None:
    if raw is None or isinstance(raw, AuditMetadata):
        return raw
    if not isinstance(raw, Mapping):
        return None
    duration = _pick(raw, "duration_ms", "duration")
    try:
        duration_ms = float(duration) if duration is not None else None
    except (TypeError, ValueError):
        duration_ms = None
    return AuditMetadata(
        duration_ms=duration_ms,
        request_id=_optional_str(_pick(raw, "request_id", "requestId")),
        session_id=_optional_str(_pick(raw, "session_id", "sessionId")),
    )


def _coerce_badge(raw: Any) -> str | None:
    if raw is None:
        return None
    value = raw.value if isinstance(raw, Badge) else str(raw).strip().lower()
    return value if value in {badge.value for badge in Badge} else None


class AuditRecorderService(LoggingMixin):
    """Coerces and persists audit entries; never raises to its caller.

    Example:
        recorder = AuditRecorderService(sink)
        await recorder.record({"action": "certificate_issued", "target": {...}})
        recorder.record_nowait(entry)   # fire-and-forget
        await recorder.drain()          # e.g. at shutdown
    """

    def __init__(
        self,
        sink: AuditSink,
        config: AuditConfig = DEFAULT_AUDIT_CONFIG,
        metrics: IntegrityMetrics | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the recorder.

        Args:
            sink: Append-only audit store.
            config: Details limits and write timeout.
            metrics: Optional metrics collector.
            clock: UTC clock for created_at.
        """
        self._sink = sink
        self._config = config
        self._metrics = metrics
        self._clock = clock
        self._pending: set[asyncio.Task[AuditEntry | None]] = set()
        self._init_logger(component="audit")

    @property
    def pending_count(self) -> int:
        """Number of background recordings still running."""
        return len(self._pending)

    def coerce_details(
        self, raw: Any, extra: Mapping[str, Any] | None = None
    ) -> AuditDetails | None:
        """Turn an arbitrary payload into the details union.

        Extra top-level input keys are folded into mapping (or absent)
        details so nothing the caller supplied is lost.
        """
        if extra:
            if raw is None:
                raw = dict(extra)
            elif isinstance(raw, Mapping):
                raw = {**extra, **raw}

        if raw is None:
            return None
        if isinstance(raw, (JsonDetails, TextDetails, TruncatedDetails)):
            return raw

        structured = isinstance(raw, (Mapping, list, tuple))
        if isinstance(raw, str):
            serialized = raw
        else:
            try:
                serialized = json.dumps(raw, default=str)
            except (TypeError, ValueError):
                # Non-string keys or circular references
                serialized = repr(raw)
                structured = False

        if len(serialized) > self._config.details_max_chars:
            return TruncatedDetails(
                preview=serialized[: self._config.details_preview_chars],
                original_length=len(serialized),
            )
        if structured:
            return JsonDetails(data=json.loads(serialized))
        return TextDetails(text=serialized)

    def normalize(self, entry: AuditEntryInput | Mapping[str, Any]) -> AuditEntry:
        """Coerce a loosely typed entry into a well-formed AuditEntry.

        Raises:
            TypeError: If entry is neither an AuditEntryInput nor a mapping.
        """
        if isinstance(entry, Mapping):
            entry = _input_from_mapping(entry)
        elif not isinstance(entry, AuditEntryInput):
            raise TypeError(f"Unsupported audit entry type: {type(entry).__name__}")

        action, original_action = coerce_action(entry.action)
        error_message = _optional_str(entry.error_message)

        return AuditEntry(
            entry_id=uuid7(),
            action=action,
            status=coerce_status(entry.status, error_message),
            created_at=self._clock(),
            actor=_coerce_actor(entry.actor),
            target=_coerce_target(entry.target),
            details=self.coerce_details(entry.details, entry.extra),
            changes=_coerce_changes(entry.changes),
            blockchain=_coerce_blockchain(entry.blockchain),
            badge=_coerce_badge(entry.badge),
            error_message=error_message,
            metadata=_coerce_metadata(entry.metadata),
            original_action=original_action,
        )

    async def record(
        self, entry: AuditEntryInput | Mapping[str, Any]
    ) -> AuditEntry | None:
        """Record an audit entry.

        Args:
            entry: Loosely typed entry.

        Returns:
            The stored entry, or None if it was dropped.
        """
        log = self._log_operation("record", action=_raw_action(entry))

        try:
            normalized = self.normalize(entry)
            await asyncio.wait_for(
                self._sink.append(normalized),
                timeout=self._config.write_timeout_seconds,
            )
        except Exception as exc:
            log.error(
                "audit_entry_dropped",
                error=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
            )
            self._count("dropped")
            return None

        if normalized.original_action is not None:
            log.warning(
                "audit_action_coerced",
                original_action=normalized.original_action,
                action=normalized.action.value,
            )
        log.debug(
            "audit_entry_recorded",
            entry_id=str(normalized.entry_id),
            status=normalized.status.value,
        )
        self._count("recorded")
        return normalized

    def record_nowait(
        self, entry: AuditEntryInput | Mapping[str, Any]
    ) -> asyncio.Task[AuditEntry | None]:
        """Schedule recording in the background and return immediately.

        Must be called from a running event loop. The task is referenced
        until it finishes so it cannot be garbage collected mid-write.
        """
        task = asyncio.create_task(self.record(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all background recordings to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _count(self, outcome: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_audit_entries(outcome)


def _raw_action(entry: Any) -> str | None:
    if isinstance(entry, Mapping):
        raw = entry.get("action")
    else:
        raw = getattr(entry, "action", None)
    if isinstance(raw, AuditAction):
        return raw.value
    return None if raw is None else str(raw)


