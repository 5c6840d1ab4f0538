"""Audit entry domain models.

Audit entries are append-only and immutable. Callers hand the recorder a
loosely typed ``AuditEntryInput`` (or a plain mapping); the recorder
coerces it into a well-formed ``AuditEntry`` instead of rejecting it.

Details are a tagged union so that "accept anything" still yields a typed
value:

- ``JsonDetails``: structured payload (mapping or list)
- ``TextDetails``: plain string payload
- ``TruncatedDetails``: bounded preview of a payload that was too large
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Union
from uuid import UUID


class AuditAction(str, Enum):
    """Known audit action kinds."""

    USER_REGISTER = "user_register"
    USER_LOGIN = "user_login"
    USER_LOGOUT = "user_logout"
    USER_UPDATE = "user_update"
    USER_DELETE = "user_delete"
    CERTIFICATE_ISSUE = "certificate_issue"
    CERTIFICATE_BATCH_ISSUE = "certificate_batch_issue"
    CERTIFICATE_REVOKE = "certificate_revoke"
    CERTIFICATE_VIEW = "certificate_view"
    CERTIFICATE_DOWNLOAD = "certificate_download"
    CERTIFICATE_UPLOAD = "certificate_upload"
    CERTIFICATE_MIGRATE = "certificate_migrate"
    VERIFICATION_QR = "verification_qr"
    VERIFICATION_BLOCKCHAIN = "verification_blockchain"
    VERIFICATION_MANUAL = "verification_manual"
    AUDIT_VIEW = "audit_view"
    AUDIT_EXPORT = "audit_export"
    DIGILOCKER_EXPORT = "digilocker_export"
    DIGILOCKER_IMPORT = "digilocker_import"
    SETTINGS_UPDATE = "settings_update"
    ROLE_CHANGE = "role_change"
    SYSTEM_ERROR = "system_error"


class AuditTargetType(str, Enum):
    """Kinds of entity an audit entry can refer to."""

    USER = "user"
    CERTIFICATE = "certificate"
    VERIFICATION = "verification"
    AUDIT = "audit"
    SYSTEM = "system"


class AuditStatus(str, Enum):
    """Outcome of the audited action."""

    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"
    WARNING = "warning"


@dataclass(frozen=True, eq=True)
class JsonDetails:
    """Structured details payload."""

    data: dict[str, Any] | list[Any]
    kind: Literal["json"] = "json"


@dataclass(frozen=True, eq=True)
class TextDetails:
    """Plain text details payload."""

    text: str
    kind: Literal["text"] = "text"


@dataclass(frozen=True, eq=True)
class TruncatedDetails:
    """Bounded preview of an oversized details payload.

    Attributes:
        preview: First characters of the serialized payload.
        original_length: Length of the full serialized payload.
    """

    preview: str
    original_length: int
    kind: Literal["truncated"] = "truncated"


AuditDetails = Union[JsonDetails, TextDetails, TruncatedDetails]


@dataclass(frozen=True, eq=True)
class AuditActor:
    """Who performed the action."""

    user_id: UUID | None = None
    username: str | None = None
    role: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, eq=True)
class AuditTarget:
    """Typed reference to the affected entity.

    ``type`` is None when the caller supplied a type that could not be
    mapped to a known ``AuditTargetType``.
    """

    type: AuditTargetType | None = None
    id: UUID | None = None
    identifier: str | None = None
    name: str | None = None


@dataclass(frozen=True, eq=True)
class AuditChanges:
    """Before/after snapshot for mutation actions."""

    before: Any = None
    after: Any = None


@dataclass(frozen=True, eq=True)
class BlockchainReference:
    """Ledger transaction an action produced."""

    transaction_id: str | None = None
    fingerprint: str | None = None
    network: str | None = None


@dataclass(frozen=True, eq=True)
class AuditMetadata:
    """Request-scoped metadata."""

    duration_ms: float | None = None
    request_id: str | None = None
    session_id: str | None = None


@dataclass(frozen=True, eq=True)
class AuditEntry:
    """Immutable, well-formed audit entry.

    Attributes:
        entry_id: Unique entry id (UUIDv7).
        action: Canonical action.
        status: Outcome status.
        created_at: Creation time (UTC).
        actor: Who performed the action.
        target: What it was performed on.
        details: Free-form payload as a tagged union.
        changes: Before/after snapshot.
        blockchain: Ledger reference.
        badge: Badge involved, for verification actions.
        error_message: Failure description.
        metadata: Request metadata.
        original_action: Raw action string when it had to be coerced.
    """

    entry_id: UUID
    action: AuditAction
    status: AuditStatus
    created_at: datetime
    actor: AuditActor | None = None
    target: AuditTarget | None = None
    details: AuditDetails | None = None
    changes: AuditChanges | None = None
    blockchain: BlockchainReference | None = None
    badge: str | None = None
    error_message: str | None = None
    metadata: AuditMetadata | None = None
    original_action: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict (enums as values, ids as str)."""
        return {
            "entry_id": str(self.entry_id),
            "action": self.action.value,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "actor": _part_to_dict(self.actor),
            "target": _part_to_dict(self.target),
            "details": _part_to_dict(self.details),
            "changes": _part_to_dict(self.changes),
            "blockchain": _part_to_dict(self.blockchain),
            "badge": self.badge,
            "error_message": self.error_message,
            "metadata": _part_to_dict(self.metadata),
            "original_action": self.original_action,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditEntry:
        """Rebuild an entry from its ``to_dict`` form."""
        actor = data.get("actor")
        target = data.get("target")
        changes = data.get("changes")
        blockchain = data.get("blockchain")
        metadata = data.get("metadata")
        return cls(
            entry_id=UUID(data["entry_id"]),
            action=AuditAction(data["action"]),
            status=AuditStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            actor=(
                AuditActor(
                    **{
                        **actor,
                        "user_id": UUID(actor["user_id"]) if actor.get("user_id") else None,
                    }
                )
                if actor
                else None
            ),
            target=(
                AuditTarget(
                    type=AuditTargetType(target["type"]) if target.get("type") else None,
                    id=UUID(target["id"]) if target.get("id") else None,
                    identifier=target.get("identifier"),
                    name=target.get("name"),
                )
                if target
                else None
            ),
            details=details_from_dict(data.get("details")),
            changes=AuditChanges(**changes) if changes else None,
            blockchain=BlockchainReference(**blockchain) if blockchain else None,
            badge=data.get("badge"),
            error_message=data.get("error_message"),
            metadata=AuditMetadata(**metadata) if metadata else None,
            original_action=data.get("original_action"),
        )


def _part_to_dict(part: Any) -> dict[str, Any] | None:
    if part is None:
        return None
    result: dict[str, Any] = {}
    for key, value in asdict(part).items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, UUID):
            value = str(value)
        result[key] = value
    return result


def details_from_dict(data: dict[str, Any] | None) -> AuditDetails | None:
    """Rebuild a details union member from its ``to_dict`` form."""
    if not data:
        return None
    kind = data.get("kind")
    if kind == "json":
        return JsonDetails(data=data["data"])
    if kind == "truncated":
        return TruncatedDetails(
            preview=data["preview"], original_length=data["original_length"]
        )
    return TextDetails(text=str(data.get("text", "")))


@dataclass
class AuditEntryInput:
    """Loosely typed audit entry as supplied by call sites.

    Every field accepts whatever the caller has at hand; actor/target may be
    the typed models or plain mappings, ids may be strings or UUIDs.
    """

    action: AuditAction | str | None = None
    status: AuditStatus | str | None = None
    actor: AuditActor | dict[str, Any] | None = None
    target: AuditTarget | dict[str, Any] | None = None
    details: Any = None
    changes: AuditChanges | dict[str, Any] | None = None
    blockchain: BlockchainReference | dict[str, Any] | None = None
    badge: str | None = None
    error_message: str | None = None
    metadata: AuditMetadata | dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
