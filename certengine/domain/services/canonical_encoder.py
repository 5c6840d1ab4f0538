"""Canonical encoder for certificate content.

Turns ``CertificateContent`` into one deterministic string. The field order is
fixed here, not taken from whatever structure the caller built the content
from, so two semantically equal inputs always encode identically.

Canonical form (compact JSON, keys in this exact order):

    {"certificateId":...,"learnerEmail":...,"learnerName":...,
     "courseName":...,"completionDate":...,"issuerOrganization":...,
     "timestamp":<int ms>}

Value formatting:
- Strings are kept verbatim (no trimming, no case folding).
- Completion dates are ISO-8601: ``date.isoformat()`` for dates, UTC
  ``YYYY-MM-DDTHH:MM:SS.mmmZ`` for datetimes, verbatim for ISO strings.
- Timestamps are integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta, timezone
from typing import Any, Final

from certengine.domain.errors.encoding import EncodingError
from certengine.domain.models.certificate import CertificateContent

_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)

# (canonical key, CertificateContent attribute) in encoding order
CANONICAL_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("certificateId", "certificate_id"),
    ("learnerEmail", "learner_email"),
    ("learnerName", "learner_name"),
    ("courseName", "course_name"),
    ("completionDate", "completion_date"),
    ("issuerOrganization", "issuer_organization"),
    ("timestamp", "timestamp"),
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _encode_text(attribute: str, value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise EncodingError(missing_field=attribute)
    if not isinstance(value, str):
        raise EncodingError(
            invalid_field=attribute,
            reason=f"expected str, got {type(value).__name__}",
        )
    return value


def _encode_date(value: Any) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise EncodingError(missing_field="completion_date")
    if isinstance(value, datetime):
        return _as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise EncodingError(invalid_field="completion_date", reason=str(exc)) from exc
        return value
    raise EncodingError(
        invalid_field="completion_date",
        reason=f"expected ISO-8601 value, got {type(value).__name__}",
    )


def timestamp_to_millis(value: int | datetime) -> int:
    """Normalise a timestamp to integer milliseconds since the epoch.

    Args:
        value: Milliseconds as int, or a datetime (naive means UTC).

    Returns:
        Milliseconds since the Unix epoch.

    Raises:
        EncodingError: If the value is negative or of an unsupported type.
    """
    if isinstance(value, datetime):
        return (_as_utc(value) - _EPOCH) // timedelta(milliseconds=1)
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(
            invalid_field="timestamp",
            reason=f"expected int milliseconds or datetime, got {type(value).__name__}",
        )
    if value < 0:
        raise EncodingError(invalid_field="timestamp", reason="must not be negative")
    return value


def canonical_fields(
    content: CertificateContent,
    fallback_timestamp_ms: int | None = None,
) -> dict[str, str | int]:
    """Return the normalised fields in canonical order.

    Args:
        content: Certificate content to normalise.
        fallback_timestamp_ms: Used only when ``content.timestamp`` is None.

    Returns:
        Insertion-ordered dict keyed by canonical field names.

    Raises:
        EncodingError: If a required field is missing or malformed.
    """
    fields: dict[str, str | int] = {}
    for key, attribute in CANONICAL_FIELDS:
        value = getattr(content, attribute)
        if attribute == "completion_date":
            fields[key] = _encode_date(value)
        elif attribute == "timestamp":
            if value is None:
                if fallback_timestamp_ms is None:
                    raise EncodingError(missing_field="timestamp")
                value = fallback_timestamp_ms
            fields[key] = timestamp_to_millis(value)
        else:
            fields[key] = _encode_text(attribute, value)
    return fields


def encode_certificate_content(
    content: CertificateContent,
    fallback_timestamp_ms: int | None = None,
) -> str:
    """Encode certificate content as its canonical string.

    Args:
        content: Certificate content to encode.
        fallback_timestamp_ms: Timestamp to fold in when the content has
            none. Leave as None to require an explicit timestamp.

    Returns:
        Compact JSON string with fields in canonical order.

    Raises:
        EncodingError: If a required field is missing or malformed.
    """
    fields = canonical_fields(content, fallback_timestamp_ms)
    return json.dumps(fields, separators=(",", ":"), ensure_ascii=False)
