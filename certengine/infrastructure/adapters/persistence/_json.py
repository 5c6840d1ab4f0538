"""JSONB helpers: asyncpg has no JSON codec by default under text() SQL."""

from __future__ import annotations

import json
from typing import Any


def to_jsonb(value: Any) -> str | None:
    """Serialize a value for a ``CAST(:param AS JSONB)`` parameter."""
    if value is None:
        return None
    return json.dumps(value, default=str)


def from_jsonb(value: Any) -> Any:
    """Decode a JSONB column value returned as text."""
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value
