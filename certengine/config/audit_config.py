"""Audit ingestion configuration.

Environment Variables:
- AUDIT_DETAILS_MAX_CHARS: Serialized details size before truncation (default: 10000)
- AUDIT_DETAILS_PREVIEW_CHARS: Preview length kept for truncated details (default: 1000)
- AUDIT_WRITE_TIMEOUT: Seconds to wait for the audit sink (default: 5.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from certengine.config._env import get_float_env, get_int_env


@dataclass(frozen=True)
class AuditConfig:
    """Configuration for the fail-open audit recorder.

    Attributes:
        details_max_chars: Serialized details longer than this are truncated.
        details_preview_chars: Characters kept in a truncated preview.
        write_timeout_seconds: Sink write timeout; a timed-out entry is dropped.
    """

    details_max_chars: int = 10_000
    details_preview_chars: int = 1_000
    write_timeout_seconds: float = 5.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.details_max_chars < 1:
            raise ValueError(
                f"details_max_chars must be positive, got {self.details_max_chars}"
            )
        if not 0 < self.details_preview_chars <= self.details_max_chars:
            raise ValueError(
                f"details_preview_chars ({self.details_preview_chars}) must be "
                f"between 1 and details_max_chars ({self.details_max_chars})"
            )
        if self.write_timeout_seconds <= 0:
            raise ValueError(
                f"write_timeout_seconds must be positive, got {self.write_timeout_seconds}"
            )

    @classmethod
    def from_environment(cls) -> AuditConfig:
        """Create config from environment variables with defaults."""
        return cls(
            details_max_chars=get_int_env("AUDIT_DETAILS_MAX_CHARS", 10_000),
            details_preview_chars=get_int_env("AUDIT_DETAILS_PREVIEW_CHARS", 1_000),
            write_timeout_seconds=get_float_env("AUDIT_WRITE_TIMEOUT", 5.0),
        )


DEFAULT_AUDIT_CONFIG = AuditConfig()
