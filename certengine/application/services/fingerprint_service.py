"""Keccak-256 fingerprint service.

Hashes the canonical encoding of certificate content with Keccak-256, the
digest used by Ethereum-compatible ledgers, so a fingerprint can be anchored
on-chain as a ``bytes32`` without conversion.

Timestamp contract:
    The timestamp is part of the hashed payload. Without an explicit
    timestamp two calls on the same content produce different fingerprints,
    so ``fingerprint()`` rejects content without one unless the caller opts
    in with ``allow_wall_clock=True`` (fresh timestamp per issuance).

Usage:
    service = FingerprintService()
    fp = service.fingerprint(content)           # Fingerprint
    fp.hex                                       # "0x..."
    service.verify_fingerprint(content, fp.hex)  # True
"""

from __future__ import annotations

import hmac
from collections.abc import Callable
from datetime import datetime, timezone

from web3 import Web3

from certengine.application.services.base import LoggingMixin
from certengine.domain.models.certificate import CertificateContent
from certengine.domain.models.fingerprint import Fingerprint
from certengine.domain.services.canonical_encoder import (
    encode_certificate_content,
    timestamp_to_millis,
)


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (Ethereum variant, not NIST SHA3-256).

    Args:
        data: Bytes to hash.

    Returns:
        32-byte digest.
    """
    return bytes(Web3.keccak(data))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FingerprintService(LoggingMixin):
    """Produces deterministic fingerprints of certificate content."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        """Initialize the fingerprint service.

        Args:
            clock: Wall-clock source, only used when allow_wall_clock is set.
        """
        self._clock = clock
        self._init_logger(component="fingerprint")

    def canonical_encoding(
        self,
        content: CertificateContent,
        allow_wall_clock: bool = False,
    ) -> str:
        """Return the canonical string that fingerprint() hashes.

        Raises:
            EncodingError: If a required field is missing or malformed.
        """
        fallback: int | None = None
        if content.timestamp is None and allow_wall_clock:
            fallback = timestamp_to_millis(self._clock())
            self._log_operation(
                "canonical_encoding",
                certificate_id=content.certificate_id,
            ).warning("fingerprint_wall_clock_timestamp", timestamp_ms=fallback)
        return encode_certificate_content(content, fallback_timestamp_ms=fallback)

    def fingerprint(
        self,
        content: CertificateContent,
        allow_wall_clock: bool = False,
    ) -> Fingerprint:
        """Fingerprint certificate content.

        Args:
            content: Semantic certificate fields.
            allow_wall_clock: Fold the current time in when the content has
                no timestamp. The result is then not reproducible.

        Returns:
            32-byte Keccak-256 fingerprint.

        Raises:
            EncodingError: If a required field (including the timestamp,
                unless allow_wall_clock is set) is missing or malformed.
        """
        encoded = self.canonical_encoding(content, allow_wall_clock=allow_wall_clock)
        return Fingerprint(keccak256(encoded.encode("utf-8")))

    def verify_fingerprint(
        self,
        content: CertificateContent,
        expected: Fingerprint | str,
    ) -> bool:
        """Check that content hashes to an expected fingerprint.

        Uses constant-time comparison. Content must carry its original
        timestamp for this to ever succeed.

        Args:
            content: Certificate content to re-fingerprint.
            expected: Previously computed fingerprint or its hex rendering.

        Returns:
            True if the recomputed fingerprint matches.

        Raises:
            EncodingError: If the content cannot be encoded or the expected
                value is not a valid fingerprint.
        """
        expected_fp = Fingerprint.coerce(expected)
        actual = self.fingerprint(content)
        return hmac.compare_digest(actual.digest, expected_fp.digest)
