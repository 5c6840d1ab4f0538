"""Fingerprint value object.

A fingerprint is the 32-byte Keccak-256 digest of a certificate's canonical
encoding. It is rendered as a ``0x``-prefixed lowercase hex string, which is
the form stored on certificates and sent to the ledger.

Usage:
    fp = Fingerprint.from_hex("0x" + "ab" * 32)
    assert fp.hex == "0x" + "ab" * 32
    assert len(fp.digest) == 32
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from certengine.domain.errors.encoding import EncodingError

FINGERPRINT_SIZE: Final[int] = 32


@dataclass(frozen=True, eq=True)
class Fingerprint:
    """32-byte certificate digest.

    Attributes:
        digest: Raw digest bytes (exactly 32).
    """

    digest: bytes

    def __post_init__(self) -> None:
        """Validate digest length.

        Raises:
            EncodingError: If the digest is not exactly 32 bytes.
        """
        if len(self.digest) != FINGERPRINT_SIZE:
            raise EncodingError(
                invalid_field="fingerprint",
                reason=f"expected {FINGERPRINT_SIZE} bytes, got {len(self.digest)}",
            )

    @classmethod
    def from_hex(cls, value: str) -> Fingerprint:
        """Parse a hex rendering, with or without ``0x`` prefix.

        Args:
            value: 64 hex characters, optionally prefixed with ``0x``.

        Returns:
            The parsed Fingerprint.

        Raises:
            EncodingError: If the value is not valid 32-byte hex.
        """
        if not isinstance(value, str):
            raise EncodingError(
                invalid_field="fingerprint",
                reason=f"expected hex string, got {type(value).__name__}",
            )
        text = value.strip()
        if text[:2].lower() == "0x":
            text = text[2:]
        try:
            digest = bytes.fromhex(text)
        except ValueError as exc:
            raise EncodingError(invalid_field="fingerprint", reason=str(exc)) from exc
        return cls(digest)

    @classmethod
    def coerce(cls, value: Fingerprint | str | bytes) -> Fingerprint:
        """Accept a Fingerprint, its hex rendering or its raw bytes."""
        if isinstance(value, Fingerprint):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(bytes(value))
        return cls.from_hex(value)

    @property
    def hex(self) -> str:
        """``0x``-prefixed lowercase hex rendering."""
        return "0x" + self.digest.hex()

    def __str__(self) -> str:
        return self.hex
