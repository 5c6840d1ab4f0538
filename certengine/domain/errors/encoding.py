"""Errors raised by fingerprinting and Merkle aggregation.

Both are pure computations, so malformed input is rejected immediately
rather than recovered from.
"""

from __future__ import annotations

from certengine.domain.exceptions import CertEngineError


class EncodingError(CertEngineError):
    """Raised when certificate content cannot be canonically encoded.

    Exactly one of ``missing_field`` / ``invalid_field`` is set.

    Attributes:
        missing_field: Name of a required field that was absent or blank.
        invalid_field: Name of a field whose value could not be normalised.
        reason: Optional detail for invalid values.
    """

    def __init__(
        self,
        missing_field: str | None = None,
        invalid_field: str | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize EncodingError.

        Args:
            missing_field: The required field that was not supplied.
            invalid_field: The field whose value is malformed.
            reason: Human-readable description of what was wrong.
        """
        self.missing_field = missing_field
        self.invalid_field = invalid_field
        self.reason = reason

        if missing_field:
            message = f"Missing required certificate field: {missing_field}"
        elif invalid_field:
            message = f"Invalid value for certificate field: {invalid_field}"
        else:
            message = "Certificate content could not be encoded"
        if reason:
            message += f" ({reason})"

        super().__init__(message)


class EmptyBatchError(CertEngineError):
    """Raised when a Merkle root is requested for an empty batch.

    An empty batch has no root. Returning a zero hash would look like a
    valid anchor, so the caller gets an error instead.
    """

    def __init__(self, operation: str = "merkle_root") -> None:
        """Initialize EmptyBatchError.

        Args:
            operation: The operation that received the empty batch.
        """
        self.operation = operation
        super().__init__(f"Cannot compute {operation} of an empty batch")
