"""Domain errors for certengine.

Fail-closed errors (encoding, Merkle aggregation) are raised to the caller.
Fail-open components convert their failures into degraded results instead.
"""

from certengine.domain.errors.encoding import EmptyBatchError, EncodingError
from certengine.domain.errors.ledger import LedgerTransportError
from certengine.domain.errors.verification import (
    CertificateNotFoundError,
    VerificationPersistenceError,
)

__all__: list[str] = [
    "CertificateNotFoundError",
    "EmptyBatchError",
    "EncodingError",
    "LedgerTransportError",
    "VerificationPersistenceError",
]
