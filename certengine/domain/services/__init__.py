"""Pure domain services (no I/O)."""

from certengine.domain.services.canonical_encoder import (
    CANONICAL_FIELDS,
    canonical_fields,
    encode_certificate_content,
    timestamp_to_millis,
)
from certengine.domain.services.verification_classifier import classify

__all__: list[str] = [
    "CANONICAL_FIELDS",
    "canonical_fields",
    "classify",
    "encode_certificate_content",
    "timestamp_to_millis",
]
