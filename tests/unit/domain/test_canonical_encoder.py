"""Unit tests for the canonical certificate encoder."""

import json
from datetime import date, datetime, timedelta, timezone

import pytest

from certengine.domain.errors import EncodingError
from certengine.domain.models.certificate import CertificateContent
from certengine.domain.services.canonical_encoder import (
    CANONICAL_FIELDS,
    canonical_fields,
    encode_certificate_content,
    timestamp_to_millis,
)


class TestEncodeCertificateContent:
    """Tests for encode_certificate_content."""

    def test_exact_canonical_string(self, sample_content: CertificateContent) -> None:
        """Compact JSON, fixed key order, integer millisecond timestamp."""
        encoded = encode_certificate_content(sample_content)

        assert encoded == (
            '{"certificateId":"CERT-2024-0001",'
            '"learnerEmail":"ada@example.org",'
            '"learnerName":"Ada Lovelace",'
            '"courseName":"Analytical Engines",'
            '"completionDate":"2024-05-01",'
            '"issuerOrganization":"Example University",'
            '"timestamp":1714521600000}'
        )

    def test_key_order_matches_canonical_fields(
        self, sample_content: CertificateContent
    ) -> None:
        decoded = json.loads(encode_certificate_content(sample_content))

        assert list(decoded) == [key for key, _ in CANONICAL_FIELDS]

    def test_mapping_key_order_does_not_matter(self) -> None:
        """Referential transparency: same fields in any order encode identically."""
        forward = {
            "certificateId": "CERT-1",
            "learnerEmail": "a@example.org",
            "learnerName": "A",
            "courseName": "C",
            "completionDate": "2024-01-01",
            "issuerOrganization": "Org",
            "timestamp": 1,
        }
        backward = dict(reversed(list(forward.items())))

        assert encode_certificate_content(
            CertificateContent.from_mapping(forward)
        ) == encode_certificate_content(CertificateContent.from_mapping(backward))

    def test_nested_and_flat_mappings_encode_identically(self) -> None:
        flat = {
            "certificate_id": "CERT-1",
            "learner_email": "a@example.org",
            "learner_name": "A",
            "course_name": "C",
            "completion_date": "2024-01-01",
            "issuer_organization": "Org",
            "timestamp": 1,
        }
        nested = {
            "timestamp": 1,
            "issuer": {"organization": "Org"},
            "course": {"name": "C", "completionDate": "2024-01-01"},
            "learner": {"name": "A", "email": "a@example.org"},
            "certificateId": "CERT-1",
        }

        assert encode_certificate_content(
            CertificateContent.from_mapping(flat)
        ) == encode_certificate_content(CertificateContent.from_mapping(nested))

    def test_non_ascii_kept_literal(self, sample_content: CertificateContent) -> None:
        from dataclasses import replace

        content = replace(sample_content, learner_name="Zoë Ærøskøbing")

        assert '"learnerName":"Zoë Ærøskøbing"' in encode_certificate_content(content)

    def test_strings_not_trimmed_or_folded(
        self, sample_content: CertificateContent
    ) -> None:
        from dataclasses import replace

        content = replace(sample_content, learner_email="Ada@Example.org ")

        assert '"learnerEmail":"Ada@Example.org "' in encode_certificate_content(
            content
        )


class TestCompletionDate:
    """Tests for completion date normalisation."""

    def _encode_date(self, value: object, content: CertificateContent) -> str:
        from dataclasses import replace

        fields = canonical_fields(replace(content, completion_date=value))
        return str(fields["completionDate"])

    def test_date_object(self, sample_content: CertificateContent) -> None:
        assert self._encode_date(date(2024, 5, 1), sample_content) == "2024-05-01"

    def test_aware_datetime_is_utc_normalised(
        self, sample_content: CertificateContent
    ) -> None:
        value = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))

        assert self._encode_date(value, sample_content) == "2024-05-01T12:30:00.000Z"

    def test_naive_datetime_treated_as_utc(
        self, sample_content: CertificateContent
    ) -> None:
        value = datetime(2024, 5, 1, 12, 30)

        assert self._encode_date(value, sample_content) == "2024-05-01T12:30:00.000Z"

    def test_iso_string_kept_verbatim(self, sample_content: CertificateContent) -> None:
        value = "2024-05-01T12:30:00Z"

        assert self._encode_date(value, sample_content) == value

    def test_unparseable_string_rejected(
        self, sample_content: CertificateContent
    ) -> None:
        with pytest.raises(EncodingError) as exc_info:
            self._encode_date("first of May", sample_content)

        assert exc_info.value.invalid_field == "completion_date"

    def test_unsupported_type_rejected(self, sample_content: CertificateContent) -> None:
        with pytest.raises(EncodingError) as exc_info:
            self._encode_date(20240501, sample_content)

        assert exc_info.value.invalid_field == "completion_date"


class TestRequiredFields:
    """Tests for missing and blank field handling."""

    @pytest.mark.parametrize(
        "field",
        [
            "certificate_id",
            "learner_email",
            "learner_name",
            "course_name",
            "completion_date",
            "issuer_organization",
        ],
    )
    def test_missing_field_raises(
        self, sample_content: CertificateContent, field: str
    ) -> None:
        from dataclasses import replace

        with pytest.raises(EncodingError) as exc_info:
            encode_certificate_content(replace(sample_content, **{field: None}))

        assert exc_info.value.missing_field == field

    def test_blank_field_counts_as_missing(
        self, sample_content: CertificateContent
    ) -> None:
        from dataclasses import replace

        with pytest.raises(EncodingError) as exc_info:
            encode_certificate_content(replace(sample_content, learner_name="   "))

        assert exc_info.value.missing_field == "learner_name"

    def test_missing_timestamp_raises_without_fallback(
        self, sample_content: CertificateContent
    ) -> None:
        from dataclasses import replace

        with pytest.raises(EncodingError) as exc_info:
            encode_certificate_content(replace(sample_content, timestamp=None))

        assert exc_info.value.missing_field == "timestamp"

    def test_fallback_timestamp_used_when_missing(
        self, sample_content: CertificateContent
    ) -> None:
        from dataclasses import replace

        encoded = encode_certificate_content(
            replace(sample_content, timestamp=None), fallback_timestamp_ms=42
        )

        assert encoded.endswith('"timestamp":42}')

    def test_non_string_text_field_is_invalid(
        self, sample_content: CertificateContent
    ) -> None:
        from dataclasses import replace

        with pytest.raises(EncodingError) as exc_info:
            encode_certificate_content(replace(sample_content, course_name=101))

        assert exc_info.value.invalid_field == "course_name"


class TestTimestampToMillis:
    """Tests for timestamp_to_millis."""

    def test_int_passes_through(self) -> None:
        assert timestamp_to_millis(1714521600000) == 1714521600000

    def test_aware_datetime(self) -> None:
        value = datetime(2024, 5, 1, tzinfo=timezone.utc)

        assert timestamp_to_millis(value) == 1714521600000

    def test_millisecond_precision(self) -> None:
        value = datetime(2024, 5, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)

        assert timestamp_to_millis(value) == 1714521600123

    def test_negative_rejected(self) -> None:
        with pytest.raises(EncodingError) as exc_info:
            timestamp_to_millis(-1)

        assert exc_info.value.invalid_field == "timestamp"

    @pytest.mark.parametrize("value", [True, 1.5, "1714521600000"])
    def test_unsupported_types_rejected(self, value: object) -> None:
        with pytest.raises(EncodingError):
            timestamp_to_millis(value)  # type: ignore[arg-type]
