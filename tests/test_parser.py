"""Unit tests for the reading parser."""

import pytest

from geiger_display.models import Reading
from geiger_display.parser import (
    MAX_PAYLOAD_SIZE,
    MalformedNumberError,
    OversizedPayloadError,
    ParseError,
    parse_reading,
)


class TestParseReading:
    """Tests for parse_reading."""

    @pytest.mark.parametrize("value", [1, 7, 42, 100, 12345, 9999999])
    def test_parses_decimal_text(self, value):
        """Test that the textual form of a non-negative integer parses back."""
        payload = str(value).encode()
        assert parse_reading(payload, len(payload)) == Reading(value=value)

    def test_literal_zero(self):
        """Test that "0" is a valid zero reading."""
        assert parse_reading(b"0", 1) == Reading(value=0)

    def test_length_defaults_to_payload_size(self):
        """Test parsing without an explicit length."""
        assert parse_reading(b"314").value == 314

    def test_only_length_bytes_are_used(self):
        """Test that bytes beyond length are ignored."""
        assert parse_reading(b"12garbage", 2).value == 12

    def test_nul_terminator_is_ignored(self):
        """Test that a trailing C string terminator is stripped."""
        assert parse_reading(b"25\x00", 3).value == 25

    def test_surrounding_whitespace_is_ignored(self):
        """Test that whitespace around the number is stripped."""
        assert parse_reading(b" 25\r\n").value == 25

    def test_zero_with_leading_zeros(self):
        """Test that zero spelled with a leading "0" is accepted."""
        assert parse_reading(b"00").value == 0
        assert parse_reading(b"0\r\n").value == 0

    def test_negative_value(self):
        """Test that signed text is accepted."""
        assert parse_reading(b"-3").value == -3

    @pytest.mark.parametrize(
        "payload",
        [
            b"abc", b"", b"   ", b"12abc", b"1.5", b"1_000", b"--1", b"\x00", b"0x10",
            b"-0", b"+0", b" 0",
        ],
    )
    def test_malformed_payloads(self, payload):
        """Test that non-integer text raises MalformedNumberError."""
        with pytest.raises(MalformedNumberError):
            parse_reading(payload, len(payload))

    def test_non_ascii_payload(self):
        """Test that non-ASCII bytes raise MalformedNumberError."""
        with pytest.raises(MalformedNumberError, match="not ASCII"):
            parse_reading(b"\xff\xfe")

    def test_out_of_range_value(self):
        """Test that values beyond 32 bits are rejected."""
        with pytest.raises(MalformedNumberError, match="out of range"):
            parse_reading(b"99999999999")

    def test_oversized_payload(self):
        """Test that a payload of MAX_PAYLOAD_SIZE bytes is rejected."""
        payload = b"1" * MAX_PAYLOAD_SIZE
        with pytest.raises(OversizedPayloadError):
            parse_reading(payload, len(payload))

    def test_largest_accepted_length(self):
        """Test that a payload one byte below the limit is still parsed."""
        payload = b"0" * (MAX_PAYLOAD_SIZE - 2) + b"7"
        assert parse_reading(payload, len(payload)).value == 7

    def test_oversized_length_is_checked_first(self):
        """Test that an oversized length is rejected even for short payloads."""
        with pytest.raises(OversizedPayloadError):
            parse_reading(b"12", 40)

    def test_length_beyond_payload(self):
        """Test that a length larger than the payload is rejected."""
        with pytest.raises(MalformedNumberError, match="Invalid payload length"):
            parse_reading(b"12", 5)

    def test_negative_length(self):
        """Test that a negative length is rejected."""
        with pytest.raises(MalformedNumberError):
            parse_reading(b"12", -1)

    def test_errors_share_base_class(self):
        """Test that both error kinds are ParseError."""
        assert issubclass(OversizedPayloadError, ParseError)
        assert issubclass(MalformedNumberError, ParseError)
