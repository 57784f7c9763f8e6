"""Parser for raw reading payloads delivered by the radio link.

A payload is the textual decimal form of a CPM value, e.g. ``b"42"``,
optionally NUL-terminated.
"""

import logging
import re
from typing import Optional

from .models import Reading

logger = logging.getLogger(__name__)

# Receive buffer size; a payload must leave room for the terminator
MAX_PAYLOAD_SIZE = 32

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_NUMBER_RE = re.compile(r"[+-]?[0-9]+")


class ParseError(Exception):
    """Base exception for payloads that cannot be turned into a reading."""

    pass


class OversizedPayloadError(ParseError):
    """Raised when a payload does not fit the receive buffer."""

    pass


class MalformedNumberError(ParseError):
    """Raised when a payload is not a valid decimal integer."""

    pass


def parse_reading(raw: bytes, length: Optional[int] = None) -> Reading:
    """
    Decode a raw payload into a reading.

    Only the first ``length`` bytes are considered. A literal ``"0"`` is a
    valid zero reading; any text that does not decode to an integer is
    rejected instead of being read as zero.

    Args:
        raw: Payload bytes
        length: Number of valid bytes in ``raw`` (defaults to ``len(raw)``)

    Returns:
        Decoded Reading

    Raises:
        OversizedPayloadError: If length is at or above MAX_PAYLOAD_SIZE
        MalformedNumberError: If the payload is not a decimal integer
    """
    if length is None:
        length = len(raw)

    if length >= MAX_PAYLOAD_SIZE:
        raise OversizedPayloadError(
            f"Payload length {length} exceeds buffer size {MAX_PAYLOAD_SIZE}"
        )
    if length < 0 or length > len(raw):
        raise MalformedNumberError(
            f"Invalid payload length {length} for {len(raw)} bytes"
        )

    try:
        text = bytes(raw[:length]).decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedNumberError(f"Payload is not ASCII text: {raw[:length]!r}") from e

    # Senders may include the C string terminator
    unstripped = text.split("\x00", 1)[0]
    text = unstripped.strip()

    if not _NUMBER_RE.fullmatch(text):
        raise MalformedNumberError(f"Failed to convert {text!r} to integer")

    value = int(text)
    if value < INT32_MIN or value > INT32_MAX:
        raise MalformedNumberError(f"Value {value} out of range")

    # Zero is only valid when spelled as a leading "0"
    if value == 0 and not unstripped.startswith("0"):
        raise MalformedNumberError(f"Failed to convert {unstripped!r} to integer")

    logger.debug(f"Parsed payload {text!r} as CPM={value}")
    return Reading(value=value)
