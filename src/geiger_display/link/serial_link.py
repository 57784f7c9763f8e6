"""Serial link to a radio receiver dongle.

The dongle forwards every radio payload as one newline-terminated line of
ASCII text, e.g. ``b"42\\n"``.
"""

import logging
import threading
import time
from typing import Optional

import serial

from ..ingest.receiver import ReadingReceiver
from ..models import LinkConfig


logger = logging.getLogger(__name__)

# Longest line accepted from the dongle; longer lines are discarded up to
# the next newline.
MAX_LINE_BYTES = 256


class LinkError(Exception):
    """Base exception for inbound link errors."""

    pass


class LinkConnectionError(LinkError):
    """Raised when connection to the link fails."""

    pass


class LinkReadError(LinkError):
    """Raised when reading from the link fails."""

    pass


class SerialLink:
    """Reads payload lines from a serial port and hands them to a receiver."""

    def __init__(self, config: LinkConfig, receiver: ReadingReceiver):
        """
        Initialize the serial link.

        Args:
            config: Link configuration including port, baudrate, and timeout
            receiver: Receiver for decoded payloads
        """
        self.config = config
        self.receiver = receiver
        self.serial: Optional[serial.Serial] = None
        self.lines_read = 0
        self.lines_discarded = 0
        self._partial = bytearray()
        self._discarding = False

    def connect(self) -> None:
        """
        Open the serial port.

        Raises:
            LinkConnectionError: If the port cannot be opened
        """
        try:
            logger.info(
                f"Opening serial link on {self.config.port} at {self.config.baudrate} baud"
            )
            self.serial = serial.Serial(
                port=self.config.port,
                baudrate=self.config.baudrate,
                timeout=self.config.timeout,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                rtscts=False,
                dsrdtr=False,
                xonxoff=False,
            )

            # Drop anything buffered before we started listening
            self.serial.reset_input_buffer()

            logger.info("Serial link open")

        except serial.SerialException as e:
            raise LinkConnectionError(f"Failed to open serial link: {e}") from e

    def disconnect(self) -> None:
        """Close the serial port."""
        if self.serial and self.serial.is_open:
            logger.info("Closing serial link")
            self.serial.close()
        self.serial = None
        self._partial.clear()
        self._discarding = False

    def is_connected(self) -> bool:
        """Check if the port is open."""
        return self.serial is not None and self.serial.is_open

    def read_payload(self) -> Optional[bytes]:
        """
        Read one payload line.

        A line cut short by the read timeout is kept and completed by later
        reads. A line longer than MAX_LINE_BYTES is dropped along with
        everything up to its newline.

        Returns:
            Line without its terminator, or None if no complete line is
            available yet

        Raises:
            LinkConnectionError: If the link is not open
            LinkReadError: If reading fails
        """
        if not self.is_connected():
            raise LinkConnectionError("Serial link is not open")

        try:
            chunk = self.serial.readline(MAX_LINE_BYTES)
        except serial.SerialException as e:
            raise LinkReadError(f"Failed to read from serial link: {e}") from e

        if not chunk:
            return None

        if not chunk.endswith(b"\n"):
            if self._discarding:
                return None
            self._partial += chunk
            if len(self._partial) >= MAX_LINE_BYTES:
                logger.error(
                    f"Line longer than {MAX_LINE_BYTES} bytes, discarding until newline"
                )
                self._partial.clear()
                self._discarding = True
                self.lines_discarded += 1
            return None

        if self._discarding:
            self._discarding = False
            return None

        line = bytes(self._partial + chunk)
        self._partial.clear()
        if len(line) > MAX_LINE_BYTES:
            logger.error(f"Discarding {len(line)} byte line")
            self.lines_discarded += 1
            return None

        self.lines_read += 1
        payload = line.rstrip(b"\r\n")
        logger.debug(f"Received line: {payload!r}")
        return payload

    def poll(self) -> bool:
        """
        Read one payload and deliver it to the receiver.

        Returns:
            True if a payload was delivered, False on timeout or empty line
        """
        payload = self.read_payload()
        if not payload:
            return False
        self.receiver.on_data_recv(payload, len(payload))
        return True

    def run(self, stop_event: threading.Event) -> None:
        """
        Deliver payloads until the stop event is set.

        Read errors are logged and the link keeps listening.

        Args:
            stop_event: Event that ends the loop once set
        """
        logger.info("Serial link listening for readings")
        while not stop_event.is_set():
            try:
                self.poll()
            except LinkReadError as e:
                logger.error(f"Error reading from serial link: {e}")
                time.sleep(1.0)

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
        return False
