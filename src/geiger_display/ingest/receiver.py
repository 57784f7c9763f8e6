"""Producer-side entry point for raw payloads from the radio link."""

import logging
import threading
from typing import Optional

from ..parser import MalformedNumberError, OversizedPayloadError, parse_reading
from .queue import IngestQueue, QueueFullError

logger = logging.getLogger(__name__)


class ReadingReceiver:
    """
    Decodes inbound payloads and hands them to the ingest queue.

    on_data_recv() is called from the link's receive context (a serial
    reader thread or the MQTT network thread). It never blocks and never
    raises: rejected payloads are logged and counted, then dropped.
    """

    def __init__(self, ingest_queue: IngestQueue):
        """
        Initialize the receiver.

        Args:
            ingest_queue: Queue feeding the aggregation engine
        """
        self.queue = ingest_queue
        self._accepted = 0
        self._oversized = 0
        self._malformed = 0
        self._queue_full = 0
        self._lock = threading.Lock()

    def on_data_recv(self, payload: bytes, length: Optional[int] = None) -> bool:
        """
        Handle one inbound payload.

        Args:
            payload: Raw payload bytes
            length: Number of valid bytes (defaults to len(payload))

        Returns:
            True if the reading was queued, False if it was dropped
        """
        try:
            reading = parse_reading(payload, length)
            self.queue.try_enqueue(reading)
        except OversizedPayloadError as e:
            logger.error(f"Received data length exceeds buffer size: {e}")
            self._count("oversized")
            return False
        except MalformedNumberError as e:
            logger.error(f"Failed to convert received data to integer: {e}")
            self._count("malformed")
            return False
        except QueueFullError as e:
            logger.error(f"Failed to send data to queue: {e}")
            self._count("queue_full")
            return False

        self._count("accepted")
        logger.debug(f"Queued reading CPM={reading.value}")
        return True

    def _count(self, outcome: str) -> None:
        attr = f"_{outcome}"
        with self._lock:
            setattr(self, attr, getattr(self, attr) + 1)

    def get_stats(self) -> dict:
        """Counters for accepted and dropped payloads."""
        with self._lock:
            return {
                "accepted": self._accepted,
                "oversized": self._oversized,
                "malformed": self._malformed,
                "queue_full": self._queue_full,
            }
