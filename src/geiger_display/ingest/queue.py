"""Bounded FIFO hand-off between reading producers and the aggregation engine."""

import logging
import queue
import threading
from typing import Optional

from ..models import Reading

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10


class IngestError(Exception):
    """Base exception for ingest failures."""

    pass


class QueueFullError(IngestError):
    """Raised when a reading cannot be queued because the queue is full."""

    pass


class IngestQueue:
    """
    Fixed-capacity, thread-safe FIFO of readings.

    Producers call try_enqueue() from callback context and never block;
    when the queue is full the reading is dropped. A single consumer calls
    dequeue(), which blocks until a reading is available.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """
        Initialize the queue.

        Args:
            capacity: Maximum number of pending readings
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")

        self._queue: "queue.Queue[Reading]" = queue.Queue(maxsize=capacity)

        # Metrics
        self._enqueued = 0
        self._dequeued = 0
        self._dropped = 0
        self._lock = threading.Lock()

        logger.info(f"Ingest queue initialized (capacity={capacity})")

    @property
    def capacity(self) -> int:
        """Maximum number of pending readings."""
        return self._queue.maxsize

    @property
    def size(self) -> int:
        """Approximate number of pending readings."""
        return self._queue.qsize()

    def try_enqueue(self, reading: Reading) -> None:
        """
        Queue a reading without blocking.

        Args:
            reading: Reading to hand off

        Raises:
            QueueFullError: If the queue is at capacity (the reading is dropped)
        """
        try:
            self._queue.put_nowait(reading)
        except queue.Full:
            with self._lock:
                self._dropped += 1
            raise QueueFullError(
                f"Ingest queue full ({self.capacity} pending), dropped CPM={reading.value}"
            ) from None

        with self._lock:
            self._enqueued += 1

    def dequeue(self, timeout: Optional[float] = None) -> Optional[Reading]:
        """
        Take the oldest pending reading.

        Args:
            timeout: Seconds to wait (None = block indefinitely)

        Returns:
            Reading, or None if the timeout expired first
        """
        try:
            reading = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        with self._lock:
            self._dequeued += 1
        return reading

    def get_stats(self) -> dict:
        """Counters for queued, consumed and dropped readings."""
        with self._lock:
            return {
                "enqueued": self._enqueued,
                "dequeued": self._dequeued,
                "dropped": self._dropped,
                "current_size": self._queue.qsize(),
                "capacity": self._queue.maxsize,
            }

    def __str__(self) -> str:
        """String representation of queue state."""
        return f"IngestQueue(capacity={self.capacity}, size={self.size})"
