"""Aggregation engine: the single consumer of the ingest queue.

For every reading the engine updates all-time extrema, the sliding window
average, the dose rate and the display range, then hands an immutable
Snapshot to the presentation sink.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Optional

from ..ingest.queue import IngestQueue
from ..models import Reading, Snapshot
from ..presentation.base import PresentationSink
from .window import SlidingWindow

logger = logging.getLogger(__name__)

# CPM to µSv/h
DEFAULT_CONVERSION_FACTOR = 0.0057

# One slot per expected sampling tick
DEFAULT_WINDOW_SIZE = 60

# Display range is sized to max + max/10
HEADROOM_DIVISOR = 10

# Bounded dequeue wait while a stop event is being watched
STOP_POLL_SECONDS = 0.5


def range_with_headroom(max_value: int) -> int:
    """
    Display range maximum with 10% headroom above ``max_value``.

    The headroom is truncated toward zero, matching integer division on the
    display firmware.
    """
    headroom = abs(max_value) // HEADROOM_DIVISOR
    if max_value < 0:
        headroom = -headroom
    return max_value + headroom


@dataclass
class AggregateState:
    """Mutable statistics owned by the aggregation engine."""

    window: SlidingWindow
    running_min: Optional[int] = None  # None until the first reading
    running_max: Optional[int] = None
    last_display_range_max: int = 0
    processed_count: int = field(default=0)


class AggregationEngine:
    """
    Consumes readings from the ingest queue and publishes snapshots.

    Exactly one thread may run the engine; the aggregate state is not
    synchronized beyond the queue.
    """

    def __init__(
        self,
        ingest_queue: IngestQueue,
        sink: PresentationSink,
        window_size: int = DEFAULT_WINDOW_SIZE,
        conversion_factor: float = DEFAULT_CONVERSION_FACTOR,
        yield_seconds: float = 0.01,
    ):
        """
        Initialize the engine.

        Args:
            ingest_queue: Queue to consume readings from
            sink: Presentation sink receiving a snapshot per reading
            window_size: Number of readings in the moving average
            conversion_factor: CPM to µSv/h conversion factor
            yield_seconds: Pause after each publish
        """
        self.queue = ingest_queue
        self.sink = sink
        self.conversion_factor = conversion_factor
        self.yield_seconds = yield_seconds
        self.state = AggregateState(window=SlidingWindow(window_size))
        self.publish_failures = 0
        self._running = False
        self._running_lock = threading.Lock()

        logger.info(
            f"Aggregation engine initialized "
            f"(window={window_size}, factor={conversion_factor})"
        )

    def process(self, reading: Reading) -> Snapshot:
        """
        Fold one reading into the aggregate state and publish the result.

        Args:
            reading: Reading to process

        Returns:
            The snapshot handed to the sink
        """
        state = self.state
        value = reading.value

        if state.running_min is None or value < state.running_min:
            state.running_min = value
        if state.running_max is None or value > state.running_max:
            state.running_max = value

        state.window.insert(value)

        average = state.window.total() / state.window.filled_count
        dosage = average * self.conversion_factor

        # Recomputed on every reading, not only when the maximum changes
        state.last_display_range_max = range_with_headroom(state.running_max)
        state.processed_count += 1

        snapshot = Snapshot(
            raw_value=value,
            average=average,
            dosage=dosage,
            range_max=state.last_display_range_max,
            running_min=state.running_min,
            running_max=state.running_max,
            sample_count=state.window.filled_count,
        )

        logger.debug(
            f"Processed CPM={value}: avg={average:.1f}, µSv/h={dosage:.4f}, "
            f"range_max={snapshot.range_max}"
        )

        if state.processed_count % 60 == 0:
            logger.info(
                f"[{state.processed_count:5d}] CPM: {value:4d} | "
                f"µSv/h: {dosage:.4f} | "
                f"min/max: {state.running_min}/{state.running_max} | "
                f"dropped: {self.queue.get_stats()['dropped']}"
            )

        self._publish(snapshot)
        return snapshot

    def _publish(self, snapshot: Snapshot) -> None:
        """Render a snapshot while holding the sink's lock."""
        try:
            with self.sink.lock:
                self.sink.render(snapshot)
        except Exception as e:
            self.publish_failures += 1
            logger.error(f"Failed to render snapshot: {e}", exc_info=True)

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """
        Consumer loop: dequeue, process, yield.

        Without a stop event the loop never returns.

        Args:
            stop_event: Optional event that ends the loop once set

        Raises:
            RuntimeError: If the engine is already running in another thread
        """
        with self._running_lock:
            if self._running:
                raise RuntimeError("Aggregation engine is already running")
            self._running = True

        timeout = None if stop_event is None else STOP_POLL_SECONDS
        logger.info("Aggregation engine started")

        try:
            while stop_event is None or not stop_event.is_set():
                reading = self.queue.dequeue(timeout=timeout)
                if reading is None:
                    continue

                self.process(reading)

                if self.yield_seconds > 0:
                    time.sleep(self.yield_seconds)
        finally:
            with self._running_lock:
                self._running = False
            logger.info(
                f"Aggregation engine stopped after {self.state.processed_count} readings"
            )

    def __str__(self) -> str:
        """String representation of engine state."""
        return (
            f"AggregationEngine(window={self.state.window.capacity}, "
            f"processed={self.state.processed_count})"
        )
