"""Unit tests for AggregationEngine."""

import random
import threading
import time

import pytest

from geiger_display.ingest import IngestQueue, ReadingReceiver
from geiger_display.models import Reading
from geiger_display.presentation.base import PresentationSink
from geiger_display.processing.engine import AggregationEngine, range_with_headroom


def make_engine(sink, **kwargs):
    kwargs.setdefault("yield_seconds", 0)
    return AggregationEngine(IngestQueue(), sink, **kwargs)


class FailingSink(PresentationSink):
    """Sink whose render always raises."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def render(self, snapshot):
        self.calls += 1
        raise RuntimeError("display unavailable")


class TestRangeWithHeadroom:
    """Tests for range_with_headroom."""

    @pytest.mark.parametrize(
        "max_value, expected",
        [(0, 0), (5, 5), (9, 9), (10, 11), (19, 20), (200, 220), (1000, 1100), (1234, 1357)],
    )
    def test_truncating_headroom(self, max_value, expected):
        """Test max + max // 10 for non-negative maxima."""
        assert range_with_headroom(max_value) == expected

    def test_never_below_max(self):
        """Test that the range is at least the maximum."""
        for max_value in range(0, 5000, 7):
            assert range_with_headroom(max_value) >= max_value

    def test_negative_max_truncates_toward_zero(self):
        """Test that negative maxima use truncating division."""
        assert range_with_headroom(-15) == -16
        assert range_with_headroom(-5) == -5


class TestAggregationEngine:
    """Tests for AggregationEngine."""

    def test_initialization(self, recording_sink):
        """Test engine initialization with default values."""
        engine = make_engine(recording_sink)
        assert engine.conversion_factor == 0.0057
        assert engine.state.window.capacity == 60
        assert engine.state.running_min is None
        assert engine.state.running_max is None
        assert engine.state.last_display_range_max == 0
        assert engine.state.processed_count == 0

    def test_concrete_scenario(self, recording_sink):
        """Test readings 100, 200, 50."""
        engine = make_engine(recording_sink)
        for value in (100, 200, 50):
            snapshot = engine.process(Reading(value=value))

        assert engine.state.running_min == 50
        assert engine.state.running_max == 200
        assert snapshot.raw_value == 50
        assert snapshot.average == pytest.approx(116.6666667)
        assert snapshot.dosage == pytest.approx(0.665, abs=1e-6)
        assert snapshot.range_max == 220
        assert engine.state.last_display_range_max == 220

    def test_each_reading_is_published(self, recording_sink):
        """Test that the sink receives one snapshot per reading."""
        engine = make_engine(recording_sink)
        for value in (5, 6, 7):
            engine.process(Reading(value=value))

        assert [s.raw_value for s in recording_sink.snapshots] == [5, 6, 7]
        assert [s.sample_count for s in recording_sink.snapshots] == [1, 2, 3]

    def test_render_holds_sink_lock(self, recording_sink):
        """Test that render runs inside the sink's lock and releases it."""
        engine = make_engine(recording_sink)
        engine.process(Reading(value=1))

        assert recording_sink.lock_held_during_render == [True]
        assert not recording_sink.lock.locked()

    def test_average_over_first_sixty(self, recording_sink):
        """Test that the average covers all readings until the window fills."""
        engine = make_engine(recording_sink)
        rng = random.Random(1)
        values = [rng.randint(0, 500) for _ in range(60)]

        for k, value in enumerate(values, start=1):
            snapshot = engine.process(Reading(value=value))
            assert snapshot.average == pytest.approx(sum(values[:k]) / k)

    def test_average_over_last_sixty(self, recording_sink):
        """Test that the average covers only the most recent 60 readings."""
        engine = make_engine(recording_sink)
        rng = random.Random(2)
        values = [rng.randint(0, 500) for _ in range(150)]

        for k, value in enumerate(values, start=1):
            snapshot = engine.process(Reading(value=value))
            recent = values[max(0, k - 60) : k]
            assert snapshot.average == pytest.approx(sum(recent) / len(recent))

        assert snapshot.sample_count == 60

    def test_extrema_are_all_time(self, recording_sink):
        """Test that extrema survive window overwrites and are monotone."""
        engine = make_engine(recording_sink, window_size=3)
        rng = random.Random(3)
        previous_min, previous_max = None, None

        engine.process(Reading(value=1000))
        engine.process(Reading(value=1))
        for _ in range(50):
            engine.process(Reading(value=rng.randint(100, 200)))
            state = engine.state
            if previous_min is not None:
                assert state.running_min <= previous_min
                assert state.running_max >= previous_max
            previous_min, previous_max = state.running_min, state.running_max

        assert engine.state.running_min == 1
        assert engine.state.running_max == 1000
        assert 1000 not in engine.state.window.values()

    def test_range_recomputed_every_reading(self, recording_sink):
        """Test that every snapshot carries the range for the current maximum."""
        engine = make_engine(recording_sink)
        for value in (300, 10, 20):
            engine.process(Reading(value=value))

        assert [s.range_max for s in recording_sink.snapshots] == [330, 330, 330]

    def test_zero_range_passed_through(self, recording_sink):
        """Test that an all-zero stream yields a zero range."""
        engine = make_engine(recording_sink)
        snapshot = engine.process(Reading(value=0))

        assert snapshot.range_max == 0
        assert snapshot.average == 0.0
        assert snapshot.dosage == 0.0

    def test_negative_readings(self, recording_sink):
        """Test that the engine handles negative values."""
        engine = make_engine(recording_sink)
        snapshot = engine.process(Reading(value=-20))

        assert engine.state.running_min == -20
        assert engine.state.running_max == -20
        assert snapshot.range_max == -22

    def test_custom_conversion_factor(self, recording_sink):
        """Test dosage with a custom conversion factor."""
        engine = make_engine(recording_sink, conversion_factor=0.01)
        snapshot = engine.process(Reading(value=100))
        assert snapshot.dosage == pytest.approx(1.0)

    def test_failed_render_does_not_stop_processing(self):
        """Test that sink errors are counted and state keeps updating."""
        sink = FailingSink()
        engine = make_engine(sink)

        engine.process(Reading(value=10))
        snapshot = engine.process(Reading(value=30))

        assert sink.calls == 2
        assert engine.publish_failures == 2
        assert engine.state.running_max == 30
        assert engine.state.window.values() == [10, 30]
        assert snapshot.average == 20.0
        assert not sink.lock.locked()

    def test_run_consumes_queue_until_stopped(self, recording_sink):
        """Test the consumer loop with a stop event."""
        ingest_queue = IngestQueue()
        engine = AggregationEngine(ingest_queue, recording_sink, yield_seconds=0)
        stop_event = threading.Event()

        consumer = threading.Thread(target=engine.run, args=(stop_event,))
        consumer.start()

        for value in (100, 200, 50):
            ingest_queue.try_enqueue(Reading(value=value))

        for _ in range(200):
            if engine.state.processed_count == 3:
                break
            time.sleep(0.01)

        stop_event.set()
        consumer.join(timeout=5.0)

        assert not consumer.is_alive()
        assert [s.raw_value for s in recording_sink.snapshots] == [100, 200, 50]
        assert recording_sink.snapshots[-1].range_max == 220

    def test_second_consumer_is_rejected(self, recording_sink):
        """Test that only one thread may run the engine."""
        engine = make_engine(recording_sink)
        stop_event = threading.Event()

        consumer = threading.Thread(target=engine.run, args=(stop_event,))
        consumer.start()
        try:
            for _ in range(200):
                if engine._running:
                    break
                time.sleep(0.01)
            with pytest.raises(RuntimeError, match="already running"):
                engine.run(stop_event)
        finally:
            stop_event.set()
            consumer.join(timeout=5.0)

    def test_malformed_payloads_leave_state_unchanged(self, recording_sink):
        """Test that only valid payloads reach the aggregate state."""
        ingest_queue = IngestQueue()
        receiver = ReadingReceiver(ingest_queue)
        engine = AggregationEngine(ingest_queue, recording_sink, yield_seconds=0)

        payloads = [b"100", b"abc", b"200", b"9" * 40, b"", b"50", b"1.5"]
        for payload in payloads:
            receiver.on_data_recv(payload, len(payload))

        while True:
            reading = ingest_queue.dequeue(timeout=0.01)
            if reading is None:
                break
            engine.process(reading)

        assert engine.state.running_min == 50
        assert engine.state.running_max == 200
        assert engine.state.window.values() == [100, 200, 50]
        assert len(recording_sink.snapshots) == 3
        assert recording_sink.snapshots[-1].average == pytest.approx(350 / 3)

    def test_string_representation(self, recording_sink):
        """Test string representation."""
        engine = make_engine(recording_sink, window_size=30)
        assert str(engine) == "AggregationEngine(window=30, processed=0)"
