"""Geiger Display.

Aggregates radiation readings received over a radio link into a moving
average, a dose rate and a display range, and hands the result to a
presentation sink after every reading.
"""

__version__ = "0.1.0"

from .config import Config, ConfigError
from .ingest import IngestQueue, QueueFullError, ReadingReceiver
from .models import Reading, Snapshot
from .parser import MalformedNumberError, OversizedPayloadError, ParseError, parse_reading
from .processing import AggregateState, AggregationEngine, SlidingWindow

__all__ = [
    "Reading",
    "Snapshot",
    "parse_reading",
    "ParseError",
    "OversizedPayloadError",
    "MalformedNumberError",
    "IngestQueue",
    "QueueFullError",
    "ReadingReceiver",
    "SlidingWindow",
    "AggregateState",
    "AggregationEngine",
    "Config",
    "ConfigError",
]
