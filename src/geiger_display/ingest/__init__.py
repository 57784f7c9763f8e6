"""Ingest layer: hand-off of decoded readings from producers to the engine."""

from .queue import IngestError, IngestQueue, QueueFullError
from .receiver import ReadingReceiver

__all__ = ["IngestQueue", "IngestError", "QueueFullError", "ReadingReceiver"]
