"""Presentation sinks receiving computed snapshots."""

from .base import PresentationSink
from .chart import ChartDisplaySink
from .console import ConsoleSink

__all__ = ["PresentationSink", "ConsoleSink", "ChartDisplaySink"]
