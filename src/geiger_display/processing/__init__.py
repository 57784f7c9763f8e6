"""Processing layer for radiation readings (windowing, aggregation)."""

from .engine import AggregateState, AggregationEngine, range_with_headroom
from .window import SlidingWindow

__all__ = ["AggregateState", "AggregationEngine", "SlidingWindow", "range_with_headroom"]
