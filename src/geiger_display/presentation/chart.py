"""In-memory model of the radiation display: two labels, a chart and its scale."""

import logging
from collections import deque
from typing import List, Tuple

from ..models import Snapshot
from .base import PresentationSink

logger = logging.getLogger(__name__)

DEFAULT_CHART_POINTS = 100
DEFAULT_RANGE_MAX = 1000


class ChartDisplaySink(PresentationSink):
    """
    Display model updated from snapshots.

    The chart scrolls one point per snapshot; the Y axis and the scale next
    to it are resized to the snapshot's range on every update.
    """

    def __init__(
        self,
        chart_points: int = DEFAULT_CHART_POINTS,
        initial_range_max: int = DEFAULT_RANGE_MAX,
    ):
        """
        Initialize the display.

        Args:
            chart_points: Number of points visible on the chart
            initial_range_max: Y axis maximum before the first snapshot
        """
        super().__init__()
        self.radiation_label = "Radiation: -- CPM"
        self.dosage_label = "Dosage: -- uSv/h"
        self._points: deque[int] = deque([0] * chart_points, maxlen=chart_points)
        self.chart_range: Tuple[int, int] = (0, initial_range_max)
        self.scale_range: Tuple[int, int] = (0, initial_range_max)
        self.render_count = 0

    def render(self, snapshot: Snapshot) -> None:
        self.radiation_label = f"Radiation: {snapshot.raw_value} CPM"
        self.dosage_label = f"Dosage: {snapshot.dosage:.2f} uSv/h"
        self._points.append(snapshot.raw_value)

        # A zero range is kept as-is
        self.chart_range = (0, snapshot.range_max)
        self.scale_range = (0, snapshot.range_max)
        self.render_count += 1

        logger.debug(
            f"Display updated: '{self.radiation_label}', '{self.dosage_label}', "
            f"range 0-{snapshot.range_max}"
        )

    @property
    def points(self) -> List[int]:
        """Chart values, oldest first."""
        with self.lock:
            return list(self._points)
