"""Console sink that logs every snapshot."""

import logging

from ..models import Snapshot
from .base import PresentationSink

logger = logging.getLogger(__name__)


class ConsoleSink(PresentationSink):
    """Logs the radiation and dosage labels for each snapshot."""

    def render(self, snapshot: Snapshot) -> None:
        logger.info(
            f"Radiation: {snapshot.raw_value} CPM | "
            f"Dosage: {snapshot.dosage:.2f} uSv/h | "
            f"Avg: {snapshot.average:.1f} CPM | "
            f"Range: 0-{snapshot.range_max}"
        )
