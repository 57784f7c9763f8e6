"""Base class for presentation sinks."""

import threading
from abc import ABC, abstractmethod

from ..models import Snapshot


class PresentationSink(ABC):
    """
    Receives snapshots from the aggregation engine.

    The sink owns ``lock``; callers hold it for the duration of render().
    Subclasses that touch the rendered state from other threads must take
    the same lock.
    """

    def __init__(self):
        self.lock = threading.Lock()

    @abstractmethod
    def render(self, snapshot: Snapshot) -> None:
        """
        Render a snapshot. Called with ``lock`` held.

        Args:
            snapshot: Snapshot to render
        """
