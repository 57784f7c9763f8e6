"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add the src directory to sys.path so that 'geiger_display' can be imported
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from geiger_display.models import Snapshot  # noqa: E402
from geiger_display.presentation.base import PresentationSink  # noqa: E402


class RecordingSink(PresentationSink):
    """Sink that keeps every rendered snapshot."""

    def __init__(self):
        super().__init__()
        self.snapshots = []
        self.lock_held_during_render = []

    def render(self, snapshot: Snapshot) -> None:
        self.lock_held_during_render.append(self.lock.locked())
        self.snapshots.append(snapshot)


@pytest.fixture
def recording_sink():
    """A sink recording every snapshot it receives."""
    return RecordingSink()
