"""Fixed-capacity circular buffer for the moving average."""

from typing import List


class SlidingWindow:
    """
    Circular buffer holding the most recent ``capacity`` values.

    Once full, each insert overwrites the oldest value.
    """

    def __init__(self, capacity: int = 60):
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.buffer: List[int] = [0] * capacity
        self.write_index = 0
        self.filled_count = 0

    def insert(self, value: int) -> None:
        """Store a value, overwriting the oldest one when full."""
        self.buffer[self.write_index] = value
        self.write_index = (self.write_index + 1) % self.capacity
        if self.filled_count < self.capacity:
            self.filled_count += 1

    def total(self) -> int:
        """Sum of the stored values."""
        return sum(self.buffer[: self.filled_count])

    def mean(self) -> float:
        """
        Arithmetic mean of the stored values.

        Raises:
            ValueError: If the window is empty
        """
        if self.filled_count == 0:
            raise ValueError("Cannot average an empty window")
        return self.total() / self.filled_count

    def values(self) -> List[int]:
        """Stored values, oldest first."""
        if self.filled_count < self.capacity:
            return self.buffer[: self.filled_count]
        return self.buffer[self.write_index :] + self.buffer[: self.write_index]

    @property
    def is_full(self) -> bool:
        return self.filled_count == self.capacity

    def __len__(self) -> int:
        return self.filled_count

    def __str__(self) -> str:
        return f"SlidingWindow(capacity={self.capacity}, filled={self.filled_count})"
