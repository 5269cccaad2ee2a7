"""Bounded position history for a single body."""

import numpy as np
from typing import Iterator, Optional, Tuple


class Trail:
    """Fixed-capacity ring buffer of 2D points.

    Points are stored in a preallocated (capacity, 2) array. The logical order
    (oldest to newest) follows from two cursors: ``_head`` is the slot of the
    oldest point and ``_size`` is the number of valid points. Pushing into a
    full buffer overwrites the oldest point.
    """

    DEFAULT_CAPACITY = 1024

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Allocate the buffer.

        Args:
            capacity: Maximum number of points retained

        Raises:
            ValueError: If capacity is not positive
            MemoryError: If the buffer cannot be allocated
        """
        capacity = int(capacity)
        if capacity <= 0:
            raise ValueError(f"Trail capacity must be positive, got {capacity}")
        self._points = np.empty((capacity, 2), dtype=np.float64)
        self._head = 0
        self._size = 0

    @property
    def capacity(self) -> int:
        return self._points.shape[0]

    def __len__(self) -> int:
        return self._size

    def push(self, point):
        """Append a point, evicting the oldest one when the buffer is full."""
        capacity = self.capacity
        insert_at = (self._head + self._size) % capacity
        self._points[insert_at, 0] = point[0]
        self._points[insert_at, 1] = point[1]
        if self._size < capacity:
            self._size += 1
        else:
            self._head = (self._head + 1) % capacity

    def clear(self):
        """Drop all points (the buffer itself is kept)."""
        self._head = 0
        self._size = 0

    def reset(self, point):
        """Replace the history with a single point."""
        self.clear()
        self.push(point)

    def last(self) -> Optional[Tuple[float, float]]:
        """Most recently pushed point, or None if empty."""
        if self._size == 0:
            return None
        newest = (self._head + self._size - 1) % self.capacity
        return float(self._points[newest, 0]), float(self._points[newest, 1])

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        # Each call starts a fresh pass, so the sequence is restartable.
        capacity = self.capacity
        for k in range(self._size):
            idx = (self._head + k) % capacity
            yield float(self._points[idx, 0]), float(self._points[idx, 1])

    def to_array(self) -> np.ndarray:
        """Snapshot of the valid points, oldest first, shape (len, 2)."""
        order = (self._head + np.arange(self._size)) % self.capacity
        return self._points[order].copy()
