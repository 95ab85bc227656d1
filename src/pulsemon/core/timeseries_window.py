from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Deque, List, Optional, Sequence

import numpy as np

from .models import Sample

WINDOW_CAPACITY = 25


def samples_to_arrays(samples: Sequence[Sample]) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(indices, values)`` as ``int64``/``float64`` arrays for plotting."""
    count = len(samples)
    if count == 0:
        return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.float64)
    indices = np.fromiter((s.index for s in samples), dtype=np.int64, count=count)
    values = np.fromiter((s.value for s in samples), dtype=np.float64, count=count)
    return indices, values


class TimeSeriesWindow:
    """
    Fixed-capacity sliding window of :class:`Sample` values for the chart.

    Each append gets the next value of a per-session counter as its index
    (used for x-axis placement, not wall-clock time). When full, exactly one
    oldest sample is evicted per append. :meth:`clear` empties the window and
    restarts the counter at 0.
    """

    __slots__ = ("_capacity", "_samples", "_next_index")

    def __init__(self, capacity: int = WINDOW_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = int(capacity)
        self._samples: Deque[Sample] = deque()
        self._next_index = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def next_index(self) -> int:
        return self._next_index

    def append(self, value: float) -> Sample:
        """Append ``value`` and return the stored :class:`Sample`."""
        if len(self._samples) >= self._capacity:
            self._samples.popleft()
        sample = Sample(index=self._next_index, value=float(value))
        self._samples.append(sample)
        self._next_index += 1
        return sample

    def snapshot(self) -> List[Sample]:
        """Return a copy of the samples, oldest first."""
        return list(self._samples)

    def latest(self) -> Optional[Sample]:
        if not self._samples:
            return None
        return self._samples[-1]

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        return samples_to_arrays(self._samples)

    def clear(self) -> None:
        self._samples.clear()
        self._next_index = 0

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)
