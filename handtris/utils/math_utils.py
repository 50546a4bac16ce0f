import numpy as np
from collections import deque
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional


@dataclass(frozen=True)
class WindowSample:
    """One entry of a history window: normalized position plus capture time."""
    x: float
    y: float
    timestamp: float


def variance(values: Iterable[float]) -> float:
    """Population variance of a 1-D sequence.

    Returns 0.0 for an empty sequence so callers can compare against a
    threshold without special-casing.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(np.var(arr))


def value_range(values: Iterable[float]) -> float:
    """max - min of a 1-D sequence (0.0 when empty)."""
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return 0.0
    return float(arr.max() - arr.min())


class SlidingWindow:
    """Fixed-capacity FIFO of WindowSample entries.

    Example:
        w = SlidingWindow(capacity=20)
        w.append(0.4, 0.3, now)
        w.xs()  # -> [0.4]
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = int(capacity)
        self.buf = deque(maxlen=self.capacity)

    def append(self, x: float, y: float, timestamp: float) -> None:
        self.buf.append(WindowSample(float(x), float(y), float(timestamp)))

    def clear(self) -> None:
        self.buf.clear()

    @property
    def full(self) -> bool:
        return len(self.buf) >= self.capacity

    def last(self, n: int) -> List[WindowSample]:
        """The most recent `n` samples, oldest first."""
        if n <= 0:
            return []
        return list(self.buf)[-n:]

    def xs(self, samples: Optional[List[WindowSample]] = None) -> np.ndarray:
        samples = list(self.buf) if samples is None else samples
        return np.array([s.x for s in samples], dtype=float)

    def ys(self, samples: Optional[List[WindowSample]] = None) -> np.ndarray:
        samples = list(self.buf) if samples is None else samples
        return np.array([s.y for s in samples], dtype=float)

    def __len__(self) -> int:
        return len(self.buf)

    def __iter__(self) -> Iterator[WindowSample]:
        return iter(self.buf)


__all__ = [
    "WindowSample",
    "variance",
    "value_range",
    "SlidingWindow",
]
