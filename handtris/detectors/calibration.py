"""
Calibration Unit

Averages the first N frames that contain the nose and both shoulders into a
per-user Baseline. Gesture detection stays gated until the baseline exists.
Frames missing any of those points are ignored rather than counted, so a
flaky detection only makes calibration take longer.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from handtris.detectors.landmarks import LandmarkSample, PoseLandmark, CALIBRATION_POINTS


@dataclass(frozen=True)
class BaselinePoint:
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Baseline:
    """Averaged reference geometry for one calibration session."""
    left_shoulder: BaselinePoint
    right_shoulder: BaselinePoint
    nose: BaselinePoint


@dataclass(frozen=True)
class CalibrationStatus:
    frames_done: int
    total: int
    complete: bool

    @property
    def progress(self) -> float:
        if self.total <= 0:
            return 1.0
        return min(1.0, self.frames_done / self.total)


class CalibrationUnit:
    """
    Accumulates calibration frames.

    Args:
        max_frames: frames to average (30 by default)
        on_complete: called once, on the frame calibration completes
    """

    def __init__(self, max_frames: int = 30, on_complete: Optional[Callable[[Baseline], None]] = None):
        self.max_frames = int(max_frames)
        self.on_complete = on_complete
        self.reset()

    def reset(self):
        # rows: left shoulder, right shoulder, nose; cols: x, y, z
        self._sums = np.zeros((3, 3), dtype=float)
        self.frames_done = 0
        self.baseline: Optional[Baseline] = None
        self.completed_at: Optional[float] = None

    @property
    def complete(self) -> bool:
        return self.baseline is not None

    def status(self) -> CalibrationStatus:
        return CalibrationStatus(self.frames_done, self.max_frames, self.complete)

    def accumulate(self, sample: Optional[LandmarkSample], now: Optional[float] = None) -> CalibrationStatus:
        if self.complete or sample is None or not sample.has_all(CALIBRATION_POINTS):
            return self.status()

        order = (PoseLandmark.LEFT_SHOULDER, PoseLandmark.RIGHT_SHOULDER, PoseLandmark.NOSE)
        for row, point in enumerate(order):
            lm = sample.get(point)
            self._sums[row] += (lm.x, lm.y, lm.z)
        self.frames_done += 1

        if self.frames_done >= self.max_frames:
            avg = self._sums / self.frames_done
            self.baseline = Baseline(
                left_shoulder=BaselinePoint(*map(float, avg[0])),
                right_shoulder=BaselinePoint(*map(float, avg[1])),
                nose=BaselinePoint(*map(float, avg[2])),
            )
            self.completed_at = time.time() if now is None else now
            print(f"✓ Calibration complete after {self.frames_done} frames")
            if self.on_complete is not None:
                self.on_complete(self.baseline)

        return self.status()


__all__ = [
    'BaselinePoint',
    'Baseline',
    'CalibrationStatus',
    'CalibrationUnit',
]
