"""
Detection-Health Monitor

Tracks whether the pose producer is still delivering usable samples.
Recovery is immediate (one good frame), decline is slow: detection is only
declared lost after a long run of misses AND a poor recent success rate, so
a few dropped frames never pause the game.
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional


HINT_FACE_CAMERA = 'face_camera'
HINT_LOST = 'lost'


@dataclass(frozen=True)
class DetectionStatus:
    detected: bool
    consecutive_failures: int = 0
    success_rate: float = 0.0
    hint: Optional[str] = None  # None, 'face_camera' or 'lost'


class DetectionHealthMonitor:
    def __init__(
        self,
        history_size: int = 10,
        max_failure_count: int = 30,
        min_success_rate: float = 0.2,
        lost_message_after: float = 3.0,
        on_status_change: Optional[Callable[[bool], None]] = None,
    ):
        self.history_size = int(history_size)
        self.max_failure_count = int(max_failure_count)
        self.min_success_rate = float(min_success_rate)
        self.lost_message_after = float(lost_message_after)
        self.on_status_change = on_status_change
        self.reset()

    def reset(self, now: Optional[float] = None, keep_status: bool = False):
        """
        Clear the success history and miss counter. Does not notify.

        With keep_status the last reported state survives, so the host's
        view stays consistent and the next notification is a real edge.
        Without it the monitor is back to the initial not-detected state.
        `now` anchors the lost-message timer; when omitted, the first frame
        after the reset does.
        """
        self.recent = deque(maxlen=self.history_size)
        self.failure_count = 0
        self.last_success_time = now
        if not keep_status:
            self.detected = False
            self._last_reported = False

    @property
    def success_rate(self) -> float:
        if not self.recent:
            return 0.0
        return sum(1 for ok in self.recent if ok) / len(self.recent)

    def on_frame(self, has_valid_sample: bool, now: Optional[float] = None) -> DetectionStatus:
        now = time.time() if now is None else now
        if self.last_success_time is None:
            self.last_success_time = now
        self.recent.append(bool(has_valid_sample))

        if has_valid_sample:
            self.failure_count = 0
            self.last_success_time = now
            self.detected = True
        else:
            self.failure_count += 1
            if self.failure_count >= self.max_failure_count and self.success_rate < self.min_success_rate:
                self.detected = False

        if self.detected != self._last_reported:
            self._last_reported = self.detected
            print(f"{'✓' if self.detected else '⚠'} Pose detection {'regained' if self.detected else 'lost'}")
            if self.on_status_change is not None:
                try:
                    self.on_status_change(self.detected)
                except Exception as e:
                    print(f"⚠ Error in detection status callback: {e}")

        return DetectionStatus(
            detected=self.detected,
            consecutive_failures=self.failure_count,
            success_rate=self.success_rate,
            hint=self._hint(now),
        )

    def _hint(self, now: float) -> Optional[str]:
        if self.failure_count == 0:
            return None
        if not self.detected and now - self.last_success_time > self.lost_message_after:
            return HINT_LOST
        return HINT_FACE_CAMERA


__all__ = [
    'HINT_FACE_CAMERA',
    'HINT_LOST',
    'DetectionStatus',
    'DetectionHealthMonitor',
]
