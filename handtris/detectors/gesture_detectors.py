import time
from typing import Dict, Optional
from dataclasses import dataclass, field

from handtris.detectors.landmarks import Landmark, LandmarkSample, PoseLandmark, GESTURE_POINTS
from handtris.utils.math_utils import SlidingWindow, variance, value_range


# Data Structures

@dataclass
class GestureResult:
    """Result from a gesture detector."""
    detected: bool
    gesture_name: str
    confidence: float = 1.0
    metadata: Dict = field(default_factory=dict)


@dataclass
class FrameGestures:
    """
    Every classifier output for one frame.
    Hand states are from the user's point of view (MediaPipe left = user's left).
    """
    timestamp: float
    left_up: bool
    right_up: bool
    left_visible: bool
    right_visible: bool
    both_hands_up: bool
    left_stable: bool
    right_stable: bool
    head_shaking: bool
    results: Dict[str, GestureResult] = field(default_factory=dict)

    def hand_up(self, hand_label: str) -> bool:
        return self.left_up if hand_label == 'left' else self.right_up

    def hand_stable(self, hand_label: str) -> bool:
        return self.left_stable if hand_label == 'left' else self.right_stable


class HandRaiseDetector:
    """
    A hand is raised when the wrist sits far enough above its shoulder.
    Image y grows downward, so shoulder_y - wrist_y is positive for a raised hand.
    """

    def __init__(self, threshold: float = 0.12):
        self.threshold = float(threshold)

    def raised(self, shoulder_y: float, wrist_y: float) -> bool:
        return (shoulder_y - wrist_y) > self.threshold

    def detect(self, shoulder: Landmark, wrist: Landmark, hand_label: str = 'right') -> GestureResult:
        relative_y = shoulder.y - wrist.y
        detected = relative_y > self.threshold
        return GestureResult(
            detected=detected,
            gesture_name='hand_raise',
            metadata={
                'hand_label': hand_label,
                'relative_y': relative_y,
                'threshold': self.threshold,
            },
        )


class HandVisibilityDetector:
    """
    A hand is usable for gestures when the producer is confident about it and
    it is not hugging the frame border (partially occluded detections).
    """

    def __init__(self, visibility_threshold: float = 0.6, frame_margin: float = 0.05):
        self.visibility_threshold = float(visibility_threshold)
        self.frame_margin = float(frame_margin)

    def in_frame(self, wrist: Landmark) -> bool:
        lo, hi = self.frame_margin, 1.0 - self.frame_margin
        return lo < wrist.x < hi and lo < wrist.y < hi

    def detect(self, wrist: Landmark, hand_label: str = 'right') -> GestureResult:
        confident = wrist.visibility > self.visibility_threshold
        in_frame = self.in_frame(wrist)

        base_metadata = {
            'hand_label': hand_label,
            'visibility': wrist.visibility,
            'visibility_threshold': self.visibility_threshold,
            'in_frame': in_frame,
            'reason': None,
        }
        if not confident:
            base_metadata['reason'] = 'low_visibility'
        elif not in_frame:
            base_metadata['reason'] = 'near_frame_border'

        return GestureResult(
            detected=confident and in_frame,
            gesture_name='hand_visible',
            confidence=wrist.visibility,
            metadata=base_metadata,
        )


class HeadShakeDetector:
    """
    Detects a sustained side-to-side head shake from the nose position.

    Two stages:
    1. per frame, the full head window must span a wide enough x range with
       enough variance
    2. that condition must hold for `required_frames` consecutive frames

    The frame that fills the window only seeds it; counting starts once a
    full window slides, so a steady shake confirms after
    history_size + required_frames samples.
    """

    def __init__(
        self,
        history_size: int = 20,
        range_threshold: float = 0.08,
        variance_threshold: float = 0.001,
        required_frames: int = 12,
    ):
        self.range_threshold = float(range_threshold)
        self.variance_threshold = float(variance_threshold)
        self.required_frames = int(required_frames)
        self.window = SlidingWindow(history_size)
        self.consecutive_frames = 0
        self.is_shaking = False

    def reset(self):
        self.window.clear()
        self.consecutive_frames = 0
        self.is_shaking = False

    def detect(self, nose: Landmark, timestamp: Optional[float] = None) -> GestureResult:
        timestamp = time.time() if timestamp is None else timestamp
        was_full = self.window.full
        self.window.append(nose.x, nose.y, timestamp)

        base_metadata = {
            'window_len': len(self.window),
            'window_size': self.window.capacity,
            'x_range': 0.0,
            'x_variance': 0.0,
            'range_threshold': self.range_threshold,
            'variance_threshold': self.variance_threshold,
            'consecutive_frames': 0,
            'required_frames': self.required_frames,
            'reason': None,
        }

        if not was_full:
            self.consecutive_frames = 0
            self.is_shaking = False
            base_metadata['reason'] = 'filling_window'
            return GestureResult(detected=False, gesture_name='head_shake', metadata=base_metadata)

        xs = self.window.xs()
        x_range = value_range(xs)
        x_var = variance(xs)
        shaking_now = x_range > self.range_threshold and x_var > self.variance_threshold

        if shaking_now:
            self.consecutive_frames += 1
        else:
            self.consecutive_frames = 0

        was_shaking = self.is_shaking
        self.is_shaking = self.consecutive_frames >= self.required_frames
        if self.is_shaking != was_shaking:
            print(f"  > Head shake {'started' if self.is_shaking else 'stopped'} "
                  f"(range {x_range:.3f}, variance {x_var:.5f})")

        base_metadata.update({
            'x_range': x_range,
            'x_variance': x_var,
            'consecutive_frames': self.consecutive_frames,
            'shaking_this_frame': shaking_now,
            'reason': 'confirmed' if self.is_shaking else ('accumulating' if shaking_now else 'head_still'),
        })
        return GestureResult(
            detected=self.is_shaking,
            gesture_name='head_shake',
            confidence=min(1.0, self.consecutive_frames / max(1, self.required_frames)),
            metadata=base_metadata,
        )


class HandStabilityDetector:
    """
    A hand is stable when its last few wrist positions barely move.
    Gates continuous-repeat moves so a waving hand does not auto-repeat.
    """

    def __init__(self, stability_frames: int = 5, variance_threshold: float = 0.01):
        self.stability_frames = int(stability_frames)
        self.variance_threshold = float(variance_threshold)

    def detect(self, window: SlidingWindow, hand_label: str = 'right') -> GestureResult:
        base_metadata = {
            'hand_label': hand_label,
            'samples': len(window),
            'stability_frames': self.stability_frames,
            'x_variance': None,
            'y_variance': None,
            'variance_threshold': self.variance_threshold,
        }
        if len(window) < self.stability_frames:
            base_metadata['reason'] = 'not_enough_samples'
            return GestureResult(detected=False, gesture_name='hand_stable', metadata=base_metadata)

        recent = window.last(self.stability_frames)
        x_var = variance(window.xs(recent))
        y_var = variance(window.ys(recent))
        stable = x_var < self.variance_threshold and y_var < self.variance_threshold

        base_metadata.update({
            'x_variance': x_var,
            'y_variance': y_var,
            'reason': 'stable' if stable else 'moving',
        })
        return GestureResult(detected=stable, gesture_name='hand_stable', metadata=base_metadata)


class GestureManager:
    """
    Runs every classifier for one frame and keeps the history windows.
    Maintains per-hand wrist history and the head-shake state.
    """

    def __init__(self, settings=None):
        from handtris.detectors.bimanual_gestures import BothHandsUpDetector

        if settings is None:
            from handtris.config.config_manager import EngineSettings
            settings = EngineSettings()
        self.settings = settings

        self.raise_detector = HandRaiseDetector(settings.hand_raise_threshold)
        self.visibility = HandVisibilityDetector(settings.visibility_threshold, settings.frame_margin)
        self.head_shake = HeadShakeDetector(
            history_size=settings.head_history_size,
            range_threshold=settings.head_range_threshold,
            variance_threshold=settings.head_variance_threshold,
            required_frames=settings.required_shake_frames,
        )
        self.stability = HandStabilityDetector(settings.hand_stability_frames, settings.hand_stability_threshold)
        self.both_hands = BothHandsUpDetector(settings.max_height_difference)

        self.history = {
            'left': SlidingWindow(settings.hand_history_size),
            'right': SlidingWindow(settings.hand_history_size),
        }

    def reset(self):
        self.head_shake.reset()
        for window in self.history.values():
            window.clear()

    def is_hand_stable(self, hand_label: str) -> bool:
        return self.stability.detect(self.history[hand_label], hand_label).detected

    def process(self, sample: LandmarkSample, timestamp: Optional[float] = None) -> Optional[FrameGestures]:
        """
        Update windows and classify one frame.

        Returns None (and leaves every window untouched) when any of the
        five tracked points is missing.
        """
        if sample is None or not sample.has_all(GESTURE_POINTS):
            return None
        timestamp = time.time() if timestamp is None else timestamp

        nose = sample.get(PoseLandmark.NOSE)
        l_shoulder = sample.get(PoseLandmark.LEFT_SHOULDER)
        r_shoulder = sample.get(PoseLandmark.RIGHT_SHOULDER)
        l_wrist = sample.get(PoseLandmark.LEFT_WRIST)
        r_wrist = sample.get(PoseLandmark.RIGHT_WRIST)

        shake_result = self.head_shake.detect(nose, timestamp)

        self.history['left'].append(l_wrist.x, l_wrist.y, timestamp)
        self.history['right'].append(r_wrist.x, r_wrist.y, timestamp)

        left_raise = self.raise_detector.detect(l_shoulder, l_wrist, 'left')
        right_raise = self.raise_detector.detect(r_shoulder, r_wrist, 'right')
        left_vis = self.visibility.detect(l_wrist, 'left')
        right_vis = self.visibility.detect(r_wrist, 'right')
        both_result = self.both_hands.detect(left_raise, right_raise, left_vis, right_vis)
        left_stable = self.stability.detect(self.history['left'], 'left')
        right_stable = self.stability.detect(self.history['right'], 'right')

        return FrameGestures(
            timestamp=timestamp,
            left_up=left_raise.detected,
            right_up=right_raise.detected,
            left_visible=left_vis.detected,
            right_visible=right_vis.detected,
            both_hands_up=both_result.detected,
            left_stable=left_stable.detected,
            right_stable=right_stable.detected,
            head_shaking=shake_result.detected,
            results={
                'left_raise': left_raise,
                'right_raise': right_raise,
                'left_visible': left_vis,
                'right_visible': right_vis,
                'both_hands_up': both_result,
                'left_stable': left_stable,
                'right_stable': right_stable,
                'head_shake': shake_result,
            },
        )


__all__ = [
    'GestureResult',
    'FrameGestures',
    'HandRaiseDetector',
    'HandVisibilityDetector',
    'HeadShakeDetector',
    'HandStabilityDetector',
    'GestureManager',
]
