"""
Landmark samples for HandTris

A LandmarkSample is one frame of pose keypoints handed over by the external
pose producer. Only the five points the gesture engine needs are kept:
nose, both shoulders and both wrists. Every lookup returns None for a point
the producer did not report, so absence is an explicit branch for callers.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Mapping, Any


class PoseLandmark(Enum):
    """Tracked body points, valued by their MediaPipe Pose index."""
    NOSE = 0
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_WRIST = 15
    RIGHT_WRIST = 16


# Accepted spellings for dict input (e.g. recorded JSON frames)
LANDMARK_NAMES = {
    'nose': PoseLandmark.NOSE,
    'left_shoulder': PoseLandmark.LEFT_SHOULDER,
    'right_shoulder': PoseLandmark.RIGHT_SHOULDER,
    'left_wrist': PoseLandmark.LEFT_WRIST,
    'right_wrist': PoseLandmark.RIGHT_WRIST,
}

CALIBRATION_POINTS = (
    PoseLandmark.NOSE,
    PoseLandmark.LEFT_SHOULDER,
    PoseLandmark.RIGHT_SHOULDER,
)

GESTURE_POINTS = tuple(PoseLandmark)


@dataclass(frozen=True)
class Landmark:
    """
    A single keypoint. x and y are normalized to the frame (0..1, y grows
    downward), z is relative depth, visibility is a 0..1 confidence.
    """
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0


@dataclass
class LandmarkSample:
    """Keypoints for one frame. Points missing from `points` are absent."""
    points: Dict[PoseLandmark, Landmark] = field(default_factory=dict)

    def get(self, point: PoseLandmark) -> Optional[Landmark]:
        return self.points.get(point)

    def has_all(self, points) -> bool:
        return all(p in self.points for p in points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @classmethod
    def from_pose_landmarks(cls, landmarks) -> 'LandmarkSample':
        """
        Build a sample from a MediaPipe-Pose-shaped landmark list.

        Accepts either a list of objects with `.x`, `.y` (and optionally
        `.z`, `.visibility`) or an object exposing such a list as
        `.landmark` (legacy solutions API). Indices that are out of range or
        hold None are left absent.
        """
        if landmarks is None:
            return cls()
        items = getattr(landmarks, 'landmark', landmarks)
        items = list(items)

        points = {}
        for point in PoseLandmark:
            if point.value >= len(items):
                continue
            lm = items[point.value]
            if lm is None:
                continue
            # Tasks API landmarks may leave visibility unset
            vis = getattr(lm, 'visibility', None)
            points[point] = Landmark(
                x=float(lm.x),
                y=float(lm.y),
                z=float(getattr(lm, 'z', 0.0) or 0.0),
                visibility=1.0 if vis is None else float(vis),
            )
        return cls(points)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'LandmarkSample':
        """
        Build a sample from {'nose': {'x':..,'y':..,'z':..,'visibility':..}, ...}.
        Unknown keys are ignored.
        """
        if not data:
            return cls()
        points = {}
        for name, value in data.items():
            point = LANDMARK_NAMES.get(str(name).lower())
            if point is None or value is None:
                continue
            points[point] = Landmark(
                x=float(value['x']),
                y=float(value['y']),
                z=float(value.get('z', 0.0)),
                visibility=float(value.get('visibility', 1.0)),
            )
        return cls(points)


__all__ = [
    'PoseLandmark',
    'LANDMARK_NAMES',
    'CALIBRATION_POINTS',
    'GESTURE_POINTS',
    'Landmark',
    'LandmarkSample',
]
