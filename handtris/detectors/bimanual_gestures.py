"""
Bimanual (Two-Hand) Gesture Detection

Both hands raised and clearly visible is the rotate gesture. It has the
highest priority of all gestures: while it holds, single-hand moves are
suppressed.

An earlier version also required both hands to be at a similar height. That
limit was dropped to make rotation easier to trigger; the height gap is still
reported in the metadata and can be re-enabled through
`max_height_difference`, which defaults to None (unconstrained).
"""

from typing import Optional

from handtris.detectors.gesture_detectors import GestureResult


class BothHandsUpDetector:

    def __init__(self, max_height_difference: Optional[float] = None):
        self.max_height_difference = max_height_difference

    def detect(
        self,
        left_raise: GestureResult,
        right_raise: GestureResult,
        left_visible: GestureResult,
        right_visible: GestureResult,
    ) -> GestureResult:
        both_visible = left_visible.detected and right_visible.detected
        both_raised = left_raise.detected and right_raise.detected
        height_difference = abs(
            left_raise.metadata.get('relative_y', 0.0) - right_raise.metadata.get('relative_y', 0.0)
        )
        similar_height = (
            self.max_height_difference is None
            or height_difference <= self.max_height_difference
        )

        base_metadata = {
            'both_visible': both_visible,
            'both_raised': both_raised,
            'height_difference': height_difference,
            'max_height_difference': self.max_height_difference,
            'reason': None,
        }
        if not both_visible:
            base_metadata['reason'] = 'hands_not_visible'
        elif not both_raised:
            base_metadata['reason'] = 'hands_not_raised'
        elif not similar_height:
            base_metadata['reason'] = 'height_mismatch'
        else:
            base_metadata['reason'] = 'both_hands_up'

        return GestureResult(
            detected=both_visible and both_raised and similar_height,
            gesture_name='both_hands_up',
            metadata=base_metadata,
        )


__all__ = ['BothHandsUpDetector']
