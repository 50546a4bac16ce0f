import unittest
from unittest.mock import MagicMock
import sys
import os

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from handtris.detectors.calibration import CalibrationUnit
from handtris.detectors.landmarks import Landmark, LandmarkSample, PoseLandmark


def calibration_sample(nose=(0.5, 0.3), left_shoulder=(0.4, 0.5), right_shoulder=(0.6, 0.5)):
    return LandmarkSample({
        PoseLandmark.NOSE: Landmark(*nose),
        PoseLandmark.LEFT_SHOULDER: Landmark(*left_shoulder),
        PoseLandmark.RIGHT_SHOULDER: Landmark(*right_shoulder),
    })


class TestCalibrationUnit(unittest.TestCase):
    def setUp(self):
        self.on_complete = MagicMock()
        self.unit = CalibrationUnit(max_frames=30, on_complete=self.on_complete)

    def test_baseline_averages_consistent_frames(self):
        for _ in range(30):
            status = self.unit.accumulate(calibration_sample())

        self.assertTrue(status.complete)
        baseline = self.unit.baseline
        self.assertAlmostEqual(baseline.nose.x, 0.5)
        self.assertAlmostEqual(baseline.nose.y, 0.3)
        self.assertAlmostEqual(baseline.left_shoulder.x, 0.4)
        self.assertAlmostEqual(baseline.left_shoulder.y, 0.5)
        self.assertAlmostEqual(baseline.right_shoulder.x, 0.6)
        self.assertAlmostEqual(baseline.right_shoulder.y, 0.5)

    def test_fewer_frames_never_complete(self):
        for _ in range(29):
            status = self.unit.accumulate(calibration_sample())

        self.assertFalse(status.complete)
        self.assertIsNone(self.unit.baseline)
        self.assertEqual(status.frames_done, 29)
        self.assertAlmostEqual(status.progress, 29 / 30)
        self.on_complete.assert_not_called()

    def test_frames_missing_points_do_not_count(self):
        partial = LandmarkSample({PoseLandmark.NOSE: Landmark(0.5, 0.3)})
        for _ in range(10):
            self.unit.accumulate(partial)
        self.assertEqual(self.unit.frames_done, 0)

        for _ in range(30):
            self.unit.accumulate(calibration_sample())
        self.assertTrue(self.unit.complete)

    def test_averages_varying_frames(self):
        for i in range(30):
            x = 0.45 if i % 2 else 0.55
            self.unit.accumulate(calibration_sample(nose=(x, 0.3)))
        self.assertAlmostEqual(self.unit.baseline.nose.x, 0.5)

    def test_complete_fires_once_and_further_frames_are_noops(self):
        for _ in range(30):
            self.unit.accumulate(calibration_sample())
        baseline = self.unit.baseline

        for _ in range(5):
            status = self.unit.accumulate(calibration_sample(nose=(0.9, 0.9)))

        self.on_complete.assert_called_once_with(baseline)
        self.assertIs(self.unit.baseline, baseline)
        self.assertEqual(status.frames_done, 30)

    def test_reset_starts_a_new_session(self):
        for _ in range(30):
            self.unit.accumulate(calibration_sample())
        self.unit.reset()

        self.assertIsNone(self.unit.baseline)
        self.assertEqual(self.unit.frames_done, 0)

        for _ in range(30):
            self.unit.accumulate(calibration_sample(nose=(0.3, 0.2)))
        self.assertAlmostEqual(self.unit.baseline.nose.x, 0.3)
        self.assertEqual(self.on_complete.call_count, 2)

    def test_single_occluded_frame_skews_baseline(self):
        # No outlier rejection: one bad frame shifts the average
        for _ in range(29):
            self.unit.accumulate(calibration_sample())
        self.unit.accumulate(calibration_sample(left_shoulder=(0.4, 0.8)))

        self.assertAlmostEqual(self.unit.baseline.left_shoulder.y, 0.51)


if __name__ == '__main__':
    unittest.main()
