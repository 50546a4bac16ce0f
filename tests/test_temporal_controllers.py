import unittest
import sys
import os

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from handtris.app.temporal_controllers import ContinuousMoveController, FastDropController


class TestFastDropController(unittest.TestCase):
    def setUp(self):
        self.ctrl = FastDropController(trigger_delay=0.5, interval=0.08)

    def arm_on(self, piece_id, start=0.0):
        self.assertFalse(self.ctrl.update(True, piece_id, start))
        self.assertTrue(self.ctrl.update(True, piece_id, start + 0.5))
        self.ctrl.on_drop_succeeded(start + 0.5)

    def test_trigger_delay(self):
        self.assertFalse(self.ctrl.update(True, 'P1', 0.0))
        self.assertFalse(self.ctrl.update(True, 'P1', 0.49))
        self.assertFalse(self.ctrl.armed)

        self.assertTrue(self.ctrl.update(True, 'P1', 0.5))
        self.assertTrue(self.ctrl.armed)
        self.assertEqual(self.ctrl.bound_piece_id, 'P1')

    def test_step_interval(self):
        self.arm_on('P1')
        self.assertFalse(self.ctrl.update(True, 'P1', 0.55))
        self.assertTrue(self.ctrl.update(True, 'P1', 0.6))

    def test_head_still_disarms(self):
        self.arm_on('P1')
        self.assertFalse(self.ctrl.update(False, 'P1', 0.6))
        self.assertFalse(self.ctrl.armed)
        self.assertIsNone(self.ctrl.start_time)

        # shaking again needs a fresh delay
        self.assertFalse(self.ctrl.update(True, 'P1', 1.0))
        self.assertFalse(self.ctrl.update(True, 'P1', 1.3))
        self.assertTrue(self.ctrl.update(True, 'P1', 1.5))

    def test_piece_change_needs_fresh_delay(self):
        self.arm_on('P1')
        self.assertFalse(self.ctrl.update(True, 'P2', 0.6))
        self.assertFalse(self.ctrl.armed)

        self.assertFalse(self.ctrl.update(True, 'P2', 0.7))
        self.assertFalse(self.ctrl.update(True, 'P2', 1.1))
        self.assertTrue(self.ctrl.update(True, 'P2', 1.3))
        self.assertEqual(self.ctrl.bound_piece_id, 'P2')

    def test_new_piece_notification_disarms(self):
        self.arm_on('P1')
        self.ctrl.on_new_piece('P1', 'P2')
        self.assertFalse(self.ctrl.armed)
        self.assertIsNone(self.ctrl.bound_piece_id)

    def test_qualifying_shake_carries_over_to_new_piece(self):
        self.assertFalse(self.ctrl.update(True, 'P1', 0.0))
        self.ctrl.on_new_piece('P1', 'P2')
        self.assertEqual(self.ctrl.start_time, 0.0)

        self.assertTrue(self.ctrl.update(True, 'P2', 0.5))
        self.assertEqual(self.ctrl.bound_piece_id, 'P2')

    def test_unrelated_new_piece_keeps_binding(self):
        self.arm_on('P1')
        self.ctrl.on_new_piece('P0', 'P1')
        self.assertTrue(self.ctrl.armed)

    def test_landed_piece_never_rearms(self):
        self.arm_on('P1')
        self.ctrl.on_drop_failed()
        self.assertFalse(self.ctrl.armed)
        self.assertEqual(self.ctrl.spent_piece_id, 'P1')

        for step in range(30):
            self.assertFalse(self.ctrl.update(True, 'P1', 1.0 + step * 0.1))

        # the next piece qualifies normally
        self.assertFalse(self.ctrl.update(True, 'P2', 5.0))
        self.assertTrue(self.ctrl.update(True, 'P2', 5.5))

    def test_no_piece_never_arms(self):
        self.ctrl.update(True, None, 0.0)
        self.assertFalse(self.ctrl.update(True, None, 2.0))
        self.assertFalse(self.ctrl.armed)

    def test_reset_forgets_spent_piece(self):
        self.arm_on('P1')
        self.ctrl.on_drop_failed()
        self.ctrl.reset(forget_spent=True)

        self.assertFalse(self.ctrl.update(True, 'P1', 3.0))
        self.assertTrue(self.ctrl.update(True, 'P1', 3.5))


class TestContinuousMoveController(unittest.TestCase):
    def setUp(self):
        self.ctrl = ContinuousMoveController(hold_threshold=0.8, interval=0.12)
        self.ctrl.arm('left', 0.0)

    def test_hold_threshold(self):
        self.assertFalse(self.ctrl.update('left', True, 0.5))
        self.assertFalse(self.ctrl.update('left', True, 0.79))
        self.assertTrue(self.ctrl.update('left', True, 0.8))
        self.assertTrue(self.ctrl.in_continuous_mode)

    def test_repeat_interval(self):
        self.assertTrue(self.ctrl.update('left', True, 0.8))
        self.assertFalse(self.ctrl.update('left', True, 0.85))
        self.assertTrue(self.ctrl.update('left', True, 0.95))
        self.assertFalse(self.ctrl.update('left', True, 1.0))
        self.assertTrue(self.ctrl.update('left', True, 1.1))

    def test_unstable_hand_waits_before_entering(self):
        self.assertFalse(self.ctrl.update('left', False, 0.9))
        self.assertFalse(self.ctrl.in_continuous_mode)
        # the hold keeps counting from the raise
        self.assertTrue(self.ctrl.update('left', True, 1.0))

    def test_instability_restarts_the_hold(self):
        self.assertTrue(self.ctrl.update('left', True, 0.8))
        self.assertFalse(self.ctrl.update('left', False, 1.0))
        self.assertFalse(self.ctrl.in_continuous_mode)
        self.assertEqual(self.ctrl.start_time, 1.0)

        self.assertFalse(self.ctrl.update('left', True, 1.5))
        self.assertTrue(self.ctrl.update('left', True, 1.9))

    def test_other_hand_rearms(self):
        self.assertFalse(self.ctrl.update('right', True, 0.9))
        self.assertEqual(self.ctrl.hand, 'right')
        self.assertEqual(self.ctrl.start_time, 0.9)

    def test_update_without_arm_starts_hold(self):
        ctrl = ContinuousMoveController()
        self.assertFalse(ctrl.update('right', True, 2.0))
        self.assertTrue(ctrl.update('right', True, 2.9))

    def test_cancel(self):
        self.ctrl.update('left', True, 0.8)
        self.ctrl.cancel("hands lowered")
        self.assertFalse(self.ctrl.in_continuous_mode)
        self.assertIsNone(self.ctrl.hand)


if __name__ == '__main__':
    unittest.main()
