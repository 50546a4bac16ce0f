import unittest
from unittest.mock import create_autospec
import sys
import os

# Add path to source
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from handtris.app.action_dispatcher import ActionDispatcher, Command
from handtris.utils.game_interface import GameInterface


class TestActionDispatcher(unittest.TestCase):
    def setUp(self):
        # Mock GameInterface with autospec to support introspection
        self.mock_game = create_autospec(GameInterface, instance=True)
        self.mock_game.is_running.return_value = True
        self.mock_game.attempt_move.return_value = True
        self.dispatcher = ActionDispatcher(self.mock_game)

    def test_move_left(self):
        self.assertTrue(self.dispatcher.dispatch(Command.MOVE_LEFT))
        self.mock_game.attempt_move.assert_called_once_with(-1, 0)

    def test_move_right(self):
        self.dispatcher.dispatch(Command.MOVE_RIGHT)
        self.mock_game.attempt_move.assert_called_once_with(1, 0)

    def test_fast_drop_step(self):
        self.dispatcher.dispatch(Command.FAST_DROP_STEP)
        self.mock_game.attempt_move.assert_called_once_with(0, 1)

    def test_rotate(self):
        self.assertTrue(self.dispatcher.dispatch(Command.ROTATE))
        self.mock_game.rotate.assert_called_once_with()
        self.mock_game.attempt_move.assert_not_called()

    def test_failed_move_reports_false(self):
        self.mock_game.attempt_move.return_value = False
        self.assertFalse(self.dispatcher.dispatch(Command.FAST_DROP_STEP))

    def test_suppressed_when_game_not_running(self):
        self.mock_game.is_running.return_value = False

        self.assertFalse(self.dispatcher.dispatch(Command.MOVE_LEFT))
        self.assertFalse(self.dispatcher.dispatch(Command.ROTATE))

        self.mock_game.attempt_move.assert_not_called()
        self.mock_game.rotate.assert_not_called()
        self.assertEqual(self.dispatcher.suppressed_count, 2)

    def test_collaborator_exception_is_contained(self):
        self.mock_game.attempt_move.side_effect = RuntimeError("board exploded")
        self.mock_game.rotate.side_effect = RuntimeError("no piece")

        self.assertFalse(self.dispatcher.dispatch(Command.MOVE_RIGHT))
        self.assertFalse(self.dispatcher.dispatch(Command.ROTATE))

    def test_running_check_exception_suppresses(self):
        self.mock_game.is_running.side_effect = RuntimeError("gone")
        self.assertFalse(self.dispatcher.dispatch(Command.MOVE_LEFT))
        self.mock_game.attempt_move.assert_not_called()

    def test_stats_count_executed_commands(self):
        self.dispatcher.dispatch(Command.MOVE_LEFT)
        self.dispatcher.dispatch(Command.MOVE_LEFT)
        self.dispatcher.dispatch(Command.ROTATE)

        self.assertEqual(self.dispatcher.dispatch_stats[Command.MOVE_LEFT], 2)
        self.assertEqual(self.dispatcher.dispatch_stats[Command.ROTATE], 1)
        self.assertEqual(self.dispatcher.dispatch_stats[Command.FAST_DROP_STEP], 0)


class TestGameInterface(unittest.TestCase):
    def test_incomplete_game_cannot_be_built(self):
        class MovesOnly(GameInterface):
            def attempt_move(self, dx, dy):
                return True

        with self.assertRaises(TypeError):
            GameInterface()
        with self.assertRaises(TypeError):
            MovesOnly()

    def test_complete_game_is_driven_by_dispatcher(self):
        class Board(GameInterface):
            def __init__(self):
                self.x = 0
                self.rotations = 0

            def attempt_move(self, dx, dy):
                self.x += dx
                return True

            def rotate(self):
                self.rotations += 1

            def is_running(self):
                return True

            def current_piece_id(self):
                return 1

            def pause(self):
                pass

            def resume(self):
                pass

        board = Board()
        dispatcher = ActionDispatcher(board)
        dispatcher.dispatch(Command.MOVE_RIGHT)
        dispatcher.dispatch(Command.ROTATE)

        self.assertEqual(board.x, 1)
        self.assertEqual(board.rotations, 1)


if __name__ == '__main__':
    unittest.main()
