"""
Action Dispatcher for HandTris

Executes a Command against the game collaborator. It decouples gesture
arbitration from the game: the arbiter decides WHAT to do, the dispatcher
knows HOW each command maps onto the game's move/rotate calls.

Collaborator failures never escape: a call that raises is logged and
reported as "no effect" (False), which the fast-drop controller reads as
"the piece has landed".
"""

from enum import Enum


class Command(Enum):
    MOVE_LEFT = 'move_left'
    MOVE_RIGHT = 'move_right'
    ROTATE = 'rotate'
    FAST_DROP_STEP = 'fast_drop_step'


# (dx, dy) for commands that translate the piece
MOVE_DELTAS = {
    Command.MOVE_LEFT: (-1, 0),
    Command.MOVE_RIGHT: (1, 0),
    Command.FAST_DROP_STEP: (0, 1),
}


class ActionDispatcher:
    def __init__(self, game, verbose: bool = False):
        """
        Initialize the dispatcher.

        Args:
            game: GameInterface-compatible collaborator.
            verbose: print every executed command.
        """
        self.game = game
        self.verbose = verbose

        self.dispatch_stats = {command: 0 for command in Command}
        self.suppressed_count = 0

    def is_game_running(self) -> bool:
        try:
            return bool(self.game.is_running())
        except Exception as e:
            print(f"⚠ Error reading game running state: {e}")
            return False

    def dispatch(self, command: Command) -> bool:
        """
        Execute one command.

        Returns:
            True if the game reported an effect (move succeeded / rotate
            returned normally), False when suppressed, rejected or failed.
        """
        if not self.is_game_running():
            self.suppressed_count += 1
            if self.verbose:
                print(f"  > Game not running, {command.value} suppressed")
            return False

        try:
            result = self._execute(command)
        except Exception as e:
            print(f"⚠ Error executing {command.value}: {e}")
            return False

        self.dispatch_stats[command] += 1
        if self.verbose:
            print(f"  > {command.value} -> {result}")
        return result

    def _execute(self, command: Command) -> bool:
        if command is Command.ROTATE:
            self.game.rotate()
            return True
        if command in MOVE_DELTAS:
            dx, dy = MOVE_DELTAS[command]
            return bool(self.game.attempt_move(dx, dy))
        raise ValueError(f"Unknown command: {command!r}")


__all__ = [
    'Command',
    'MOVE_DELTAS',
    'ActionDispatcher',
]
