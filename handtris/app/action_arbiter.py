"""
Action Arbiter

Resolves the per-frame gesture signals into at most one Command.

Priority (highest to lowest):
1. Both hands up (edge)            -> ROTATE, ignores the cooldown
2. One hand just raised, other down -> MOVE_LEFT / MOVE_RIGHT, respects the cooldown
3. One hand held up, other down     -> continuous repeat, paced by its own interval

The cooldown is a plain "active until" timestamp checked every cycle.
"""

from typing import Optional

from handtris.app.action_dispatcher import Command
from handtris.app.temporal_controllers import ContinuousMoveController
from handtris.detectors.gesture_detectors import FrameGestures


HAND_COMMANDS = {
    'left': Command.MOVE_LEFT,
    'right': Command.MOVE_RIGHT,
}


class ActionArbiter:
    def __init__(self, cooldown: float = 0.15, continuous: Optional[ContinuousMoveController] = None):
        self.cooldown = float(cooldown)
        self.continuous = continuous if continuous is not None else ContinuousMoveController()
        self.reset()

    def reset(self):
        self.hand_state = {'left': 'down', 'right': 'down'}
        self.last_hand_state = {'left': 'down', 'right': 'down'}
        self.both_hands_active = False
        self.cooldown_until = float('-inf')
        self.continuous.reset()

    def in_cooldown(self, now: float) -> bool:
        return now < self.cooldown_until

    def _just_raised(self, hand: str, other: str) -> bool:
        return (self.hand_state[hand] == 'up'
                and self.last_hand_state[hand] != 'up'
                and self.hand_state[other] == 'down')

    def _held_alone(self, hand: str, other: str) -> bool:
        return (self.hand_state[hand] == 'up'
                and self.last_hand_state[hand] == 'up'
                and self.hand_state[other] == 'down')

    def decide(self, gestures: FrameGestures, now: float) -> Optional[Command]:
        for hand in ('left', 'right'):
            self.hand_state[hand] = 'up' if gestures.hand_up(hand) else 'down'

        rotate_edge = gestures.both_hands_up and not self.both_hands_active
        self.both_hands_active = gestures.both_hands_up

        command = None
        continuous_tick = False
        pending_hand = None

        if gestures.both_hands_up:
            # Rotation blocks single-hand moves for as long as it holds
            self.continuous.cancel("both hands up")
            if rotate_edge:
                command = Command.ROTATE
        else:
            edge_hand = None
            if self._just_raised('left', 'right'):
                edge_hand = 'left'
            elif self._just_raised('right', 'left'):
                edge_hand = 'right'

            if edge_hand is not None:
                if self.in_cooldown(now):
                    pending_hand = edge_hand
                else:
                    command = HAND_COMMANDS[edge_hand]
                    self.continuous.arm(edge_hand, now)
            else:
                held_hand = None
                if self._held_alone('left', 'right'):
                    held_hand = 'left'
                elif self._held_alone('right', 'left'):
                    held_hand = 'right'

                if held_hand is None:
                    self.continuous.cancel("hands lowered")
                elif self.continuous.update(held_hand, gestures.hand_stable(held_hand), now):
                    command, continuous_tick = HAND_COMMANDS[held_hand], True

        for hand in ('left', 'right'):
            # An edge held back by the cooldown stays unconsumed
            if hand != pending_hand:
                self.last_hand_state[hand] = self.hand_state[hand]

        if command is not None and not continuous_tick:
            self.cooldown_until = now + self.cooldown
        return command


__all__ = ['ActionArbiter', 'HAND_COMMANDS']
