"""
Temporal Controllers

Stateful timers layered on top of the per-frame classifier signals.

FastDropController
    Sustained confirmed head shake -> after a trigger delay, bind to the
    current piece and emit drop steps at a fixed interval until the piece
    lands, changes, or the shake stops.

ContinuousMoveController
    Single raised hand held still -> after a hold threshold, repeat the
    move at a fixed interval.

Both take explicit `now` timestamps (seconds) so they never schedule
callbacks of their own.
"""

from typing import Hashable, Optional


class FastDropController:
    def __init__(self, trigger_delay: float = 0.5, interval: float = 0.08):
        self.trigger_delay = float(trigger_delay)
        self.interval = float(interval)
        self.spent_piece_id: Optional[Hashable] = None
        self.reset()

    def reset(self, forget_spent: bool = False):
        """
        Clear timers and binding (piece placed, shake stopped).
        forget_spent also forgets the last landed piece (calibration reset).
        """
        if forget_spent:
            self.spent_piece_id = None
        self.start_time: Optional[float] = None
        self.last_step_time: Optional[float] = None
        self.bound_piece_id: Optional[Hashable] = None
        self.armed = False

    def disarm(self, reason: str = ''):
        if self.armed and reason:
            print(f"  > Fast drop stopped ({reason})")
        self.reset()

    def on_new_piece(self, old_piece_id: Optional[Hashable], new_piece_id: Optional[Hashable]):
        """A new piece appeared: drop any binding left on the previous one."""
        if self.bound_piece_id is not None and self.bound_piece_id == old_piece_id:
            self.disarm(f"new piece {new_piece_id}")

    def on_drop_failed(self):
        """The piece could not move down any further."""
        self.spent_piece_id = self.bound_piece_id
        self.disarm("piece landed")

    def on_drop_succeeded(self, now: float):
        self.last_step_time = now

    def update(self, shaking: bool, current_piece_id: Optional[Hashable], now: float) -> bool:
        """
        Advance the controller for one frame.

        Returns:
            True when a drop step is due this frame. The caller reports the
            outcome through on_drop_succeeded / on_drop_failed.
        """
        if not shaking:
            if self.start_time is not None or self.armed:
                self.disarm("head still")
            self.start_time = None
            return False

        if not self.armed:
            if current_piece_id is None or current_piece_id == self.spent_piece_id:
                # qualification starts once a droppable piece is current
                self.start_time = None
                return False
            if self.start_time is None:
                self.start_time = now
                return False
            if now - self.start_time < self.trigger_delay:
                return False
            self.armed = True
            self.bound_piece_id = current_piece_id
            self.last_step_time = None
            print(f"  > Fast drop armed for piece {current_piece_id}")

        if self.bound_piece_id != current_piece_id:
            self.disarm(f"piece changed to {current_piece_id}")
            return False

        if self.last_step_time is None or now - self.last_step_time >= self.interval:
            return True
        return False


class ContinuousMoveController:
    def __init__(self, hold_threshold: float = 0.8, interval: float = 0.12):
        self.hold_threshold = float(hold_threshold)
        self.interval = float(interval)
        self.reset()

    def reset(self):
        self.hand: Optional[str] = None
        self.start_time: Optional[float] = None
        self.last_move_time: Optional[float] = None
        self.in_continuous_mode = False

    def arm(self, hand_label: str, now: float):
        """A hand just went up: start timing its hold."""
        self.hand = hand_label
        self.start_time = now
        self.last_move_time = None
        self.in_continuous_mode = False

    def cancel(self, reason: str = ''):
        if self.in_continuous_mode and reason:
            print(f"  > Continuous move stopped ({reason})")
        self.reset()

    def update(self, hand_label: str, stable: bool, now: float) -> bool:
        """
        Called while `hand_label` stays up alone.

        Returns:
            True when a repeat move is due this frame.
        """
        if self.hand != hand_label or self.start_time is None:
            # fresh hold (after instability, or the edge was missed)
            self.arm(hand_label, now)
            return False

        if not self.in_continuous_mode:
            if now - self.start_time >= self.hold_threshold and stable:
                self.in_continuous_mode = True
                self.last_move_time = now
                print(f"  > Continuous move started ({hand_label})")
                return True
            return False

        if not stable:
            self.cancel("hand unstable")
            # the hold restarts from here
            self.arm(hand_label, now)
            return False

        if now - self.last_move_time >= self.interval:
            self.last_move_time = now
            return True
        return False


__all__ = [
    'FastDropController',
    'ContinuousMoveController',
]
