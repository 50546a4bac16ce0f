"""
Game Interface for HandTris

The capability set the gesture engine needs from the falling-block game.
Hosts subclass GameInterface; the engine only reads piece state and calls
the two mutating operations, attempt_move and rotate.
"""

from abc import ABC, abstractmethod
from typing import Hashable, Optional


class GameInterface(ABC):

    @abstractmethod
    def attempt_move(self, dx: int, dy: int) -> bool:
        """
        Move the active piece by (dx, dy) cells.

        Returns True iff the move succeeded. A failed (0, 1) move means the
        piece has landed.
        """

    @abstractmethod
    def rotate(self) -> None:
        """Rotate the active piece."""

    @abstractmethod
    def is_running(self) -> bool:
        """Commands are suppressed while this returns False."""

    @abstractmethod
    def current_piece_id(self) -> Optional[Hashable]:
        """Identifier of the active piece, or None when there is none."""

    # Used by the camera pause handler only

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def resume(self) -> None:
        pass


__all__ = ['GameInterface']
