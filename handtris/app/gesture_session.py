"""
HandTris Gesture Session

One explicit session object that owns every piece of engine state:
calibration baseline, history windows, gesture states, timers and
detection health. The host feeds it one landmark sample per frame and it
dispatches at most one command per frame to the game.

Typical use:

    session = GestureSession(game,
                             on_calibration_complete=start_game,
                             on_detection_status_change=CameraPauseHandler(game))
    for sample in producer:
        session.process_frame(sample)
"""

import threading
import time
from typing import Callable, Dict, Hashable, Optional, Any

from handtris.app.action_arbiter import ActionArbiter
from handtris.app.action_dispatcher import ActionDispatcher, Command
from handtris.app.temporal_controllers import ContinuousMoveController, FastDropController
from handtris.config.config_manager import Config, EngineSettings
from handtris.detectors.calibration import CalibrationUnit, Baseline
from handtris.detectors.detection_health import DetectionHealthMonitor, DetectionStatus
from handtris.detectors.gesture_detectors import FrameGestures, GestureManager
from handtris.detectors.landmarks import LandmarkSample


class GestureSession:
    """Gesture recognition and arbitration for one player."""

    def __init__(
        self,
        game,
        config: Optional[Config] = None,
        on_calibration_complete: Optional[Callable[[], None]] = None,
        on_detection_status_change: Optional[Callable[[bool], None]] = None,
        settings: Optional[EngineSettings] = None,
    ):
        """
        Args:
            game: GameInterface-compatible collaborator
            config: Config to read thresholds from (ignored if settings is given)
            on_calibration_complete: called once per calibration session
            on_detection_status_change: called with the new state on each edge
            settings: explicit EngineSettings, mostly for tests
        """
        if settings is None:
            settings = EngineSettings.from_config(config) if config is not None else EngineSettings()
        self.settings = settings
        self.on_calibration_complete = on_calibration_complete

        self.dispatcher = ActionDispatcher(game, verbose=settings.show_debug_info)
        self.calibration = CalibrationUnit(settings.max_calibration_frames, on_complete=self._on_calibrated)
        self.health = DetectionHealthMonitor(
            history_size=settings.detection_history_size,
            max_failure_count=settings.max_failure_count,
            min_success_rate=settings.min_success_rate,
            lost_message_after=settings.lost_message_after,
            on_status_change=on_detection_status_change,
        )
        self.gestures = GestureManager(settings)
        self.fast_drop = FastDropController(settings.fast_drop_trigger_delay, settings.fast_drop_interval)
        self.arbiter = ActionArbiter(
            cooldown=settings.action_cooldown,
            continuous=ContinuousMoveController(settings.continuous_move_threshold,
                                                settings.continuous_move_interval),
        )

        # Frames are processed one at a time; reset() waits for the frame in flight
        self._lock = threading.RLock()

        self.frame_count = 0
        self.current_piece_id: Optional[Hashable] = None
        self.last_gestures: Optional[FrameGestures] = None
        self.last_detection = DetectionStatus(detected=False)

    @property
    def game(self):
        return self.dispatcher.game

    @property
    def baseline(self) -> Optional[Baseline]:
        return self.calibration.baseline

    @property
    def is_calibrated(self) -> bool:
        return self.calibration.complete

    def _on_calibrated(self, baseline: Baseline):
        print("  Controls: shake head = fast drop, both hands up = rotate, raise one hand = move")
        if self.on_calibration_complete is not None:
            try:
                self.on_calibration_complete()
            except Exception as e:
                print(f"⚠ Error in calibration complete callback: {e}")

    def reset(self, now: Optional[float] = None):
        """
        Clear baseline, windows, gesture states, timers and detection history.
        The next valid frame is calibration frame zero. Safe to call twice.

        The detection state last reported to the host is kept, so status
        callbacks keep firing on real edges only.
        """
        with self._lock:
            self.calibration.reset()
            self.gestures.reset()
            self.arbiter.reset()
            self.fast_drop.reset(forget_spent=True)
            self.health.reset(now, keep_status=True)
            self.frame_count = 0
            self.current_piece_id = None
            self.last_gestures = None
            self.last_detection = DetectionStatus(detected=self.health.detected)

    def on_piece_placed(self):
        """The game locked the active piece: drop any fast-drop state."""
        with self._lock:
            self.fast_drop.reset()

    def process_frame(self, sample: Optional[LandmarkSample], now: Optional[float] = None) -> Optional[Command]:
        """
        Run the full pipeline for one frame.

        Args:
            sample: landmarks for this frame, or None / an empty sample when
                    the producer detected nobody
            now: frame timestamp in seconds (defaults to time.time())

        Returns:
            The command dispatched to the game this frame, if any.
        """
        now = time.time() if now is None else now
        with self._lock:
            try:
                return self._process(sample, now)
            except Exception as e:
                print(f"⚠ Frame processing error: {e}")
                return None

    def _process(self, sample: Optional[LandmarkSample], now: float) -> Optional[Command]:
        self.frame_count += 1
        valid = sample is not None and not sample.is_empty
        self.last_detection = self.health.on_frame(valid, now)
        if not valid:
            return None

        if not self.calibration.complete:
            self.calibration.accumulate(sample, now)
            return None

        gestures = self.gestures.process(sample, now)
        if gestures is None:
            self._debug("Key landmarks missing, frame skipped")
            return None
        self.last_gestures = gestures

        piece_id = self._read_piece_id()
        self._track_piece(piece_id)

        command = self.arbiter.decide(gestures, now)
        drop_due = self.fast_drop.update(gestures.head_shaking, piece_id, now)
        running = self.dispatcher.is_game_running()

        self._debug(
            f"L={self.arbiter.hand_state['left']} R={self.arbiter.hand_state['right']} "
            f"both={gestures.both_hands_up} shake={self.gestures.head_shake.consecutive_frames} "
            f"drop={self.fast_drop.armed} cont={self.arbiter.continuous.in_continuous_mode} "
            f"piece={piece_id}"
        )

        if not running:
            return None

        if command is not None:
            # A due drop step waits for the next frame
            self.dispatcher.dispatch(command)
            return command

        if drop_due:
            if self.dispatcher.dispatch(Command.FAST_DROP_STEP):
                self.fast_drop.on_drop_succeeded(now)
            else:
                self.fast_drop.on_drop_failed()
            return Command.FAST_DROP_STEP

        return None

    def _read_piece_id(self) -> Optional[Hashable]:
        try:
            return self.game.current_piece_id()
        except Exception as e:
            print(f"⚠ Error reading current piece: {e}")
            return None

    def _track_piece(self, piece_id: Optional[Hashable]):
        if piece_id is None or piece_id == self.current_piece_id:
            return
        old_piece_id = self.current_piece_id
        self.current_piece_id = piece_id
        self.fast_drop.on_new_piece(old_piece_id, piece_id)

    def _debug(self, message: str):
        if self.settings.show_debug_info and self.frame_count % self.settings.debug_log_interval == 0:
            print(f"[frame {self.frame_count}] {message}")

    def control_status(self, now: Optional[float] = None) -> Dict[str, Any]:
        """
        Snapshot of the engine state for a host status panel.
        """
        now = time.time() if now is None else now
        with self._lock:
            calibration = self.calibration.status()
            completed_at = self.calibration.completed_at
            show_banner = (
                calibration.complete
                and completed_at is not None
                and now - completed_at < self.settings.complete_banner_seconds
            )
            left_stable = self.gestures.is_hand_stable('left')
            right_stable = self.gestures.is_hand_stable('right')

            return {
                'calibrating': not calibration.complete,
                'calibration_progress': calibration.progress,
                'show_calibration_complete': show_banner,
                'detected': self.last_detection.detected,
                'detection_hint': self.last_detection.hint,
                'left_hand': self.arbiter.hand_state['left'],
                'right_hand': self.arbiter.hand_state['right'],
                'left_stable': left_stable,
                'right_stable': right_stable,
                'both_hands_up': self.arbiter.both_hands_active,
                'head_shaking': self.gestures.head_shake.is_shaking,
                'shake_frames': self.gestures.head_shake.consecutive_frames,
                'required_shake_frames': self.gestures.head_shake.required_frames,
                'fast_drop_active': self.fast_drop.armed,
                'continuous_active': self.arbiter.continuous.in_continuous_mode,
                'current_piece': self.current_piece_id,
                'fast_drop_piece': self.fast_drop.bound_piece_id,
                'mode': self._mode_label(),
            }

    def _mode_label(self) -> str:
        if self.fast_drop.armed:
            return 'Fast Drop'
        if self.gestures.head_shake.is_shaking:
            return 'Head Shaking'
        if self.arbiter.continuous.in_continuous_mode:
            return 'Continuous Move'
        if self.arbiter.both_hands_active:
            return 'Both Hands'
        if self.arbiter.hand_state['left'] == 'up':
            return 'Left Hand'
        if self.arbiter.hand_state['right'] == 'up':
            return 'Right Hand'
        return 'Ready'


__all__ = ['GestureSession']
