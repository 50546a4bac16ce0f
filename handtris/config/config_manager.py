"""
Configuration Management for HandTris Gestures

Loads and provides access to configuration from config.json.
Allows runtime configuration of all gesture thresholds and timing parameters.
Supports both plain values and the [value, description] format.

Unlike a process-wide singleton, every GestureSession owns the Config it was
built with, so two sessions (or two tests) never share tuning state.
"""

import copy
import json
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
from pathlib import Path


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.json"


class Config:
    """
    Configuration manager that loads from config.json
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration from JSON file.

        Args:
            config_path: Path to config.json. If None, the packaged
                         config.json next to this module is used.
        """
        self._config_path = str(config_path) if config_path is not None else str(DEFAULT_CONFIG_PATH)
        self._config_data: Dict[str, Any] = {}
        self.reload()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Build a Config from an in-memory dict (no file involved)."""
        instance = cls.__new__(cls)
        instance._config_path = ""
        instance._config_data = copy.deepcopy(data)
        return instance

    def reload(self):
        """Reload configuration from file."""
        try:
            with open(self._config_path, 'r') as f:
                self._config_data = json.load(f)
            print(f"✓ Loaded configuration from {self._config_path}")
        except FileNotFoundError:
            print(f"⚠ Config file not found: {self._config_path}")
            print("  Using default values")
            self._config_data = self._get_defaults()
        except json.JSONDecodeError as e:
            print(f"⚠ Error parsing config file: {e}")
            print("  Using default values")
            self._config_data = self._get_defaults()

    def save(self, path: Optional[str] = None):
        """Save current configuration back to file."""
        target = path or self._config_path
        if not target:
            print("⚠ No config path to save to")
            return
        try:
            with open(target, 'w') as f:
                json.dump(self._config_data, f, indent=2)
            print(f"✓ Saved configuration to {target}")
        except OSError as e:
            print(f"✗ Error saving config: {e}")

    def get(self, *keys, default=None) -> Any:
        """
        Get configuration value by key path.
        Handles both plain values and the [value, description] format.

        Examples:
            config.get('calibration', 'max_calibration_frames')  # Returns 30
            config.get('gesture_thresholds', 'head_shake', 'range_threshold')

        Args:
            keys: Path to value (e.g., 'timing', 'action_cooldown_seconds')
            default: Default value if path doesn't exist

        Returns:
            Configuration value or default
        """
        current = self._config_data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        # [value, description] format
        if isinstance(current, list) and len(current) >= 1:
            return current[0]

        return current

    def get_with_description(self, *keys, default=None) -> Tuple[Any, str]:
        """
        Get configuration value AND description.

        Returns:
            Tuple of (value, description) or (default, "")
        """
        current = self._config_data
        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return (default, "")

        if isinstance(current, list):
            if len(current) >= 2:
                return (current[0], current[1])
            elif len(current) == 1:
                return (current[0], "")

        return (current, "")

    def set(self, *keys, value):
        """
        Set configuration value by key path. Keeps an existing description.

        Example:
            config.set('timing', 'fast_drop_interval', value=0.1)
        """
        if len(keys) == 0:
            return

        current = self._config_data
        for key in keys[:-1]:
            if key not in current or not isinstance(current[key], dict):
                current[key] = {}
            current = current[key]

        existing = current.get(keys[-1])
        if isinstance(existing, list) and len(existing) >= 2:
            current[keys[-1]] = [value, existing[1]]
        else:
            current[keys[-1]] = value

    def _get_defaults(self) -> Dict:
        """Return default configuration values."""
        return {
            "calibration": {
                "max_calibration_frames": 30,
                "complete_banner_seconds": 5.0
            },
            "gesture_thresholds": {
                "hand_raise": {
                    "threshold": 0.12
                },
                "hand_visibility": {
                    "visibility_threshold": 0.6,
                    "frame_margin": 0.05
                },
                "both_hands_up": {
                    "max_height_difference": None
                },
                "head_shake": {
                    "history_size": 20,
                    "range_threshold": 0.08,
                    "variance_threshold": 0.001,
                    "required_frames": 12
                },
                "hand_stability": {
                    "history_size": 10,
                    "stability_frames": 5,
                    "variance_threshold": 0.01
                }
            },
            "timing": {
                "action_cooldown_seconds": 0.15,
                "fast_drop_trigger_delay": 0.5,
                "fast_drop_interval": 0.08,
                "continuous_move_threshold": 0.8,
                "continuous_move_interval": 0.12
            },
            "detection_health": {
                "history_size": 10,
                "max_failure_count": 30,
                "min_success_rate": 0.2,
                "lost_message_after_seconds": 3.0
            },
            "performance": {
                "show_debug_info": False,
                "debug_log_interval": 60
            }
        }

    @property
    def data(self) -> Dict:
        """Get entire configuration dictionary."""
        return self._config_data

    @property
    def path(self) -> str:
        return self._config_path


@dataclass
class EngineSettings:
    """
    Every threshold and timing constant the gesture engine reads.
    Durations are in seconds, positions in normalized frame units.
    """
    # Calibration
    max_calibration_frames: int = 30
    complete_banner_seconds: float = 5.0

    # Classifiers
    hand_raise_threshold: float = 0.12
    visibility_threshold: float = 0.6
    frame_margin: float = 0.05
    max_height_difference: Optional[float] = None
    head_history_size: int = 20
    head_range_threshold: float = 0.08
    head_variance_threshold: float = 0.001
    required_shake_frames: int = 12
    hand_history_size: int = 10
    hand_stability_frames: int = 5
    hand_stability_threshold: float = 0.01

    # Timers
    action_cooldown: float = 0.15
    fast_drop_trigger_delay: float = 0.5
    fast_drop_interval: float = 0.08
    continuous_move_threshold: float = 0.8
    continuous_move_interval: float = 0.12

    # Detection health
    detection_history_size: int = 10
    max_failure_count: int = 30
    min_success_rate: float = 0.2
    lost_message_after: float = 3.0

    # Diagnostics
    show_debug_info: bool = False
    debug_log_interval: int = 60

    @classmethod
    def from_config(cls, config: Config) -> 'EngineSettings':
        """
        Read settings from a Config, falling back to the dataclass defaults
        for anything the file does not define.
        """
        d = cls()

        def thr(gesture, name, default):
            return config.get('gesture_thresholds', gesture, name, default=default)

        max_height = thr('both_hands_up', 'max_height_difference', d.max_height_difference)

        return cls(
            max_calibration_frames=int(config.get('calibration', 'max_calibration_frames', default=d.max_calibration_frames)),
            complete_banner_seconds=float(config.get('calibration', 'complete_banner_seconds', default=d.complete_banner_seconds)),
            hand_raise_threshold=float(thr('hand_raise', 'threshold', d.hand_raise_threshold)),
            visibility_threshold=float(thr('hand_visibility', 'visibility_threshold', d.visibility_threshold)),
            frame_margin=float(thr('hand_visibility', 'frame_margin', d.frame_margin)),
            max_height_difference=None if max_height is None else float(max_height),
            head_history_size=int(thr('head_shake', 'history_size', d.head_history_size)),
            head_range_threshold=float(thr('head_shake', 'range_threshold', d.head_range_threshold)),
            head_variance_threshold=float(thr('head_shake', 'variance_threshold', d.head_variance_threshold)),
            required_shake_frames=int(thr('head_shake', 'required_frames', d.required_shake_frames)),
            hand_history_size=int(thr('hand_stability', 'history_size', d.hand_history_size)),
            hand_stability_frames=int(thr('hand_stability', 'stability_frames', d.hand_stability_frames)),
            hand_stability_threshold=float(thr('hand_stability', 'variance_threshold', d.hand_stability_threshold)),
            action_cooldown=float(config.get('timing', 'action_cooldown_seconds', default=d.action_cooldown)),
            fast_drop_trigger_delay=float(config.get('timing', 'fast_drop_trigger_delay', default=d.fast_drop_trigger_delay)),
            fast_drop_interval=float(config.get('timing', 'fast_drop_interval', default=d.fast_drop_interval)),
            continuous_move_threshold=float(config.get('timing', 'continuous_move_threshold', default=d.continuous_move_threshold)),
            continuous_move_interval=float(config.get('timing', 'continuous_move_interval', default=d.continuous_move_interval)),
            detection_history_size=int(config.get('detection_health', 'history_size', default=d.detection_history_size)),
            max_failure_count=int(config.get('detection_health', 'max_failure_count', default=d.max_failure_count)),
            min_success_rate=float(config.get('detection_health', 'min_success_rate', default=d.min_success_rate)),
            lost_message_after=float(config.get('detection_health', 'lost_message_after_seconds', default=d.lost_message_after)),
            show_debug_info=bool(config.get('performance', 'show_debug_info', default=d.show_debug_info)),
            debug_log_interval=max(1, int(config.get('performance', 'debug_log_interval', default=d.debug_log_interval))),
        )


def load_config(config_path: Optional[str] = None) -> Config:
    """Load a fresh Config (packaged config.json when no path is given)."""
    return Config(config_path)


__all__ = [
    'Config',
    'EngineSettings',
    'DEFAULT_CONFIG_PATH',
    'load_config',
]
