"""
Centralized configuration for the Blind Navigator decision engine.

This module provides all configuration constants and runtime settings for:
- Door and obstacle YOLO model decoding (vocabularies, thresholds, input size)
- Spatial classification thresholds (distance and position buckets)
- Navigation instruction debounce
- Speech output
- Logging and telemetry

The Config class contains all constants as class attributes, making them
accessible throughout the application without instantiation. Values can be
tuned without code changes through a JSON overrides file, either passed to
load_overrides_file() or named by the BLIND_NAV_CONFIG environment variable.

Usage:
    from blind_navigator.utils.config import Config

    delay_ms = Config.ANNOUNCEMENT_DELAY_MS
    Config.apply_overrides({"STABLE_INFO_DELAY_MS": 9000})
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

log = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BLIND_NAV_CONFIG"

COCO_LABELS = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck", "boat",
    "traffic light", "fire hydrant", "stop sign", "parking meter", "bench", "bird", "cat",
    "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra", "giraffe", "backpack",
    "umbrella", "handbag", "tie", "suitcase", "frisbee", "skis", "snowboard", "sports ball",
    "kite", "baseball bat", "baseball glove", "skateboard", "surfboard", "tennis racket",
    "bottle", "wine glass", "cup", "fork", "knife", "spoon", "bowl", "banana", "apple",
    "sandwich", "orange", "broccoli", "carrot", "hot dog", "pizza", "donut", "cake",
    "chair", "couch", "potted plant", "bed", "dining table", "toilet", "tv",
    "laptop", "mouse", "remote", "keyboard", "cell phone", "microwave", "oven",
    "toaster", "sink", "refrigerator", "book", "clock", "vase", "scissors",
    "teddy bear", "hair drier", "toothbrush",
)


class Config:
    """System configuration constants for the Blind Navigator."""

    # ==========================================================================
    # DETECTION MODELS: Door (fine-tuned, single class) and Obstacle (COCO)
    # ==========================================================================

    DOOR_MODEL_LABELS = ("door",)
    DOOR_MODEL_INPUT_WIDTH = 640
    DOOR_MODEL_INPUT_HEIGHT = 640
    DOOR_MODEL_CONFIDENCE = 0.30
    DOOR_MODEL_NUM_PREDICTIONS = 8400
    DOOR_MODEL_LAYOUT = "rows"              # "rows" or "channels_first"

    OBSTACLE_MODEL_LABELS = COCO_LABELS
    OBSTACLE_MODEL_INPUT_WIDTH = 640
    OBSTACLE_MODEL_INPUT_HEIGHT = 640
    OBSTACLE_MODEL_CONFIDENCE = 0.60
    OBSTACLE_MODEL_NUM_PREDICTIONS = 8400
    OBSTACLE_MODEL_LAYOUT = "rows"

    DOOR_LABEL = "door"

    # Decode door and obstacle tensors on two threads (joined before fusion)
    PARALLEL_DECODE = False

    # Scale detector-space boxes to the display before spatial reasoning
    MAP_DETECTIONS_TO_DISPLAY = True

    # Re-raise tensor shape violations instead of skipping the frame
    STRICT_TENSOR_CHECKS = False

    # ==========================================================================
    # SPATIAL PROCESSING: Height ratios (box height / screen height)
    # ==========================================================================

    DISTANCE_VERY_CLOSE_RATIO = 0.50
    DISTANCE_CLOSE_RATIO = 0.20
    DISTANCE_MEDIUM_RATIO = 0.05

    # Deviation ratios from screen center (|d| in [0, 1])
    POSITION_CENTER_RATIO = 0.10
    POSITION_SIDE_RATIO = 0.25
    POSITION_FAR_SIDE_RATIO = 0.60

    HORIZONTAL_FOV_DEGREES = 70.0
    MIN_TURN_ANGLE_DEGREES = 15

    # ==========================================================================
    # NAVIGATION: Instruction debounce (milliseconds)
    # ==========================================================================

    ANNOUNCEMENT_DELAY_MS = 5000            # New instruction after this long
    STABLE_INFO_DELAY_MS = 7000             # Same instruction repeated after this long

    # ==========================================================================
    # AUDIO SYSTEM
    # ==========================================================================

    TTS_ENABLED = True
    TTS_RATE = 170
    TTS_RATE_LINUX = 130                    # espeak-ng is fast by default
    TTS_VOICE = None                        # macOS `say` voice, None = system default

    # ==========================================================================
    # LOGGING & TELEMETRY
    # ==========================================================================

    LOG_DIR = "logs"
    NAV_CONSOLE_LEVEL = "WARNING"           # nav.* channels echo this level and above
    TELEMETRY_ENABLED = False
    PROFILE_WINDOW_FRAMES = 30

    @classmethod
    def apply_overrides(cls, overrides: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Apply configuration overrides on top of the class defaults.

        Keys are matched case-insensitively against existing constants;
        unknown keys raise ValueError so typos never pass silently. Lists are
        stored as tuples to keep label vocabularies immutable.

        Args:
            overrides: Mapping of constant name to new value

        Returns:
            Dict with the previous value of every overridden constant
        """
        if not isinstance(overrides, Mapping):
            raise ValueError(f"Config overrides must be a mapping, got {type(overrides).__name__}")

        previous: Dict[str, Any] = {}
        for raw_key, value in overrides.items():
            key = str(raw_key).upper()
            if key.startswith("_") or not hasattr(cls, key) or callable(getattr(cls, key)):
                raise ValueError(f"Unknown config option '{raw_key}'")
            if isinstance(value, list):
                value = tuple(value)
            previous[key] = getattr(cls, key)
            setattr(cls, key, value)
            log.info("Config override %s=%r", key, value)
        return previous


def load_overrides_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON overrides file and apply it to Config."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    log.info("Loading config overrides from %s", path)
    return Config.apply_overrides(data)


def load_env_overrides(environ: Optional[Mapping[str, str]] = None) -> Optional[Dict[str, Any]]:
    """Apply the overrides file named by BLIND_NAV_CONFIG, if set."""
    environ = os.environ if environ is None else environ
    path = environ.get(CONFIG_ENV_VAR)
    if not path:
        return None
    return load_overrides_file(path)
