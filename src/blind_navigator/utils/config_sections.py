"""
Typed configuration sections for the Blind Navigator.

This module provides strongly-typed configuration sections to replace
scattered getattr(Config, ...) calls with proper type hints and defaults.

Benefits:
- Type safety: IDE autocomplete and type checking
- Discoverability: All config options visible in one place
- Default values: Centralized and documented
- Better testing: Components accept a section instead of reading Config
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SpatialConfig:
    """Thresholds used to bucket boxes into distance and position categories."""

    # Box height / screen height
    very_close_ratio: float = 0.50
    close_ratio: float = 0.20
    medium_ratio: float = 0.05

    # Signed deviation from screen center, as a fraction of half the width
    center_ratio: float = 0.10
    side_ratio: float = 0.25
    far_side_ratio: float = 0.60

    # Camera projection
    horizontal_fov_degrees: float = 70.0
    min_turn_angle_degrees: int = 15


@dataclass(frozen=True)
class DebounceConfig:
    """Instruction cadence (milliseconds)."""

    announcement_delay_ms: int = 5000  # Minimum gap before a new instruction
    stable_info_delay_ms: int = 7000  # Minimum gap before repeating the same one


@dataclass(frozen=True)
class PipelineConfig:
    """Per-frame pipeline switches."""

    parallel_decode: bool = False
    map_to_display: bool = True
    strict_tensor_checks: bool = False
    door_label: str = "door"


@dataclass(frozen=True)
class AudioConfig:
    """Configuration for the speech sink."""

    enabled: bool = True
    rate: int = 170
    rate_linux: int = 130
    voice: Optional[str] = None


@dataclass(frozen=True)
class TelemetryConfig:
    """Configuration for session logs and JSONL telemetry."""

    enabled: bool = False
    log_dir: str = "logs"
    console_level: str = "WARNING"
    window_frames: int = 30


def load_spatial_config() -> SpatialConfig:
    """
    Load spatial thresholds from Config with fallback defaults.

    Returns:
        SpatialConfig with values from Config or defaults
    """
    from blind_navigator.utils.config import Config

    return SpatialConfig(
        very_close_ratio=float(getattr(Config, "DISTANCE_VERY_CLOSE_RATIO", 0.50)),
        close_ratio=float(getattr(Config, "DISTANCE_CLOSE_RATIO", 0.20)),
        medium_ratio=float(getattr(Config, "DISTANCE_MEDIUM_RATIO", 0.05)),
        center_ratio=float(getattr(Config, "POSITION_CENTER_RATIO", 0.10)),
        side_ratio=float(getattr(Config, "POSITION_SIDE_RATIO", 0.25)),
        far_side_ratio=float(getattr(Config, "POSITION_FAR_SIDE_RATIO", 0.60)),
        horizontal_fov_degrees=float(getattr(Config, "HORIZONTAL_FOV_DEGREES", 70.0)),
        min_turn_angle_degrees=int(getattr(Config, "MIN_TURN_ANGLE_DEGREES", 15)),
    )


def load_debounce_config() -> DebounceConfig:
    """
    Load debounce delays from Config with fallback defaults.

    Returns:
        DebounceConfig with values from Config or defaults
    """
    from blind_navigator.utils.config import Config

    return DebounceConfig(
        announcement_delay_ms=int(getattr(Config, "ANNOUNCEMENT_DELAY_MS", 5000)),
        stable_info_delay_ms=int(getattr(Config, "STABLE_INFO_DELAY_MS", 7000)),
    )


def load_pipeline_config() -> PipelineConfig:
    """
    Load pipeline switches from Config with fallback defaults.

    Returns:
        PipelineConfig with values from Config or defaults
    """
    from blind_navigator.utils.config import Config

    return PipelineConfig(
        parallel_decode=bool(getattr(Config, "PARALLEL_DECODE", False)),
        map_to_display=bool(getattr(Config, "MAP_DETECTIONS_TO_DISPLAY", True)),
        strict_tensor_checks=bool(getattr(Config, "STRICT_TENSOR_CHECKS", False)),
        door_label=str(getattr(Config, "DOOR_LABEL", "door")),
    )


def load_audio_config() -> AudioConfig:
    """
    Load speech settings from Config with fallback defaults.

    Returns:
        AudioConfig with values from Config or defaults
    """
    from blind_navigator.utils.config import Config

    return AudioConfig(
        enabled=bool(getattr(Config, "TTS_ENABLED", True)),
        rate=int(getattr(Config, "TTS_RATE", 170)),
        rate_linux=int(getattr(Config, "TTS_RATE_LINUX", 130)),
        voice=getattr(Config, "TTS_VOICE", None),
    )


def load_telemetry_config() -> TelemetryConfig:
    """
    Load telemetry settings from Config with fallback defaults.

    Returns:
        TelemetryConfig with values from Config or defaults
    """
    from blind_navigator.utils.config import Config

    return TelemetryConfig(
        enabled=bool(getattr(Config, "TELEMETRY_ENABLED", False)),
        log_dir=str(getattr(Config, "LOG_DIR", "logs")),
        console_level=str(getattr(Config, "NAV_CONSOLE_LEVEL", "WARNING")).upper(),
        window_frames=max(1, int(getattr(Config, "PROFILE_WINDOW_FRAMES", 30))),
    )
