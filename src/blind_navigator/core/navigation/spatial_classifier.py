"""Distance, position and turn-angle buckets for a box on the display."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from blind_navigator.core.vision.detection import BoundingBox
from blind_navigator.utils.config_sections import SpatialConfig, load_spatial_config


class DistanceCategory(Enum):
    UNKNOWN = "unknown"
    VERY_CLOSE = "very_close"
    CLOSE = "close"
    MEDIUM = "medium"
    FAR = "far"

    @property
    def is_near(self) -> bool:
        return self in (DistanceCategory.VERY_CLOSE, DistanceCategory.CLOSE)


class RelativePosition(Enum):
    UNKNOWN = "unknown"
    CENTER = "center"
    SLIGHT_LEFT = "slight_left"
    SLIGHT_RIGHT = "slight_right"
    LEFT = "left"
    RIGHT = "right"
    FAR_LEFT = "far_left"
    FAR_RIGHT = "far_right"

    @property
    def is_frontal(self) -> bool:
        return self in (
            RelativePosition.CENTER,
            RelativePosition.SLIGHT_LEFT,
            RelativePosition.SLIGHT_RIGHT,
        )


class SpatialClassifier:
    """
    Stateless bucketing of boxes in display pixel space.

    Every method is total: a non-positive screen dimension yields UNKNOWN
    (or a 0 degree angle) instead of raising.
    """

    def __init__(self, config: Optional[SpatialConfig] = None) -> None:
        self.config = config or load_spatial_config()

    def distance_category(self, box: BoundingBox, screen_height: int) -> DistanceCategory:
        """Bucket by box height as a fraction of the screen height."""
        if screen_height <= 0:
            return DistanceCategory.UNKNOWN

        cfg = self.config
        ratio = box.height / float(screen_height)
        if ratio > cfg.very_close_ratio:
            return DistanceCategory.VERY_CLOSE
        if ratio > cfg.close_ratio:
            return DistanceCategory.CLOSE
        if ratio > cfg.medium_ratio:
            return DistanceCategory.MEDIUM
        return DistanceCategory.FAR

    def relative_position(self, center_x: float, screen_width: int) -> RelativePosition:
        """Bucket by signed deviation from screen center (-1 left edge, +1 right edge)."""
        if screen_width <= 0:
            return RelativePosition.UNKNOWN

        cfg = self.config
        screen_center = screen_width / 2.0
        deviation = (center_x - screen_center) / screen_center

        # Most extreme bucket first
        if abs(deviation) < cfg.center_ratio:
            return RelativePosition.CENTER
        if deviation < -cfg.far_side_ratio:
            return RelativePosition.FAR_LEFT
        if deviation < -cfg.side_ratio:
            return RelativePosition.LEFT
        if deviation < 0:
            return RelativePosition.SLIGHT_LEFT
        if deviation > cfg.far_side_ratio:
            return RelativePosition.FAR_RIGHT
        if deviation > cfg.side_ratio:
            return RelativePosition.RIGHT
        return RelativePosition.SLIGHT_RIGHT

    def turn_angle_degrees(self, center_x: float, screen_width: int) -> int:
        """
        Signed horizontal angle to a point, projected through the camera FOV.

        Negative is left. Clamped to +/- FOV and rounded half up.
        """
        if screen_width <= 0:
            return 0

        fov = self.config.horizontal_fov_degrees
        half_width = screen_width / 2.0
        deviation_px = center_x - half_width
        tan_half_fov = math.tan(math.radians(fov / 2.0))
        angle = math.degrees(math.atan(deviation_px * tan_half_fov / half_width))
        angle = max(-fov, min(fov, angle))
        return int(math.floor(angle + 0.5))


_default_classifier: Optional[SpatialClassifier] = None


def _classifier() -> SpatialClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = SpatialClassifier(SpatialConfig())
    return _default_classifier


def distance_category(box: BoundingBox, screen_height: int) -> DistanceCategory:
    return _classifier().distance_category(box, screen_height)


def relative_position(center_x: float, screen_width: int) -> RelativePosition:
    return _classifier().relative_position(center_x, screen_width)


def turn_angle_degrees(center_x: float, screen_width: int, horizontal_fov_degrees: float = 70.0) -> int:
    if horizontal_fov_degrees == _classifier().config.horizontal_fov_degrees:
        return _classifier().turn_angle_degrees(center_x, screen_width)
    return SpatialClassifier(
        SpatialConfig(horizontal_fov_degrees=horizontal_fov_degrees)
    ).turn_angle_degrees(center_x, screen_width)


__all__ = [
    "DistanceCategory",
    "RelativePosition",
    "SpatialClassifier",
    "distance_category",
    "relative_position",
    "turn_angle_degrees",
]
