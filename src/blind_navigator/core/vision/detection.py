"""
Detection data structures shared by the decoder and the decision engine.

This module defines the immutable BoundingBox and Detection values produced by
the YOLO decoder, and the Frame/FrameGeometry pair describing one camera
analysis cycle in display pixel space.

Usage:
    det = Detection(
        bounding_box=BoundingBox(100, 150, 200, 300),
        label="door",
        confidence=0.82,
    )
    frame = Frame(FrameGeometry(1080, 1920, timestamp=1_700_000_000_000), [det])
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box (left, top, right, bottom) in one pixel space."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    @property
    def area(self) -> float:
        return self.width * self.height

    def scaled(self, sx: float, sy: float) -> "BoundingBox":
        return BoundingBox(self.left * sx, self.top * sy, self.right * sx, self.bottom * sy)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class Detection:
    """
    A labeled, confidence-scored bounding box from one inference pass.

    Attributes:
        bounding_box: Box in detector or display pixel space
        label: Class name from the producing model's vocabulary
        confidence: Best class score (0-1)
    """

    bounding_box: BoundingBox
    label: str
    confidence: float

    def is_label(self, label: str) -> bool:
        return self.label.lower() == label.lower()


@dataclass(frozen=True)
class FrameGeometry:
    """Display dimensions and capture time (ms) of one analysis cycle.

    A ``None`` timestamp means the capture time is unknown; 0 is a real time.
    """

    screen_width: int
    screen_height: int
    timestamp: Optional[int] = None


@dataclass
class Frame:
    """One camera analysis cycle: geometry plus the unordered detections."""

    geometry: FrameGeometry
    detections: List[Detection] = field(default_factory=list)

    @property
    def screen_width(self) -> int:
        return self.geometry.screen_width

    @property
    def screen_height(self) -> int:
        return self.geometry.screen_height

    @property
    def timestamp(self) -> int:
        timestamp = self.geometry.timestamp
        return 0 if timestamp is None else timestamp


def map_to_display(
    detections: Sequence[Detection],
    source_size: Tuple[int, int],
    geometry: FrameGeometry,
) -> List[Detection]:
    """
    Rescale detector-space boxes to the display described by geometry.

    Args:
        detections: Detections in model input pixel space
        source_size: (width, height) of the model input
        geometry: Target display dimensions

    Returns:
        New detections with scaled boxes; unchanged if any size is non-positive
    """
    src_w, src_h = source_size
    if src_w <= 0 or src_h <= 0 or geometry.screen_width <= 0 or geometry.screen_height <= 0:
        return list(detections)

    sx = geometry.screen_width / float(src_w)
    sy = geometry.screen_height / float(src_h)
    return [
        Detection(det.bounding_box.scaled(sx, sy), det.label, det.confidence)
        for det in detections
    ]


__all__ = ["BoundingBox", "Detection", "Frame", "FrameGeometry", "map_to_display"]
