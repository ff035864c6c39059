"""Merge door-model and obstacle-model detections for one frame."""

from __future__ import annotations

import logging
from typing import List, Sequence

from .detection import Detection

log = logging.getLogger(__name__)


def fuse_detections(
    door_detections: Sequence[Detection],
    obstacle_detections: Sequence[Detection],
    door_label: str = "door",
) -> List[Detection]:
    """
    Combine both models' detections into one list.

    When the door model already found a door, door-labeled boxes from the
    obstacle model are dropped. Labels compare case-insensitively.

    Args:
        door_detections: Output of the door model
        obstacle_detections: Output of the obstacle model
        door_label: Label naming a door in either vocabulary

    Returns:
        Door-model detections followed by the surviving obstacle detections
    """
    fused = list(door_detections)
    door_already_found = any(det.is_label(door_label) for det in fused)

    dropped = 0
    for det in obstacle_detections:
        if door_already_found and det.is_label(door_label):
            dropped += 1
            continue
        fused.append(det)

    if dropped:
        log.debug("Dropped %d duplicate door detections from obstacle model", dropped)
    return fused


__all__ = ["fuse_detections"]
