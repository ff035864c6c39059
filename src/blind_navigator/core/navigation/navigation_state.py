"""Mutable navigation state owned by the decision engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from blind_navigator.core.vision.detection import Detection


@dataclass(frozen=True)
class Instruction:
    """A spoken instruction plus the timestamp (ms) of the frame that produced it."""

    key: str
    text: str
    timestamp: int = 0


@dataclass
class NavigationState:
    """
    Per-frame scene plus the last announced instruction.

    ``current_door`` and ``current_obstacles`` are rebuilt by begin_frame();
    ``last_instruction_key`` and ``last_instruction_time`` only change through
    record_emission(). Single writer, no locking.
    """

    door_label: str = "door"
    last_instruction_key: str = ""
    last_instruction_time: int = 0
    current_door: Optional[Detection] = None
    current_obstacles: List[Detection] = field(default_factory=list)

    def begin_frame(self, detections: Iterable[Detection]) -> None:
        doors: List[Detection] = []
        obstacles: List[Detection] = []
        for det in detections:
            (doors if det.is_label(self.door_label) else obstacles).append(det)

        # First highest-confidence door wins ties
        self.current_door = max(doors, key=lambda det: det.confidence) if doors else None
        self.current_obstacles = obstacles

    def record_emission(self, instruction: Instruction) -> None:
        self.last_instruction_key = instruction.key
        self.last_instruction_time = instruction.timestamp

    def reset(self) -> None:
        self.last_instruction_key = ""
        self.last_instruction_time = 0
        self.current_door = None
        self.current_obstacles = []


__all__ = ["Instruction", "NavigationState"]
