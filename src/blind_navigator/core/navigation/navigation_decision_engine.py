"""Decision engine turning a frame's detections into one debounced instruction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from blind_navigator.core.audio.message_formatter import MessageFormatter
from blind_navigator.core.navigation.navigation_state import Instruction, NavigationState
from blind_navigator.core.navigation.spatial_classifier import SpatialClassifier
from blind_navigator.core.telemetry.loggers.navigation_logger import get_navigation_logger
from blind_navigator.core.vision.detection import Detection, Frame
from blind_navigator.utils.config_sections import (
    DebounceConfig,
    SpatialConfig,
    load_debounce_config,
    load_pipeline_config,
)

NO_RELEVANT_OBJECT = "NO_RELEVANT_OBJECT"


@dataclass
class DecisionResult:
    """Outcome of one frame: the candidate and whether it was announced."""

    candidate: Instruction
    emitted: bool
    reason: str  # "announced", "debounced", "blank_text"
    is_new: bool
    elapsed_ms: int

    @property
    def instruction(self) -> Optional[Instruction]:
        return self.candidate if self.emitted else None


class NavigationDecisionEngine:
    """
    Selects the highest-priority instruction for a frame and debounces it.

    Rules, first match wins:
    1. Near obstacle in front: stop and sidestep, hinting at the door
    2. Door visible: steer toward it
    3. Near obstacle anywhere: caution
    4. Nothing relevant: keep scanning
    """

    def __init__(
        self,
        *,
        state: Optional[NavigationState] = None,
        spatial_config: Optional[SpatialConfig] = None,
        debounce_config: Optional[DebounceConfig] = None,
        message_formatter: Optional[MessageFormatter] = None,
    ) -> None:
        self.state = state or NavigationState(door_label=load_pipeline_config().door_label)
        self.classifier = SpatialClassifier(spatial_config)
        self.debounce = debounce_config or load_debounce_config()
        self.formatter = message_formatter or MessageFormatter()

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def process_frame(self, frame: Frame) -> Optional[Instruction]:
        """Return the instruction to speak for this frame, if any."""
        return self.evaluate(frame).instruction

    def evaluate(self, frame: Frame) -> DecisionResult:
        self.state.begin_frame(frame.detections)
        key, text = self.generate_instruction(frame.screen_width, frame.screen_height)
        candidate = Instruction(key=key, text=text, timestamp=frame.timestamp)

        state = self.state
        now = frame.timestamp
        is_new = key != state.last_instruction_key
        elapsed = now - state.last_instruction_time
        due = (
            (is_new and elapsed >= self.debounce.announcement_delay_ms)
            or (not is_new and elapsed >= self.debounce.stable_info_delay_ms)
        )

        logger = get_navigation_logger().decision
        if not due:
            logger.debug(f"Skipping announcement for key: {key}, New: {is_new}, Elapsed: {elapsed}")
            return DecisionResult(candidate, False, "debounced", is_new, elapsed)

        if not text.strip():
            logger.debug(f"Skipping blank instruction for key: {key}")
            return DecisionResult(candidate, False, "blank_text", is_new, elapsed)

        logger.info(
            f"Announcing: [{key}] {text} (LastKey: {state.last_instruction_key}, "
            f"Elapsed: {elapsed} ms, New: {is_new})"
        )
        state.record_emission(candidate)
        return DecisionResult(candidate, True, "announced", is_new, elapsed)

    def generate_instruction(self, screen_width: int, screen_height: int) -> tuple:
        """Apply the priority rules to the current state; returns (key, text)."""
        frontal = self._find_frontal_near_obstacle(screen_width, screen_height)
        if frontal is not None:
            return self._obstacle_avoidance_instruction(
                frontal, self.state.current_door, screen_width, screen_height
            )

        door = self.state.current_door
        if door is not None:
            return self._door_direction_instruction(door, screen_width, screen_height)

        near = self._find_any_near_obstacle(screen_height)
        if near is not None:
            position = self.classifier.relative_position(near.bounding_box.center_x, screen_width)
            key = f"OBSTACLE_NEAR_{self.formatter.format_label_key(near.label)}_{position.name}"
            return key, self.formatter.build_near_obstacle_message(near.label, position)

        return NO_RELEVANT_OBJECT, self.formatter.build_clear_path_message()

    # ------------------------------------------------------------------
    # rules
    # ------------------------------------------------------------------

    def _near_obstacles(self, screen_height: int) -> List[Detection]:
        return [
            obs
            for obs in self.state.current_obstacles
            if self.classifier.distance_category(obs.bounding_box, screen_height).is_near
        ]

    def _find_frontal_near_obstacle(self, screen_width: int, screen_height: int) -> Optional[Detection]:
        frontal = [
            obs
            for obs in self._near_obstacles(screen_height)
            if self.classifier.relative_position(obs.bounding_box.center_x, screen_width).is_frontal
        ]
        if not frontal:
            return None
        return max(frontal, key=lambda obs: obs.bounding_box.area)

    def _find_any_near_obstacle(self, screen_height: int) -> Optional[Detection]:
        near = self._near_obstacles(screen_height)
        if not near:
            return None
        return max(near, key=lambda obs: obs.confidence)

    def _obstacle_avoidance_instruction(
        self,
        obstacle: Detection,
        door: Optional[Detection],
        screen_width: int,
        screen_height: int,
    ) -> tuple:
        box = obstacle.bounding_box
        distance = self.classifier.distance_category(box, screen_height)
        pass_right = box.center_x > screen_width / 2.0
        door_side = None

        if door is not None:
            door_center_x = door.bounding_box.center_x
            if door_center_x < box.left:
                pass_right = False
                door_side = "left"
            elif door_center_x > box.right:
                pass_right = True
                door_side = "right"

        key = (
            f"OBSTACLE_FRONTAL_{self.formatter.format_label_key(obstacle.label)}_{distance.name}"
            f"_PASS_{'RIGHT' if pass_right else 'LEFT'}"
        )
        text = self.formatter.build_obstacle_avoidance_message(
            obstacle.label, distance, pass_right, door_side
        )
        return key, text

    def _door_direction_instruction(self, door: Detection, screen_width: int, screen_height: int) -> tuple:
        box = door.bounding_box
        angle = self.classifier.turn_angle_degrees(box.center_x, screen_width)
        abs_angle = abs(angle)
        distance = self.classifier.distance_category(box, screen_height)

        logger = get_navigation_logger().decision
        logger.debug(
            f"Door guidance: sw={screen_width} sh={screen_height} center_x={box.center_x:.1f} "
            f"angle={angle} distance={distance.name}"
        )

        if abs_angle < self.classifier.config.min_turn_angle_degrees:
            position_text = "straight ahead"
            if distance.is_near:
                action = "Door is very close. Approach carefully."
            else:
                action = "Move forward."
            suffix = "CENTER"
        else:
            position = self.classifier.relative_position(box.center_x, screen_width)
            position_text = self.formatter.format_position(position)
            side = "left" if angle < 0 else "right"
            action = f"Turn about {abs_angle} degrees to your {side}."
            suffix = f"{side.upper()}_{abs_angle}"

        key = f"DOOR_{suffix}_{distance.name}"
        return key, self.formatter.build_door_message(position_text, distance, action)


__all__ = ["DecisionResult", "NavigationDecisionEngine", "NO_RELEVANT_OBJECT"]
