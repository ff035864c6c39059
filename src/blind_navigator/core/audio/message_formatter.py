"""
Message formatter for spoken navigation instructions.

Centralizes the phrasing used by the decision engine so every rule renders
labels, distances and positions the same way.
"""

import logging
from typing import Optional

from blind_navigator.core.navigation.spatial_classifier import DistanceCategory, RelativePosition

log = logging.getLogger(__name__)


POSITION_TEXT = {
    RelativePosition.SLIGHT_LEFT: "slightly to your left",
    RelativePosition.LEFT: "to your left",
    RelativePosition.FAR_LEFT: "far to your left",
    RelativePosition.SLIGHT_RIGHT: "slightly to your right",
    RelativePosition.RIGHT: "to your right",
    RelativePosition.FAR_RIGHT: "far to your right",
    RelativePosition.UNKNOWN: "at an unknown position",
}

CLEAR_PATH_TEXT = "Path appears clear. Scan for the door."


class MessageFormatter:
    """
    Centralized service for formatting navigation instruction text.

    Handles:
    - Label capitalization for speech and upper-casing for keys
    - Distance and position phrases
    - Full sentences for each decision rule
    """

    def format_label(self, label: str) -> str:
        """
        Capitalize the first character only.

        Examples:
            >>> formatter.format_label("traffic light")
            "Traffic light"
        """
        label = str(label or "")
        return label[:1].upper() + label[1:]

    def format_label_key(self, label: str) -> str:
        """Upper-cased label for instruction keys (spaces kept)."""
        return str(label or "").upper()

    def format_distance(self, distance: DistanceCategory) -> str:
        """
        Examples:
            >>> formatter.format_distance(DistanceCategory.VERY_CLOSE)
            "very close"
        """
        return distance.name.lower().replace("_", " ")

    def format_position(self, position: RelativePosition, is_obstacle: bool = False) -> str:
        if position is RelativePosition.CENTER:
            return "directly ahead" if is_obstacle else "straight ahead"
        if position is RelativePosition.UNKNOWN:
            log.warning("Formatting unknown position (screen width not positive)")
        return POSITION_TEXT[position]

    def build_obstacle_avoidance_message(
        self,
        label: str,
        distance: DistanceCategory,
        pass_right: bool,
        door_side: Optional[str] = None,
    ) -> str:
        """
        Build the stop-and-sidestep message for a frontal obstacle.

        Args:
            label: Obstacle label
            distance: Obstacle distance bucket
            pass_right: Advise passing on the right instead of the left
            door_side: "left" / "right" when a door lies beyond that edge

        Examples:
            >>> formatter.build_obstacle_avoidance_message(
            ...     "chair", DistanceCategory.CLOSE, pass_right=True, door_side="right")
            "Stop. Chair close ahead. Door is to its right. Try moving slightly to your right to pass."
        """
        text = f"Stop. {self.format_label(label)} {self.format_distance(distance)} ahead. "
        if door_side:
            text += f"Door is to its {door_side}. "
        side = "right" if pass_right else "left"
        return text + f"Try moving slightly to your {side} to pass."

    def build_door_message(
        self,
        position_text: str,
        distance: DistanceCategory,
        action_text: str,
    ) -> str:
        return f"Door {position_text}, approximately {self.format_distance(distance)}. {action_text}"

    def build_near_obstacle_message(self, label: str, position: RelativePosition) -> str:
        """
        Examples:
            >>> formatter.build_near_obstacle_message("person", RelativePosition.CENTER)
            "Person directly ahead, proceed with caution."
        """
        position_text = self.format_position(position, is_obstacle=True)
        return f"{self.format_label(label)} {position_text}, proceed with caution."

    def build_clear_path_message(self) -> str:
        return CLEAR_PATH_TEXT


__all__ = ["MessageFormatter", "CLEAR_PATH_TEXT"]
