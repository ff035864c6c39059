"""Tests for MessageFormatter phrasing."""

from __future__ import annotations

import logging

import pytest

from blind_navigator.core.audio.message_formatter import CLEAR_PATH_TEXT, MessageFormatter
from blind_navigator.core.navigation.spatial_classifier import DistanceCategory, RelativePosition


@pytest.fixture()
def formatter() -> MessageFormatter:
    return MessageFormatter()


def test_format_label_capitalizes_first_character_only(formatter: MessageFormatter) -> None:
    assert formatter.format_label("traffic light") == "Traffic light"
    assert formatter.format_label("tV") == "TV"
    assert formatter.format_label("") == ""


def test_format_label_key_keeps_spaces(formatter: MessageFormatter) -> None:
    assert formatter.format_label_key("cell phone") == "CELL PHONE"


@pytest.mark.parametrize(
    "distance, expected",
    [
        (DistanceCategory.VERY_CLOSE, "very close"),
        (DistanceCategory.CLOSE, "close"),
        (DistanceCategory.MEDIUM, "medium"),
        (DistanceCategory.FAR, "far"),
        (DistanceCategory.UNKNOWN, "unknown"),
    ],
)
def test_format_distance(formatter: MessageFormatter, distance, expected) -> None:
    assert formatter.format_distance(distance) == expected


def test_format_position_center_depends_on_subject(formatter: MessageFormatter) -> None:
    assert formatter.format_position(RelativePosition.CENTER) == "straight ahead"
    assert formatter.format_position(RelativePosition.CENTER, is_obstacle=True) == "directly ahead"


def test_format_position_covers_every_bucket(formatter: MessageFormatter) -> None:
    texts = {position: formatter.format_position(position) for position in RelativePosition}

    assert texts[RelativePosition.FAR_RIGHT] == "far to your right"
    assert texts[RelativePosition.SLIGHT_LEFT] == "slightly to your left"
    assert texts[RelativePosition.UNKNOWN] == "at an unknown position"
    assert len(set(texts.values())) == len(RelativePosition)


def test_format_unknown_position_logs_warning(formatter: MessageFormatter, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="blind_navigator.core.audio.message_formatter"):
        text = formatter.format_position(RelativePosition.UNKNOWN)

    assert text == "at an unknown position"
    assert "unknown position" in caplog.text


def test_obstacle_avoidance_message(formatter: MessageFormatter) -> None:
    text = formatter.build_obstacle_avoidance_message(
        "chair", DistanceCategory.VERY_CLOSE, pass_right=False, door_side="left"
    )

    assert text == "Stop. Chair very close ahead. Door is to its left. Try moving slightly to your left to pass."


def test_door_and_clear_messages(formatter: MessageFormatter) -> None:
    assert formatter.build_door_message("to your right", DistanceCategory.CLOSE, "Turn about 20 degrees to your right.") == (
        "Door to your right, approximately close. Turn about 20 degrees to your right."
    )
    assert formatter.build_clear_path_message() == CLEAR_PATH_TEXT
