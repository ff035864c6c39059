"""Tests for the blind-navigator replay command."""

from __future__ import annotations

import json

import pytest

from blind_navigator import main as main_module
from blind_navigator.utils.config import Config


def write_frames(path, frames) -> None:
    path.write_text("\n".join(json.dumps(frame) for frame in frames) + "\n")


def frame(timestamp, detections=()):
    return {
        "timestamp": timestamp,
        "screen_width": 1000,
        "screen_height": 1000,
        "detections": list(detections),
    }


DOOR = {"box": [100, 100, 200, 200], "label": "door", "confidence": 0.8}


def test_replay_prints_emitted_instructions(tmp_path, capsys: pytest.CaptureFixture) -> None:
    frames = tmp_path / "frames.jsonl"
    write_frames(frames, [frame(10_000), frame(12_000), frame(16_000, [DOOR])])

    assert main_module.main(["replay", str(frames)]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == [
        "[10000] NO_RELEVANT_OBJECT: Path appears clear. Scan for the door.",
        "[16000] DOOR_LEFT_26_MEDIUM: Door far to your left, approximately medium. "
        "Turn about 26 degrees to your left.",
    ]


def test_replay_delay_flags(tmp_path, capsys: pytest.CaptureFixture) -> None:
    frames = tmp_path / "frames.jsonl"
    write_frames(frames, [frame(1_000), frame(1_500), frame(2_000, [DOOR])])

    main_module.main(["replay", str(frames), "--announcement-delay", "100", "--stable-delay", "400"])

    out = capsys.readouterr().out.strip().splitlines()
    assert [line.split()[0] for line in out] == ["[1000]", "[1500]", "[2000]"]
    assert Config.ANNOUNCEMENT_DELAY_MS == 100


def test_replay_config_file(tmp_path, capsys: pytest.CaptureFixture) -> None:
    frames = tmp_path / "frames.jsonl"
    write_frames(frames, [frame(1_000), frame(2_000)])
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"ANNOUNCEMENT_DELAY_MS": 1000, "STABLE_INFO_DELAY_MS": 1000}))

    main_module.main(["replay", str(frames), "--config", str(config)])

    assert len(capsys.readouterr().out.strip().splitlines()) == 2


def test_replay_skips_malformed_lines(tmp_path, capsys: pytest.CaptureFixture) -> None:
    frames = tmp_path / "frames.jsonl"
    frames.write_text("not json\n" + json.dumps({"timestamp": 1}) + "\n\n" + json.dumps(frame(10_000)) + "\n")

    assert main_module.main(["replay", str(frames)]) == 0

    assert capsys.readouterr().out.strip().splitlines() == [
        "[10000] NO_RELEVANT_OBJECT: Path appears clear. Scan for the door."
    ]


def test_invalid_config_file_exit_code(tmp_path) -> None:
    frames = tmp_path / "frames.jsonl"
    write_frames(frames, [frame(10_000)])
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"NOT_A_SETTING": 1}))

    assert main_module.main(["replay", str(frames), "--config", str(config)]) == 2


def test_parse_frame_builds_detections() -> None:
    geometry, detections = main_module.parse_frame(frame(5, [DOOR]))

    assert (geometry.screen_width, geometry.screen_height, geometry.timestamp) == (1000, 1000, 5)
    assert detections[0].bounding_box.center_x == 150.0
    assert detections[0].label == "door"


def test_replay_keeps_zero_timestamp(tmp_path, capsys: pytest.CaptureFixture) -> None:
    frames = tmp_path / "frames.jsonl"
    write_frames(frames, [frame(0), frame(8_000), frame(16_000), frame(24_000)])

    assert main_module.main(["replay", str(frames)]) == 0

    out = capsys.readouterr().out.strip().splitlines()
    # t=0 is inside the announcement delay of a fresh session
    assert [line.split()[0] for line in out] == ["[8000]", "[16000]", "[24000]"]


def test_parse_frame_without_timestamp() -> None:
    record = frame(0)
    del record["timestamp"]

    geometry, _ = main_module.parse_frame(record)

    assert geometry.timestamp is None
    assert main_module.parse_frame(frame(0))[0].timestamp == 0


def test_command_required() -> None:
    with pytest.raises(SystemExit):
        main_module.parse_args([])
