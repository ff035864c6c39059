#!/usr/bin/env python3
"""
Blind Navigator command line.

Replays recorded frames (one JSON object per line) through the decision
engine and prints every emitted instruction:

    blind-navigator replay frames.jsonl --config overrides.json --speak

Line format:
    {"timestamp": 1700000000000, "screen_width": 1080, "screen_height": 1920,
     "detections": [{"box": [l, t, r, b], "label": "door", "confidence": 0.8}]}
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from blind_navigator.core.navigation.builder import Builder
from blind_navigator.core.telemetry.loggers.navigation_logger import get_navigation_logger
from blind_navigator.core.vision.detection import BoundingBox, Detection, FrameGeometry
from blind_navigator.utils.config import Config, load_env_overrides, load_overrides_file

log = logging.getLogger("BlindNavigator")


def parse_frame(record: dict) -> Tuple[FrameGeometry, List[Detection]]:
    """Build geometry and display-space detections from one recorded frame."""
    geometry = FrameGeometry(
        screen_width=int(record["screen_width"]),
        screen_height=int(record["screen_height"]),
        timestamp=None if record.get("timestamp") is None else int(record["timestamp"]),
    )
    detections = []
    for item in record.get("detections", []):
        left, top, right, bottom = (float(v) for v in item["box"])
        detections.append(
            Detection(
                bounding_box=BoundingBox(left, top, right, bottom),
                label=str(item["label"]),
                confidence=float(item.get("confidence", 0.0)),
            )
        )
    return geometry, detections


def iter_frames(path: Path) -> Iterator[Tuple[int, Tuple[FrameGeometry, List[Detection]]]]:
    with path.open("r", encoding="utf-8") as fh:
        for line_number, line in enumerate(fh, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield line_number, parse_frame(json.loads(line))
            except (ValueError, KeyError, TypeError) as err:
                log.error("Skipping malformed frame on line %d: %s", line_number, err)


def replay(args: argparse.Namespace) -> int:
    overrides = {}
    if args.announcement_delay is not None:
        overrides["ANNOUNCEMENT_DELAY_MS"] = args.announcement_delay
    if args.stable_delay is not None:
        overrides["STABLE_INFO_DELAY_MS"] = args.stable_delay
    if overrides:
        Config.apply_overrides(overrides)

    builder = Builder()
    coordinator = builder.build_coordinator(
        builder.build_detector(),
        builder.build_audio_system() if args.speak else None,
        decision_engine=builder.build_decision_engine(),
        telemetry=builder.build_telemetry(),
    )

    try:
        for _, (geometry, detections) in iter_frames(Path(args.frames)):
            instruction = coordinator.process_detections(detections, geometry)
            if instruction is not None:
                print(f"[{instruction.timestamp}] {instruction.key}: {instruction.text}")
    finally:
        coordinator.cleanup()

    status = coordinator.get_status()
    log.info(
        "Replayed %d frames, %d instructions",
        status["frames_processed"],
        status["instructions_emitted"],
    )
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="blind-navigator",
        description="Door-finding navigation instructions from object detections",
    )
    ap.add_argument("--verbose", "-v", action="store_true", help="Log INFO messages to the console")
    sub = ap.add_subparsers(dest="command", required=True)

    rp = sub.add_parser("replay", help="Replay recorded frames from a JSONL file")
    rp.add_argument("frames", help="JSONL file with one frame per line")
    rp.add_argument("--config", help="JSON file with Config overrides")
    rp.add_argument("--speak", action="store_true", help="Speak instructions with the TTS backend")
    rp.add_argument("--announcement-delay", type=int, default=None, help="Delay (ms) before a new instruction")
    rp.add_argument("--stable-delay", type=int, default=None, help="Delay (ms) before repeating an instruction")
    rp.set_defaults(handler=replay)
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    )

    try:
        if getattr(args, "config", None):
            load_overrides_file(args.config)
        else:
            load_env_overrides()
    except (OSError, ValueError) as err:
        log.error("Invalid configuration: %s", err)
        return 2

    get_navigation_logger()
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
