"""
Navigation Coordinator

Orchestrates the per-frame flow between detection decoding, the navigation
decision engine and the speech sink. Frames are processed one at a time by a
single worker; the caller keeps only the latest frame.

Pipeline Flow:
    Raw tensors → Decode (door + obstacle) → Fuse → Map to display →
    Navigation Decision → Speech
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence

from blind_navigator.core.navigation.navigation_decision_engine import (
    DecisionResult,
    NavigationDecisionEngine,
)
from blind_navigator.core.navigation.navigation_state import Instruction
from blind_navigator.core.vision.detection import Detection, Frame, FrameGeometry
from blind_navigator.core.vision.dual_model_detector import DualModelDetector
from blind_navigator.core.vision.yolo_decoder import TensorShapeError
from blind_navigator.utils.config_sections import (
    PipelineConfig,
    load_pipeline_config,
    load_telemetry_config,
)

log = logging.getLogger("Coordinator")


class Coordinator:
    """
    Orchestrates data flow between detection, navigation, and audio modules.

    Receives pre-configured dependencies via dependency injection and only
    coordinates the processing loop.

    Attributes:
        detector: DualModelDetector decoding and fusing both models
        decision_engine: NavigationDecisionEngine owning the navigation state
        audio_system: Optional speech sink exposing speak_async(text)
        telemetry: Optional TelemetryLogger
    """

    def __init__(
        self,
        detector: DualModelDetector,
        audio_system=None,
        decision_engine: Optional[NavigationDecisionEngine] = None,
        telemetry=None,
        pipeline_config: Optional[PipelineConfig] = None,
        clock=time.time,
    ):
        self.detector = detector
        self.audio_system = audio_system
        self.decision_engine = decision_engine or NavigationDecisionEngine()
        self.telemetry = telemetry
        self.config = pipeline_config or load_pipeline_config()
        self._clock = clock

        self.frames_processed = 0
        self.frames_failed = 0
        self.instructions_emitted = 0
        self.last_instruction: Optional[Instruction] = None
        self.last_result: Optional[DecisionResult] = None
        self.current_detections: List[Detection] = []

        telemetry_config = load_telemetry_config()
        self.profile_enabled = telemetry is not None
        self.profile_window = telemetry_config.window_frames
        self._profile_acc = {'decode': 0.0, 'fusion': 0.0, 'decision': 0.0, 'total': 0.0}
        self._profile_frames = 0

        log.info(
            "Coordinator initialized (audio=%s, telemetry=%s, map_to_display=%s)",
            type(audio_system).__name__ if audio_system else "None",
            type(telemetry).__name__ if telemetry else "None",
            self.config.map_to_display,
        )

    def process_frame(
        self,
        tensors: Mapping[str, Any],
        geometry: FrameGeometry,
    ) -> Optional[Instruction]:
        """
        Decode one frame's raw tensors and run it through the decision engine.

        Args:
            tensors: {"door": tensor_or_None, "obstacle": tensor_or_None}
            geometry: Display size and frame timestamp (ms)

        Returns:
            The emitted Instruction, or None (debounced, skipped or malformed)
        """
        total_start = time.perf_counter()
        geometry = self._stamp(geometry)

        try:
            batch = self.detector.decode(
                tensors.get("door"),
                tensors.get("obstacle"),
                geometry=geometry if self.config.map_to_display else None,
                profile=self.profile_enabled,
            )
        except TensorShapeError as err:
            self.frames_failed += 1
            log.error("Skipping frame at %d: %s", geometry.timestamp, err)
            if self.telemetry is not None:
                self.telemetry.log_error("tensor_shape", str(err), timestamp=geometry.timestamp)
            if self.config.strict_tensor_checks:
                raise
            return None

        if self.profile_enabled:
            self._profile_acc['decode'] += batch.timings.get('decode', 0.0)
            self._profile_acc['fusion'] += batch.timings.get('fusion', 0.0)

        return self._decide(batch.fused, geometry, total_start)

    def process_detections(
        self,
        detections: Sequence[Detection],
        geometry: FrameGeometry,
    ) -> Optional[Instruction]:
        """Run display-space detections straight through the decision engine."""
        return self._decide(list(detections), self._stamp(geometry), time.perf_counter())

    def _decide(
        self,
        detections: List[Detection],
        geometry: FrameGeometry,
        total_start: float,
    ) -> Optional[Instruction]:
        self.frames_processed += 1
        self.current_detections = detections

        decision_start = time.perf_counter()
        result = self.decision_engine.evaluate(Frame(geometry, detections))
        self.last_result = result
        if self.profile_enabled:
            self._profile_acc['decision'] += time.perf_counter() - decision_start

        instruction = result.instruction
        if instruction is not None:
            self.instructions_emitted += 1
            self.last_instruction = instruction
            self._dispatch(instruction)
            if self.telemetry is not None:
                self.telemetry.log_instruction(instruction.timestamp, instruction.key, instruction.text)

        if self.telemetry is not None:
            latency = time.perf_counter() - total_start
            self._profile_acc['total'] += latency
            self.telemetry.log_frame_performance(
                frame_number=self.frames_processed,
                latency_ms=latency * 1000.0,
                detection_count=len(detections),
            )
            self._profile_frames += 1
            if self._profile_frames >= self.profile_window:
                self._log_profile_metrics()

        return instruction

    def _dispatch(self, instruction: Instruction) -> None:
        if self.audio_system is None:
            return
        try:
            self.audio_system.speak_async(instruction.text)
        except Exception as err:
            log.error("Speech dispatch failed for %s: %s", instruction.key, err)

    def _stamp(self, geometry: FrameGeometry) -> FrameGeometry:
        if geometry.timestamp is not None:
            return geometry
        return FrameGeometry(
            geometry.screen_width,
            geometry.screen_height,
            int(self._clock() * 1000),
        )

    def _log_profile_metrics(self) -> None:
        frame_count = max(1, self._profile_frames)
        averaged = {
            key: (value / frame_count) * 1000.0 for key, value in self._profile_acc.items()
        }
        log.info(
            "[PROFILE] decode={decode:.2f}ms | fusion={fusion:.2f}ms | "
            "decision={decision:.2f}ms | total={total:.2f}ms".format(**averaged)
        )
        for key in self._profile_acc:
            self._profile_acc[key] = 0.0
        self._profile_frames = 0

    def get_status(self) -> Dict[str, Any]:
        state = self.decision_engine.state
        return {
            'frames_processed': self.frames_processed,
            'frames_failed': self.frames_failed,
            'instructions_emitted': self.instructions_emitted,
            'last_instruction_key': state.last_instruction_key,
            'last_instruction_time': state.last_instruction_time,
            'detections': len(self.current_detections),
        }

    def cleanup(self) -> None:
        log.info("Cleaning up coordinator...")
        self.detector.shutdown()
        if self.audio_system is not None and hasattr(self.audio_system, 'close'):
            self.audio_system.close()
        if self.telemetry is not None:
            self.telemetry.finalize_session()
