"""
Simple Builder Pattern - wires the navigation system from Config.
"""

import logging
from typing import Optional

from blind_navigator.core.audio.audio_system import AudioSystem
from blind_navigator.core.navigation.coordinator import Coordinator
from blind_navigator.core.navigation.navigation_decision_engine import NavigationDecisionEngine
from blind_navigator.core.telemetry.loggers.telemetry_logger import TelemetryLogger
from blind_navigator.core.vision.dual_model_detector import DualModelDetector, InferenceBackend
from blind_navigator.core.vision.yolo_decoder import YoloDecoder
from blind_navigator.utils.config import load_env_overrides
from blind_navigator.utils.config_sections import (
    load_debounce_config,
    load_pipeline_config,
    load_spatial_config,
    load_telemetry_config,
)

log = logging.getLogger("Builder")


class Builder:
    """Creates every dependency of the system; components read Config sections."""

    def build_decoder(self, model: str) -> YoloDecoder:
        log.info("Creating %s decoder...", model)
        return YoloDecoder.for_model(model)

    def build_detector(
        self,
        door_backend: Optional[InferenceBackend] = None,
        obstacle_backend: Optional[InferenceBackend] = None,
    ) -> DualModelDetector:
        log.info("Creating DualModelDetector...")
        pipeline_config = load_pipeline_config()
        return DualModelDetector(
            self.build_decoder("door"),
            self.build_decoder("obstacle"),
            door_backend=door_backend,
            obstacle_backend=obstacle_backend,
            parallel=pipeline_config.parallel_decode,
            door_label=pipeline_config.door_label,
        )

    def build_decision_engine(self) -> NavigationDecisionEngine:
        log.info("Creating NavigationDecisionEngine...")
        return NavigationDecisionEngine(
            spatial_config=load_spatial_config(),
            debounce_config=load_debounce_config(),
        )

    def build_audio_system(self) -> AudioSystem:
        log.info("Creating AudioSystem...")
        return AudioSystem()

    def build_telemetry(self) -> Optional[TelemetryLogger]:
        telemetry_config = load_telemetry_config()
        if not telemetry_config.enabled:
            return None
        log.info("Creating TelemetryLogger...")
        return TelemetryLogger(output_dir=telemetry_config.log_dir)

    def build_coordinator(
        self,
        detector: DualModelDetector,
        audio_system=None,
        *,
        decision_engine: Optional[NavigationDecisionEngine] = None,
        telemetry=None,
    ) -> Coordinator:
        log.info("Creating Coordinator...")
        return Coordinator(
            detector=detector,
            audio_system=audio_system,
            decision_engine=decision_engine,
            telemetry=telemetry,
            pipeline_config=load_pipeline_config(),
        )

    def build_full_system(
        self,
        *,
        enable_audio: bool = True,
        telemetry: Optional[TelemetryLogger] = None,
        door_backend: Optional[InferenceBackend] = None,
        obstacle_backend: Optional[InferenceBackend] = None,
    ) -> Coordinator:
        log.info("Building full system...")
        load_env_overrides()

        detector = self.build_detector(door_backend, obstacle_backend)
        decision_engine = self.build_decision_engine()
        audio_system = self.build_audio_system() if enable_audio else None
        if telemetry is None:
            telemetry = self.build_telemetry()

        coordinator = self.build_coordinator(
            detector,
            audio_system,
            decision_engine=decision_engine,
            telemetry=telemetry,
        )
        log.info("Full system built")
        return coordinator


def build_navigation_system(
    enable_audio: bool = True,
    telemetry: Optional[TelemetryLogger] = None,
) -> Coordinator:
    """Convenience function to create the complete system."""
    builder = Builder()
    return builder.build_full_system(enable_audio=enable_audio, telemetry=telemetry)
