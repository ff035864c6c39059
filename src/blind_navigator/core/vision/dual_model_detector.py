"""Door + obstacle detection stage: decode both models and fuse the results."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from blind_navigator.core.telemetry.loggers.navigation_logger import get_navigation_logger

from .detection import Detection, FrameGeometry, map_to_display
from .detection_fusion import fuse_detections
from .yolo_decoder import YoloDecoder

log = logging.getLogger("DualModelDetector")


class InferenceBackend(Protocol):
    """Anything that turns an input image into a raw output tensor."""

    def run(self, image: Any) -> Any:
        ...


@dataclass
class DetectionBatch:
    """Container for one frame's detection outputs."""

    door: List[Detection]
    obstacle: List[Detection]
    fused: List[Detection]
    timings: Dict[str, float] = field(default_factory=dict)


class DualModelDetector:
    """Runs the door and obstacle decoders and merges their detections.

    Decoders hold no mutable state, so with ``parallel=True`` both run on a
    two-worker pool; fusion waits for both futures.
    """

    def __init__(
        self,
        door_decoder: YoloDecoder,
        obstacle_decoder: YoloDecoder,
        *,
        door_backend: Optional[InferenceBackend] = None,
        obstacle_backend: Optional[InferenceBackend] = None,
        parallel: bool = False,
        door_label: str = "door",
    ) -> None:
        self.door_decoder = door_decoder
        self.obstacle_decoder = obstacle_decoder
        self.door_backend = door_backend
        self.obstacle_backend = obstacle_backend
        self.parallel = parallel
        self.door_label = door_label
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=2, thread_name_prefix="decode") if parallel else None
        )
        log.info("[Detector] Running in %s mode", "parallel" if parallel else "sequential")

    def detect(
        self,
        image: Any,
        *,
        geometry: Optional[FrameGeometry] = None,
        profile: bool = False,
    ) -> DetectionBatch:
        """Run both inference backends on an image, then decode and fuse."""
        timings: Dict[str, float] = {}
        infer_start = time.perf_counter() if profile else None
        door_tensor = self._run_backend(self.door_backend, image, "door")
        obstacle_tensor = self._run_backend(self.obstacle_backend, image, "obstacle")
        if profile and infer_start is not None:
            timings["inference"] = time.perf_counter() - infer_start

        batch = self.decode(door_tensor, obstacle_tensor, geometry=geometry, profile=profile)
        batch.timings.update(timings)
        return batch

    def decode(
        self,
        door_tensor: Optional[Any],
        obstacle_tensor: Optional[Any],
        *,
        geometry: Optional[FrameGeometry] = None,
        profile: bool = False,
    ) -> DetectionBatch:
        """Decode both raw tensors and fuse them. TensorShapeError propagates.

        With ``geometry`` each model's boxes are rescaled from its input
        resolution to the display before fusion.
        """
        timings: Dict[str, float] = {}
        decode_start = time.perf_counter() if profile else None

        if self._executor is not None:
            door_future = self._executor.submit(self.door_decoder.decode, door_tensor)
            obstacle_future = self._executor.submit(self.obstacle_decoder.decode, obstacle_tensor)
            # Both results are required before fusion
            door = door_future.result()
            obstacle = obstacle_future.result()
        else:
            door = self.door_decoder.decode(door_tensor)
            obstacle = self.obstacle_decoder.decode(obstacle_tensor)

        if profile and decode_start is not None:
            timings["decode"] = time.perf_counter() - decode_start

        if geometry is not None:
            door = map_to_display(door, self.door_decoder.config.input_size, geometry)
            obstacle = map_to_display(obstacle, self.obstacle_decoder.config.input_size, geometry)

        fuse_start = time.perf_counter() if profile else None
        fused = fuse_detections(door, obstacle, door_label=self.door_label)
        if profile and fuse_start is not None:
            timings["fusion"] = time.perf_counter() - fuse_start

        get_navigation_logger().detector.debug(
            f"door={len(door)} obstacle={len(obstacle)} fused={len(fused)}"
        )
        return DetectionBatch(door=door, obstacle=obstacle, fused=fused, timings=timings)

    @staticmethod
    def _run_backend(backend: Optional[InferenceBackend], image: Any, name: str) -> Optional[Any]:
        if backend is None:
            log.error("%s interpreter is not available", name)
            return None
        try:
            return backend.run(image)
        except Exception as err:
            log.error("Error running %s inference: %s", name, err, exc_info=True)
            return None

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


__all__ = ["DetectionBatch", "DualModelDetector", "InferenceBackend"]
