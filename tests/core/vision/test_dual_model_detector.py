"""Tests for DualModelDetector decode, fusion and backends."""

from __future__ import annotations

import pytest

from blind_navigator.core.vision.detection import FrameGeometry
from blind_navigator.core.vision.dual_model_detector import DualModelDetector
from blind_navigator.core.vision.yolo_decoder import TensorShapeError, YoloDecoder, YoloModelConfig

DOOR_TENSOR = [0.5, 0.5, 0.25, 0.5, 0.9]
OBSTACLE_TENSOR = [
    0.5, 0.5, 0.25, 0.5, 0.1, 0.95,   # door-labeled obstacle hit
    0.25, 0.5, 0.1, 0.1, 0.8, 0.0,    # chair
]


def make_decoders():
    door = YoloDecoder(
        YoloModelConfig(name="door", labels=("door",), confidence=0.3, input_width=100, input_height=100, num_predictions=1)
    )
    obstacle = YoloDecoder(
        YoloModelConfig(name="obstacle", labels=("chair", "door"), confidence=0.6, num_predictions=2)
    )
    return door, obstacle


class StubBackend:
    def __init__(self, tensor) -> None:
        self.tensor = tensor
        self.calls = 0

    def run(self, image):
        self.calls += 1
        return self.tensor


class FailingBackend:
    def run(self, image):
        raise RuntimeError("delegate crashed")


@pytest.fixture(params=[False, True], ids=["sequential", "parallel"])
def detector(request):
    door, obstacle = make_decoders()
    det = DualModelDetector(door, obstacle, parallel=request.param)
    yield det
    det.shutdown()


def test_decode_fuses_both_models(detector: DualModelDetector) -> None:
    batch = detector.decode(DOOR_TENSOR, OBSTACLE_TENSOR)

    assert [d.label for d in batch.door] == ["door"]
    assert [d.label for d in batch.obstacle] == ["door", "chair"]
    assert [d.label for d in batch.fused] == ["door", "chair"]
    assert batch.fused[0] is batch.door[0]


def test_parallel_and_sequential_agree() -> None:
    door, obstacle = make_decoders()
    sequential = DualModelDetector(door, obstacle)
    parallel = DualModelDetector(door, obstacle, parallel=True)
    try:
        assert sequential.decode(DOOR_TENSOR, OBSTACLE_TENSOR).fused == parallel.decode(
            DOOR_TENSOR, OBSTACLE_TENSOR
        ).fused
    finally:
        parallel.shutdown()


def test_missing_tensor_yields_partial_results(detector: DualModelDetector) -> None:
    batch = detector.decode(None, OBSTACLE_TENSOR)

    assert batch.door == []
    assert [d.label for d in batch.fused] == ["door", "chair"]


def test_shape_error_propagates(detector: DualModelDetector) -> None:
    with pytest.raises(TensorShapeError):
        detector.decode([0.1] * 4, OBSTACLE_TENSOR)


def test_geometry_maps_each_model_to_display() -> None:
    door, obstacle = make_decoders()
    detector = DualModelDetector(door, obstacle)

    batch = detector.decode(DOOR_TENSOR, None, geometry=FrameGeometry(1000, 2000))

    # Door model input is 100x100: scale x10 horizontally, x20 vertically
    assert batch.door[0].bounding_box.as_tuple() == pytest.approx((375.0, 500.0, 625.0, 1500.0))


def test_profile_records_timings() -> None:
    door, obstacle = make_decoders()
    batch = DualModelDetector(door, obstacle).decode(DOOR_TENSOR, OBSTACLE_TENSOR, profile=True)

    assert set(batch.timings) == {"decode", "fusion"}


def test_detect_runs_backends() -> None:
    door, obstacle = make_decoders()
    door_backend = StubBackend(DOOR_TENSOR)
    obstacle_backend = StubBackend(OBSTACLE_TENSOR)
    detector = DualModelDetector(
        door, obstacle, door_backend=door_backend, obstacle_backend=obstacle_backend
    )

    batch = detector.detect(image=object(), profile=True)

    assert door_backend.calls == 1 and obstacle_backend.calls == 1
    assert len(batch.fused) == 2
    assert "inference" in batch.timings


def test_detect_treats_missing_or_failing_backend_as_unavailable() -> None:
    door, obstacle = make_decoders()
    detector = DualModelDetector(
        door, obstacle, door_backend=FailingBackend(), obstacle_backend=None
    )

    batch = detector.detect(image=object())

    assert batch.fused == []
