"""Decoder for raw YOLO output tensors (door and obstacle models)."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from blind_navigator.utils.config import Config
from .detection import BoundingBox, Detection

log = logging.getLogger("YoloDecoder")

LAYOUTS = {"rows", "channels_first"}


class TensorShapeError(ValueError):
    """Raised when a tensor does not hold numPredictions x (4 + numClasses) values."""


@dataclass(frozen=True)
class YoloModelConfig:
    """Decoding configuration for one detection model."""

    name: str
    labels: Tuple[str, ...]
    confidence: float
    input_width: int = 640
    input_height: int = 640
    num_predictions: Optional[int] = 8400
    layout: str = "rows"

    def __post_init__(self) -> None:
        if not self.labels:
            raise ValueError(f"Model '{self.name}' needs at least one label")
        if self.layout not in LAYOUTS:
            raise ValueError(f"Unknown tensor layout '{self.layout}' for model '{self.name}'")
        if self.input_width <= 0 or self.input_height <= 0:
            raise ValueError(f"Model '{self.name}' input size must be positive")

    @property
    def num_classes(self) -> int:
        return len(self.labels)

    @property
    def stride(self) -> int:
        return 4 + self.num_classes

    @property
    def input_size(self) -> Tuple[int, int]:
        return (self.input_width, self.input_height)

    @classmethod
    def for_model(cls, model: str) -> "YoloModelConfig":
        model = model.lower()
        if model == "door":
            return cls(
                name="door",
                labels=tuple(Config.DOOR_MODEL_LABELS),
                confidence=float(Config.DOOR_MODEL_CONFIDENCE),
                input_width=int(Config.DOOR_MODEL_INPUT_WIDTH),
                input_height=int(Config.DOOR_MODEL_INPUT_HEIGHT),
                num_predictions=getattr(Config, "DOOR_MODEL_NUM_PREDICTIONS", 8400),
                layout=getattr(Config, "DOOR_MODEL_LAYOUT", "rows"),
            )
        if model == "obstacle":
            return cls(
                name="obstacle",
                labels=tuple(Config.OBSTACLE_MODEL_LABELS),
                confidence=float(Config.OBSTACLE_MODEL_CONFIDENCE),
                input_width=int(Config.OBSTACLE_MODEL_INPUT_WIDTH),
                input_height=int(Config.OBSTACLE_MODEL_INPUT_HEIGHT),
                num_predictions=getattr(Config, "OBSTACLE_MODEL_NUM_PREDICTIONS", 8400),
                layout=getattr(Config, "OBSTACLE_MODEL_LAYOUT", "rows"),
            )
        raise ValueError(f"Unknown detection model '{model}'")

    def with_overrides(self, **overrides) -> "YoloModelConfig":
        mapped = {}
        for key, value in overrides.items():
            if key in {"conf", "confidence"}:
                mapped["confidence"] = float(value)
            elif key in {"labels", "names"}:
                mapped["labels"] = tuple(value)
            elif key in {"imgsz", "image_size"}:
                mapped["input_width"] = int(value)
                mapped["input_height"] = int(value)
            elif key in {"input_width", "input_height"}:
                mapped[key] = int(value)
            elif key in {"num_predictions", "anchors"}:
                mapped["num_predictions"] = None if value is None else int(value)
            elif key == "layout":
                mapped["layout"] = str(value)
            elif key == "name":
                mapped["name"] = str(value)
            else:
                raise ValueError(f"Unsupported model override '{key}'")

        data = asdict(self)
        data.update(mapped)
        return YoloModelConfig(**data)


class YoloDecoder:
    """Turns one model's raw output tensor into thresholded detections.

    Each anchor cell contributes at most one detection: the argmax class,
    kept when its score reaches the model threshold. No cross-cell
    suppression is done, overlapping boxes from different cells all survive.
    """

    def __init__(self, model_config: YoloModelConfig) -> None:
        self.config = model_config
        log.info(
            "Init model=%s classes=%d conf=%.2f input=%dx%d predictions=%s layout=%s",
            model_config.name,
            model_config.num_classes,
            model_config.confidence,
            model_config.input_width,
            model_config.input_height,
            model_config.num_predictions,
            model_config.layout,
        )

    @classmethod
    def for_model(cls, model: str, **overrides) -> "YoloDecoder":
        base = YoloModelConfig.for_model(model)
        return cls(base.with_overrides(**overrides) if overrides else base)

    def decode(self, tensor: Optional[Any]) -> List[Detection]:
        """Decode a flattened tensor; a missing tensor yields no detections."""
        if tensor is None:
            log.error("%s model output unavailable, skipping decode", self.config.name)
            return []

        rows = self._as_rows(tensor)
        if rows.shape[0] == 0:
            return []

        cfg = self.config
        scores = rows[:, 4:]
        best_class = np.argmax(scores, axis=1)
        best_score = scores[np.arange(rows.shape[0]), best_class]
        keep = np.nonzero((best_score >= cfg.confidence) & (best_score > 0.0))[0]

        cx = rows[keep, 0] * cfg.input_width
        cy = rows[keep, 1] * cfg.input_height
        w = rows[keep, 2] * cfg.input_width
        h = rows[keep, 3] * cfg.input_height

        left = np.maximum(0.0, cx - w / 2.0)
        top = np.maximum(0.0, cy - h / 2.0)
        right = np.minimum(float(cfg.input_width), cx + w / 2.0)
        bottom = np.minimum(float(cfg.input_height), cy + h / 2.0)

        detections = [
            Detection(
                bounding_box=BoundingBox(float(l), float(t), float(r), float(b)),
                label=cfg.labels[int(c)],
                confidence=float(s),
            )
            for l, t, r, b, c, s in zip(
                left, top, right, bottom, best_class[keep], best_score[keep]
            )
        ]
        log.debug("%s model found %d objects", cfg.name, len(detections))
        return detections

    def _as_rows(self, tensor: Any) -> np.ndarray:
        cfg = self.config
        flat = np.asarray(tensor, dtype=np.float64).ravel()

        num_predictions = cfg.num_predictions
        if num_predictions is None:
            if flat.size % cfg.stride != 0:
                raise TensorShapeError(
                    f"{cfg.name}: {flat.size} values is not a multiple of {cfg.stride}"
                )
            num_predictions = flat.size // cfg.stride

        expected = num_predictions * cfg.stride
        if flat.size != expected:
            raise TensorShapeError(
                f"{cfg.name}: expected {num_predictions} x {cfg.stride} = {expected} values, "
                f"got {flat.size}"
            )

        if cfg.layout == "channels_first":
            return flat.reshape(cfg.stride, num_predictions).T
        return flat.reshape(num_predictions, cfg.stride)


def decode_yolo_output(
    tensor: Any,
    labels: Sequence[str],
    confidence: float,
    input_size: Tuple[int, int] = (640, 640),
    num_predictions: Optional[int] = None,
    layout: str = "rows",
) -> List[Detection]:
    """Convenience wrapper that decodes one tensor without keeping a decoder."""
    config = YoloModelConfig(
        name="adhoc",
        labels=tuple(labels),
        confidence=float(confidence),
        input_width=int(input_size[0]),
        input_height=int(input_size[1]),
        num_predictions=num_predictions,
        layout=layout,
    )
    return YoloDecoder(config).decode(tensor)


__all__ = ["TensorShapeError", "YoloDecoder", "YoloModelConfig", "decode_yolo_output"]
