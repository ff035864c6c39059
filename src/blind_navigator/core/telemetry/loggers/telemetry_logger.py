"""
Session telemetry for the navigation pipeline.

Thread-safe JSONL logging of per-frame latency and emitted instructions.

Files (in logs/session_YYYY-MM-DD_HH-MM-SS/):
- performance.jsonl: frame number, latency, detection count, timing breakdown
- instructions.jsonl: timestamp, key and text of every emitted instruction
- system.jsonl: session start/end events
- summary.json: written by finalize_session()

Usage:
    from blind_navigator.core.telemetry.loggers.telemetry_logger import TelemetryLogger

    logger = TelemetryLogger()
    logger.log_frame_performance(frame_number=42, latency_ms=3.2, detection_count=4)
    logger.log_instruction(timestamp=1_700_000_000_000, key="NO_RELEVANT_OBJECT", text="...")
    summary = logger.finalize_session()
"""

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

log = logging.getLogger("Telemetry")


@dataclass
class PerformanceMetric:
    """Performance metric per frame."""
    timestamp: float
    frame_number: int
    latency_ms: float
    detection_count: int


@dataclass
class InstructionMetric:
    """Emitted instruction."""
    timestamp: int  # Frame timestamp (ms)
    key: str
    text: str


class TelemetryLogger:
    """Centralized thread-safe metrics logger for one session."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Initialize new telemetry session.

        Args:
            output_dir: Base directory for logs (default: Config.LOG_DIR)
        """
        self._write_lock = threading.Lock()
        self._buffer_lock = threading.Lock()

        if output_dir is None:
            from blind_navigator.utils.config import Config

            output_dir = getattr(Config, "LOG_DIR", "logs")

        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)

        self.session_timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        self.session_start = time.time()
        self.session_dir = base_dir / f"session_{self.session_timestamp}"
        self.session_dir.mkdir(parents=True, exist_ok=True)

        self.performance_log = self.session_dir / "performance.jsonl"
        self.instructions_log = self.session_dir / "instructions.jsonl"
        self.system_log = self.session_dir / "system.jsonl"

        # In-memory buffers (protected by _buffer_lock)
        self.performance_buffer: List[PerformanceMetric] = []
        self.instruction_buffer: List[InstructionMetric] = []

        self._log_system_event("session_start", {
            "session": self.session_timestamp,
            "timestamp": self.session_start
        })

        log.info("[TELEMETRY] New session: %s", self.session_timestamp)
        log.info("[TELEMETRY] Folder: %s", self.session_dir)

    def get_session_dir(self) -> Path:
        """Return the session directory path for use by other loggers."""
        return self.session_dir

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def log_frame_performance(
        self,
        frame_number: int,
        latency_ms: float,
        detection_count: int = 0,
        timing_breakdown: Dict[str, float] = None,
    ) -> None:
        """
        Record performance metrics for a frame.

        Args:
            frame_number: Frame number
            latency_ms: Processing latency in milliseconds
            detection_count: Fused detections in the frame
            timing_breakdown: Dict with per-stage timing (seconds)

        Thread-safe: Can be called from any thread.
        """
        metric = PerformanceMetric(
            timestamp=time.time(),
            frame_number=frame_number,
            latency_ms=latency_ms,
            detection_count=detection_count,
        )

        with self._buffer_lock:
            self.performance_buffer.append(metric)

        data = asdict(metric)
        if timing_breakdown:
            data['timing'] = timing_breakdown
        self._write_jsonl(self.performance_log, data)

    def log_instruction(self, timestamp: int, key: str, text: str) -> None:
        """Record an emitted instruction. Thread-safe."""
        metric = InstructionMetric(timestamp=timestamp, key=key, text=text)

        with self._buffer_lock:
            self.instruction_buffer.append(metric)

        self._write_jsonl(self.instructions_log, asdict(metric))

    def log_error(self, error_type: str, message: str, **kwargs: Any) -> None:
        """Record a system error."""
        self._log_system_event("error", {
            "error_type": error_type,
            "message": message,
            **kwargs
        })

    def _log_system_event(self, event_type: str, data: Dict[str, Any]) -> None:
        payload = {
            "timestamp": time.time(),
            "session": self.session_timestamp,
            "event_type": event_type,
            **data
        }
        self._write_jsonl(self.system_log, payload)

    # ------------------------------------------------------------------
    # Session Management
    # ------------------------------------------------------------------

    def get_performance_summary(self) -> Dict[str, float]:
        """
        Get real-time performance statistics.

        Thread-safe: Can be called from any thread.
        """
        with self._buffer_lock:
            latencies = [m.latency_ms for m in self.performance_buffer]

        if not latencies:
            return {}
        return {
            "avg_latency_ms": sum(latencies) / len(latencies),
            "p95_latency_ms": float(np.percentile(latencies, 95)),
            "max_latency_ms": max(latencies),
        }

    def finalize_session(self) -> Dict[str, Any]:
        """
        Finalize session and generate summary.

        Returns:
            Dict with session statistics

        Thread-safe: Can be called from any thread.
        """
        session_duration = time.time() - self.session_start

        with self._buffer_lock:
            perf_copy = list(self.performance_buffer)
            instr_copy = list(self.instruction_buffer)

        latencies = [m.latency_ms for m in perf_copy]
        instructions_by_key: Dict[str, int] = {}
        for item in instr_copy:
            instructions_by_key[item.key] = instructions_by_key.get(item.key, 0) + 1

        summary = {
            "session": self.session_timestamp,
            "duration_seconds": session_duration,
            "total_frames": len(perf_copy),
            "avg_latency_ms": sum(latencies) / len(latencies) if latencies else 0,
            "p95_latency_ms": float(np.percentile(latencies, 95)) if latencies else 0,
            "max_latency_ms": max(latencies) if latencies else 0,
            "total_detections": sum(m.detection_count for m in perf_copy),
            "total_instructions": len(instr_copy),
            "instructions_by_key": instructions_by_key,
        }

        self._log_system_event("session_end", summary)

        summary_path = self.session_dir / "summary.json"
        with open(summary_path, 'w') as f:
            json.dump(summary, f, indent=2)

        log.info("[TELEMETRY] Session finalized: %s", self.session_timestamp)
        return summary

    def _write_jsonl(self, path: Path, data: Dict[str, Any]) -> None:
        """Append one JSON line. Thread-safe."""
        with self._write_lock:
            with open(path, 'a') as f:
                f.write(json.dumps(data) + '\n')
