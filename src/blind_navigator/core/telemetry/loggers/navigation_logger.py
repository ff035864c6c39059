"""
Per-session debug channels for the navigation pipeline.

One process-wide instance owns a ``nav.<channel>`` logger per pipeline stage.
Each channel writes everything to its own file in the session directory and
echoes ``Config.NAV_CONSOLE_LEVEL`` and above to the console.

Log Files:
- decision_engine.log: Rule selection, debounce announce/skip decisions
- detector.log: Tensor decoding and fusion counts
- audio_system.log: Speech dispatch events

Usage:
    from blind_navigator.core.telemetry.loggers.navigation_logger import get_navigation_logger

    nav_logger = get_navigation_logger(session_dir=Path("logs/session_2024-01-15_10-30-00"))
    nav_logger.decision.debug("door=1 obstacle=3 fused=3")
    nav_logger.audio.info("Speaking instruction")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from blind_navigator.utils.config_sections import load_telemetry_config

CHANNELS = {
    "decision": "decision_engine.log",
    "detector": "detector.log",
    "audio": "audio_system.log",
}

_FORMATTER = logging.Formatter(
    '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)


class NavigationLogger:
    """Singleton exposing ``decision``, ``detector`` and ``audio`` loggers."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Optional[Path] = None):
        if self._initialized:
            return

        telemetry_config = load_telemetry_config()
        self.log_dir = Path(session_dir) if session_dir is not None else self._new_session_dir(telemetry_config.log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        console_level = logging.getLevelName(telemetry_config.console_level)
        if not isinstance(console_level, int):
            console_level = logging.WARNING

        self._channels: Dict[str, logging.Logger] = {
            name: self._open_channel(name, filename, console_level)
            for name, filename in CHANNELS.items()
        }
        self._initialized = True

    @staticmethod
    def _new_session_dir(root: str) -> Path:
        return Path(root) / f"session_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}"

    def _open_channel(self, name: str, filename: str, console_level: int) -> logging.Logger:
        logger = logging.getLogger(f"nav.{name}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False
        logger.handlers.clear()

        file_handler = logging.FileHandler(self.log_dir / filename, mode='w')
        file_handler.setLevel(logging.DEBUG)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)

        for handler in (file_handler, console_handler):
            handler.setFormatter(_FORMATTER)
            logger.addHandler(handler)
        return logger

    @property
    def decision(self) -> logging.Logger:
        return self._channels["decision"]

    @property
    def detector(self) -> logging.Logger:
        return self._channels["detector"]

    @property
    def audio(self) -> logging.Logger:
        return self._channels["audio"]

    def close(self):
        """Flush and detach every channel handler."""
        for logger in self._channels.values():
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)


_nav_logger: Optional[NavigationLogger] = None


def get_navigation_logger(session_dir: Optional[Path] = None) -> NavigationLogger:
    """Return the session's logger, creating it on first use."""
    global _nav_logger
    if _nav_logger is None:
        _nav_logger = NavigationLogger(session_dir=session_dir)
    return _nav_logger


def reset_navigation_logger():
    """Close the current instance so the next call starts a new session."""
    global _nav_logger
    if _nav_logger is not None:
        _nav_logger.close()
    _nav_logger = None
    NavigationLogger._instance = None
    NavigationLogger._initialized = False
