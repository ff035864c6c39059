"""Shared fixtures: route navigation logs to a temp dir and isolate Config."""

from __future__ import annotations

import pytest

from blind_navigator.core.telemetry.loggers.navigation_logger import (
    get_navigation_logger,
    reset_navigation_logger,
)
from blind_navigator.utils.config import Config


@pytest.fixture(autouse=True, scope="session")
def navigation_logs(tmp_path_factory: pytest.TempPathFactory):
    reset_navigation_logger()
    nav_logger = get_navigation_logger(session_dir=tmp_path_factory.mktemp("nav_logs"))
    yield nav_logger
    reset_navigation_logger()


@pytest.fixture(autouse=True)
def restore_config():
    snapshot = {key: value for key, value in vars(Config).items() if key.isupper()}
    yield
    for key, value in snapshot.items():
        setattr(Config, key, value)
