"""Tests for the Builder convenience helpers."""

from __future__ import annotations

import json
import types

import pytest

from blind_navigator.core.navigation import builder as builder_module
from blind_navigator.core.navigation.coordinator import Coordinator
from blind_navigator.utils.config import CONFIG_ENV_VAR, Config


@pytest.fixture()
def stubbed_builder(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(builder_module, "AudioSystem", lambda: types.SimpleNamespace(kind="audio"))
    return builder_module.Builder()


def test_build_full_system_returns_coordinator(stubbed_builder) -> None:
    coordinator = stubbed_builder.build_full_system()

    assert isinstance(coordinator, Coordinator)
    assert coordinator.audio_system.kind == "audio"
    assert coordinator.telemetry is None
    assert coordinator.detector.door_decoder.config.labels == ("door",)
    assert coordinator.detector.obstacle_decoder.config.num_classes == 80


def test_build_full_system_without_audio(stubbed_builder) -> None:
    assert stubbed_builder.build_full_system(enable_audio=False).audio_system is None


def test_builder_reads_config(monkeypatch: pytest.MonkeyPatch, stubbed_builder) -> None:
    monkeypatch.setattr(Config, "PARALLEL_DECODE", True)
    monkeypatch.setattr(Config, "STABLE_INFO_DELAY_MS", 1234)
    monkeypatch.setattr(Config, "DOOR_MODEL_CONFIDENCE", 0.55)

    coordinator = stubbed_builder.build_full_system()
    try:
        assert coordinator.detector.parallel is True
        assert coordinator.decision_engine.debounce.stable_info_delay_ms == 1234
        assert coordinator.detector.door_decoder.config.confidence == 0.55
    finally:
        coordinator.detector.shutdown()


def test_build_full_system_applies_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path, stubbed_builder) -> None:
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({"announcement_delay_ms": 250}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(overrides))

    coordinator = stubbed_builder.build_full_system()

    assert coordinator.decision_engine.debounce.announcement_delay_ms == 250


def test_telemetry_built_when_enabled(monkeypatch: pytest.MonkeyPatch, tmp_path, stubbed_builder) -> None:
    monkeypatch.setattr(Config, "TELEMETRY_ENABLED", True)
    monkeypatch.setattr(Config, "LOG_DIR", str(tmp_path))

    coordinator = stubbed_builder.build_full_system()

    assert coordinator.telemetry is not None
    assert coordinator.telemetry.get_session_dir().parent == tmp_path


def test_build_navigation_system_convenience() -> None:
    coordinator = builder_module.build_navigation_system(enable_audio=False)

    assert isinstance(coordinator, Coordinator)
    assert coordinator.audio_system is None
