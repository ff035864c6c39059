"""Unit tests for the AudioSystem class."""

from __future__ import annotations

import pytest

import blind_navigator.core.audio.audio_system as audio_module
from blind_navigator.core.audio.audio_system import AudioSystem
from blind_navigator.utils.config_sections import AudioConfig


class SyncThread:
    def __init__(self, target, args=(), daemon=False):
        self.target = target
        self.args = args
        self.daemon = daemon

    def start(self):
        self.target(*self.args)


class FakeProcess:
    def __init__(self, cmd) -> None:
        self.cmd = cmd
        self.terminated = False
        self.running = True

    def poll(self):
        return None if self.running else 0

    def terminate(self):
        self.terminated = True
        self.running = False


class FakeEngine:
    def __init__(self) -> None:
        self.properties = {}
        self.said = []
        self.stopped = False

    def setProperty(self, name, value):
        self.properties[name] = value

    def say(self, message):
        self.said.append(message)

    def runAndWait(self):
        pass

    def stop(self):
        self.stopped = True


@pytest.fixture()
def mac_audio(monkeypatch: pytest.MonkeyPatch):
    processes: list[FakeProcess] = []

    def fake_popen(cmd):
        process = FakeProcess(cmd)
        processes.append(process)
        return process

    monkeypatch.setattr(audio_module.platform, "system", lambda: "Darwin")
    monkeypatch.setattr(audio_module.shutil, "which", lambda _: "/usr/bin/say")
    monkeypatch.setattr(audio_module.subprocess, "Popen", fake_popen)
    monkeypatch.setattr(audio_module.threading, "Thread", SyncThread)

    system = AudioSystem(AudioConfig(rate=180, voice="Samantha"))
    return system, processes


def test_say_backend_builds_command(mac_audio) -> None:
    system, processes = mac_audio

    assert system.tts_backend == "say"
    assert system.speak_async("Door straight ahead") is True
    assert processes[0].cmd == ["say", "-r", "180", "-v", "Samantha", "Door straight ahead"]
    assert system.last_phrase == "Door straight ahead"


def test_new_utterance_flushes_previous(mac_audio) -> None:
    system, processes = mac_audio

    system.speak_async("first")
    system.speak_async("second")

    assert processes[0].terminated is True
    assert processes[1].terminated is False
    assert system.spoken_count == 2


def test_every_call_is_spoken(mac_audio) -> None:
    system, processes = mac_audio

    assert system.speak_async("same") is True
    assert system.speak_async("same") is True
    assert len(processes) == 2


def test_blank_message_ignored(mac_audio) -> None:
    system, processes = mac_audio

    assert system.speak_async("   ") is False
    assert processes == []


def test_pyttsx3_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    engine = FakeEngine()
    monkeypatch.setattr(audio_module.platform, "system", lambda: "Linux")
    monkeypatch.setattr(audio_module, "pyttsx3", type("FakeTTS", (), {"init": staticmethod(lambda: engine)}))
    monkeypatch.setattr(audio_module.threading, "Thread", SyncThread)

    system = AudioSystem(AudioConfig(rate_linux=120))

    assert system.tts_backend == "pyttsx3"
    assert engine.properties["rate"] == 120
    assert system.speak_async("Move forward.") is True
    assert engine.said == ["Move forward."]

    system.close()
    assert engine.stopped is True


def test_no_backend_returns_false(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio_module.platform, "system", lambda: "Windows")
    monkeypatch.setattr(audio_module, "pyttsx3", None)

    system = AudioSystem(AudioConfig())

    assert system.tts_backend is None
    assert system.speak_async("hello") is False


def test_disabled_by_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(audio_module.platform, "system", lambda: "Darwin")
    monkeypatch.setattr(audio_module.shutil, "which", lambda _: "/usr/bin/say")

    system = AudioSystem(AudioConfig(enabled=False))

    assert system.tts_backend is None
    assert system.speak_async("hello") is False


def test_tts_errors_are_contained(monkeypatch: pytest.MonkeyPatch, mac_audio) -> None:
    system, _ = mac_audio

    def broken_popen(cmd):
        raise OSError("say missing")

    monkeypatch.setattr(audio_module.subprocess, "Popen", broken_popen)

    assert system.speak_async("hello") is True
    assert system.is_speaking is False
