import logging
import platform
import shutil
import subprocess
import threading
import time
from typing import Optional

try:
    import pyttsx3
except ImportError:
    pyttsx3 = None

from blind_navigator.core.telemetry.loggers.navigation_logger import get_navigation_logger
from blind_navigator.utils.config_sections import AudioConfig, load_audio_config

log = logging.getLogger("AudioSystem")

if pyttsx3 is None:
    log.warning("pyttsx3 not found. TTS will be disabled on non-macOS systems.")


class AudioSystem:
    """Fire-and-forget speech sink, multi-platform.

    A new utterance replaces the one in progress on macOS (the running
    ``say`` process is terminated first). pyttsx3 utterances are serialized.
    Cadence is decided upstream; every call is spoken.
    """

    def __init__(self, config: Optional[AudioConfig] = None):
        self.config = config or load_audio_config()
        self.tts_rate = self.config.rate
        self.tts_engine = None
        self.tts_backend: Optional[str] = None
        self.selected_voice: Optional[str] = self.config.voice
        self._say_process = None
        self._engine_lock = threading.Lock()

        self.tts_speaking = False
        self.last_phrase: Optional[str] = None
        self.last_phrase_time: float = 0.0
        self.spoken_count = 0

        if self.config.enabled:
            self._setup_tts()
        else:
            log.info("AudioSystem: speech disabled by configuration")

    @property
    def is_speaking(self) -> bool:
        return self.tts_speaking

    def _setup_tts(self):
        """Configure TTS based on the operating system."""
        system = platform.system()

        if system == "Darwin" and shutil.which('say'):
            self.tts_backend = "say"
            log.info("AudioSystem: Using 'say' for TTS on macOS.")

        elif pyttsx3:
            try:
                self.tts_engine = pyttsx3.init()
                # espeak-ng is fast by default
                self.tts_rate = self.config.rate_linux
                self.tts_engine.setProperty('rate', self.tts_rate)
                self.tts_engine.setProperty('volume', 1.0)
                if self.selected_voice:
                    self.tts_engine.setProperty('voice', self.selected_voice)
                self.tts_backend = "pyttsx3"
                log.info("AudioSystem: Using pyttsx3 for TTS on %s (rate=%d).", system, self.tts_rate)
            except Exception as e:
                log.error("Failed to initialize pyttsx3 on %s: %s", system, e)
                self.tts_backend = None
        else:
            log.warning("No supported TTS backend found for %s.", system)
            self.tts_backend = None

    def speak_async(self, message: str) -> bool:
        """Start speaking without blocking; False when nothing can be spoken."""
        logger = get_navigation_logger().audio
        if not message or not message.strip():
            return False

        if not self.tts_backend:
            logger.error(f"TTS backend unavailable, cannot speak: {message}")
            return False

        logger.debug(f"speak_async('{message}') backend={self.tts_backend}")
        self.last_phrase = message
        self.last_phrase_time = time.time()
        self.spoken_count += 1
        threading.Thread(target=self._speak, args=(message,), daemon=True).start()
        return True

    def _speak(self, message: str) -> None:
        try:
            self.tts_speaking = True
            if self.tts_backend == "say":
                self._flush_say()
                run_cmd = ["say", "-r", str(self.tts_rate)]
                if self.selected_voice:
                    run_cmd.extend(["-v", self.selected_voice])
                run_cmd.append(message)
                # Popen without wait() keeps the worker thread short-lived
                self._say_process = subprocess.Popen(run_cmd)

            elif self.tts_backend == "pyttsx3" and self.tts_engine:
                with self._engine_lock:
                    self.tts_engine.say(message)
                    self.tts_engine.runAndWait()  # Blocking, fine inside the thread

        except Exception as e:
            get_navigation_logger().audio.warning(f"TTS error: {e}")
        finally:
            self.tts_speaking = False

    def _flush_say(self) -> None:
        process = self._say_process
        if process is not None and process.poll() is None:
            process.terminate()
        self._say_process = None

    def close(self):
        if self.tts_backend == "say":
            self._flush_say()
        if self.tts_backend == "pyttsx3" and self.tts_engine:
            try:
                self.tts_engine.stop()
            except Exception as e:
                log.warning("Failed to stop pyttsx3 engine: %s", e)
        log.info("AudioSystem closed.")
