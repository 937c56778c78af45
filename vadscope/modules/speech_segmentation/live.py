"""
Live speech monitoring over a rolling audio buffer.

Audio arrives in arbitrary chunks (e.g. from a capture callback) and is kept
in a fixed-size ring buffer. ``is_speaking()`` re-analyzes the most recent
``window_seconds`` of audio as a fresh, independent run each time.
"""

import logging
import threading
from typing import Optional

import numpy as np

from .detector import SpeechDetector
from .sequencer import AudioInput, downmix

logger = logging.getLogger("vadscope")


class LiveSpeechMonitor:
    """
    Rolling-window speech presence check.

    Example:
        monitor = LiveSpeechMonitor(detector, window_seconds=1.0)
        # in the capture callback
        monitor.push(chunk)
        # in the UI/poll loop (e.g. every 100 ms)
        if monitor.is_speaking():
            ...
    """

    def __init__(
        self,
        detector: SpeechDetector,
        window_seconds: float = 1.0,
        channels: int = 1
    ):
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        if channels < 1:
            raise ValueError(f"channels must be >= 1, got {channels}")

        self.detector = detector
        self.channels = channels
        self.window_seconds = float(window_seconds)
        self.capacity = int(detector.sample_rate * window_seconds)
        if self.capacity < detector.window_size_samples:
            raise ValueError(
                f"window_seconds={window_seconds} holds {self.capacity} samples, fewer than "
                f"one {detector.window_size_samples}-sample analysis window"
            )

        self._buffer = np.zeros(self.capacity, dtype=np.float32)
        self._write_pos = 0
        self._filled = 0
        self._buffer_lock = threading.Lock()
        self._last_state: Optional[bool] = None

    @property
    def buffered_samples(self) -> int:
        return self._filled

    def push(self, chunk: AudioInput) -> None:
        """Append PCM samples (interleaved if ``channels`` > 1)."""
        mono = downmix(chunk, self.channels)
        if len(mono) == 0:
            return

        with self._buffer_lock:
            # Only the newest `capacity` samples can survive
            if len(mono) >= self.capacity:
                self._buffer[:] = mono[-self.capacity:]
                self._write_pos = 0
                self._filled = self.capacity
                return

            first = min(len(mono), self.capacity - self._write_pos)
            self._buffer[self._write_pos:self._write_pos + first] = mono[:first]
            rest = len(mono) - first
            if rest:
                self._buffer[:rest] = mono[first:]
            self._write_pos = (self._write_pos + len(mono)) % self.capacity
            self._filled = min(self.capacity, self._filled + len(mono))

    def latest_window(self) -> np.ndarray:
        """Return buffered samples, oldest first."""
        with self._buffer_lock:
            if self._filled < self.capacity:
                return self._buffer[:self._filled].copy()
            return np.concatenate(
                [self._buffer[self._write_pos:], self._buffer[:self._write_pos]]
            )

    def is_speaking(self) -> bool:
        """Analyze the current window and report whether it contains speech."""
        speaking = self.detector.is_speech_present(self.latest_window())
        if speaking and not self._last_state:
            logger.info("Speech detected")
        elif not speaking and self._last_state:
            logger.info("Speech ended")
        self._last_state = speaking
        return speaking

    def clear(self) -> None:
        with self._buffer_lock:
            self._buffer[:] = 0.0
            self._write_pos = 0
            self._filled = 0
        self._last_state = None
