"""
Input shaping and frame sequencing.

Downmixes interleaved multi-channel PCM to mono and slices the mono buffer
into consecutive, non-overlapping windows, asking the prober for one
probability per full window.
"""

import logging
import math
from typing import List, Sequence, Union

import numpy as np

from .base import FrameProber

logger = logging.getLogger("vadscope")

AudioInput = Union[np.ndarray, Sequence[float]]


class ProbeError(RuntimeError):
    """Raised when the frame prober fails or returns an invalid probability."""

    def __init__(self, message: str, window_index: int = None):
        self.window_index = window_index
        super().__init__(message)


def is_probability(value: float) -> bool:
    """True for a finite value in [0, 1]."""
    return math.isfinite(value) and 0.0 <= value <= 1.0


def downmix(samples: AudioInput, channels: int = 1) -> np.ndarray:
    """
    Convert PCM samples to a mono float32 array.

    Accepts a flat interleaved buffer (``channels`` values per frame) or a
    2-D ``(frames, channels)`` array. Channels are averaged per frame; an
    incomplete trailing frame in an interleaved buffer is dropped.
    """
    if channels < 1:
        raise ValueError(f"channels must be >= 1, got {channels}")

    audio = np.asarray(samples, dtype=np.float32)

    if audio.ndim == 2:
        if audio.shape[1] != channels and channels != 1:
            raise ValueError(
                f"Audio has {audio.shape[1]} channels but channels={channels} was given"
            )
        return audio.mean(axis=1, dtype=np.float32) if audio.shape[1] > 1 else audio[:, 0]

    if audio.ndim != 1:
        raise ValueError(f"Expected 1-D or 2-D audio, got shape {audio.shape}")

    if channels == 1:
        return audio

    num_frames = len(audio) // channels
    if num_frames * channels != len(audio):
        logger.debug(
            f"Dropping {len(audio) - num_frames * channels} trailing samples "
            f"of an incomplete {channels}-channel frame"
        )
    frames = audio[:num_frames * channels].reshape(num_frames, channels)
    return frames.mean(axis=1, dtype=np.float32)


def sequence_frames(
    samples: np.ndarray,
    window_size: int,
    prober: FrameProber,
    sample_rate: int
) -> List[float]:
    """
    Run the prober over every full window of a mono buffer.

    Returns ``len(samples) // window_size`` probabilities; the trailing
    partial window is not analyzed.

    Raises:
        ProbeError: If the prober raises or returns a value outside [0, 1]
    """
    num_windows = len(samples) // window_size
    probs: List[float] = []

    for i in range(num_windows):
        offset = i * window_size
        window = samples[offset:offset + window_size]
        try:
            prob = float(prober.probe(window, sample_rate))
        except Exception as e:
            logger.error(f"Frame prober failed on window {i} (offset {offset}): {e}", exc_info=True)
            raise ProbeError(
                f"Frame prober '{prober.name}' failed on window {i}: {e}",
                window_index=i,
            ) from e

        if not is_probability(prob):
            logger.error(f"Frame prober returned {prob!r} for window {i} (offset {offset})")
            raise ProbeError(
                f"Frame prober '{prober.name}' returned {prob!r} for window {i}; "
                f"expected a probability in [0, 1]",
                window_index=i,
            )
        probs.append(prob)

    return probs
