"""
Audio file loading for the detector.

Reads any format libsndfile supports, downmixes to mono and resamples to the
detector's sampling rate.
"""

from math import gcd
from pathlib import Path
from typing import Tuple, Union
import logging

import numpy as np
import soundfile as sf
from scipy import signal

from .sequencer import downmix

logger = logging.getLogger("vadscope")


def resample_audio(audio: np.ndarray, orig_sr: int, target_sr: int) -> np.ndarray:
    """Resample mono audio with a polyphase filter."""
    if orig_sr == target_sr:
        return audio

    factor = gcd(int(orig_sr), int(target_sr))
    resampled = signal.resample_poly(audio, int(target_sr) // factor, int(orig_sr) // factor)
    return resampled.astype(np.float32)


def load_audio(
    audio_path: Union[str, Path],
    target_sample_rate: int
) -> Tuple[np.ndarray, int]:
    """
    Load an audio file as mono float32 at ``target_sample_rate``.

    Returns:
        Tuple of (audio_array, sample_rate)

    Raises:
        FileNotFoundError: If the file does not exist
    """
    audio_path = Path(audio_path)
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    audio_data, actual_sr = sf.read(str(audio_path), dtype='float32', always_2d=True)
    channels = audio_data.shape[1]
    mono = downmix(audio_data, channels)

    if actual_sr != target_sample_rate:
        logger.warning(
            f"Resampling {audio_path.name} from {actual_sr} Hz to {target_sample_rate} Hz"
        )
        mono = resample_audio(mono, actual_sr, target_sample_rate)

    logger.debug(
        f"Loaded {audio_path.name}: {len(mono)} samples at {target_sample_rate} Hz "
        f"({channels} channel(s) in source)"
    )
    return mono, target_sample_rate
