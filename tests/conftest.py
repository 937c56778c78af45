"""
Pytest configuration for vadscope tests.

Registers custom markers and shared fixtures.
"""

import numpy as np
import pytest

from vadscope.modules.speech_segmentation import SpeechDetector
from vadscope.modules.speech_segmentation.backends.sequence import SequenceProber

SAMPLE_RATE = 16000
WINDOW = 512


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that need the Silero ONNX model"
    )


@pytest.fixture
def make_detector():
    """
    Build a detector that replays the given probabilities.

    Returns (detector, audio) where audio is a silent mono buffer exactly
    ``len(probs)`` windows long plus ``tail`` samples.
    """
    def _make(probs, tail=0, **options):
        options.setdefault("sample_rate", SAMPLE_RATE)
        detector = SpeechDetector(SequenceProber(probs), **options)
        audio = np.zeros(len(probs) * detector.window_size_samples + tail, dtype=np.float32)
        return detector, audio

    return _make


def ranges(segments):
    """Segments as (start_sample, end_sample) tuples."""
    return [(seg.start_sample, seg.end_sample) for seg in segments]
