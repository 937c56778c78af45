#!/usr/bin/env python3
"""Unit tests for downmixing and frame sequencing."""

import math

import numpy as np
import pytest

from vadscope.modules.speech_segmentation import ProbeError, downmix, sequence_frames
from vadscope.modules.speech_segmentation.backends.sequence import SequenceProber


class RecordingProber:
    """Prober that records every window it sees."""

    name = "recording"

    def __init__(self, prob=0.5):
        self.prob = prob
        self.windows = []

    def probe(self, window, sample_rate):
        self.windows.append(np.array(window))
        return self.prob

    def reset(self):
        self.windows = []


class FailingProber(RecordingProber):
    name = "failing"

    def __init__(self, fail_at):
        super().__init__()
        self.fail_at = fail_at

    def probe(self, window, sample_rate):
        if len(self.windows) == self.fail_at:
            raise RuntimeError("inference failed")
        return super().probe(window, sample_rate)


class TestDownmix:

    def test_mono_passthrough(self):
        audio = np.linspace(-1, 1, 100, dtype=np.float32)
        result = downmix(audio, 1)
        assert result.dtype == np.float32
        np.testing.assert_array_equal(result, audio)

    def test_list_input_converted(self):
        result = downmix([0.0, 0.5, -0.5])
        assert result.dtype == np.float32
        assert len(result) == 3

    def test_interleaved_stereo_is_averaged(self):
        result = downmix([1.0, 0.0, 0.5, 0.5, -1.0, 1.0], channels=2)
        np.testing.assert_allclose(result, [0.5, 0.5, 0.0])

    def test_interleaved_incomplete_frame_dropped(self):
        result = downmix([1.0, 0.0, 0.5, 0.5, 0.25], channels=2)
        np.testing.assert_allclose(result, [0.5, 0.5])

    def test_two_dimensional_input(self):
        audio = np.array([[1.0, 0.0], [0.2, 0.4]], dtype=np.float32)
        np.testing.assert_allclose(downmix(audio, 2), [0.5, 0.3])

    def test_two_dimensional_single_channel(self):
        audio = np.ones((10, 1), dtype=np.float32)
        assert downmix(audio).shape == (10,)

    def test_invalid_channel_count(self):
        with pytest.raises(ValueError):
            downmix([0.0, 0.0], channels=0)

    def test_channel_mismatch_for_2d_input(self):
        with pytest.raises(ValueError):
            downmix(np.zeros((4, 3)), channels=2)


class TestSequenceFrames:

    def test_one_probe_per_full_window(self):
        prober = RecordingProber()
        samples = np.arange(3 * 512 + 100, dtype=np.float32)
        probs = sequence_frames(samples, 512, prober, 16000)

        assert probs == [0.5, 0.5, 0.5]
        assert len(prober.windows) == 3
        assert all(len(w) == 512 for w in prober.windows)
        # Windows are consecutive and non-overlapping
        assert prober.windows[1][0] == 512
        assert prober.windows[2][-1] == 3 * 512 - 1

    def test_shorter_than_window_yields_nothing(self):
        prober = RecordingProber()
        assert sequence_frames(np.zeros(511, dtype=np.float32), 512, prober, 16000) == []
        assert prober.windows == []

    def test_prober_exception_becomes_probe_error(self):
        prober = FailingProber(fail_at=2)
        with pytest.raises(ProbeError) as exc_info:
            sequence_frames(np.zeros(5 * 512, dtype=np.float32), 512, prober, 16000)

        assert exc_info.value.window_index == 2
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.parametrize("bad", [1.5, -0.1, math.nan])
    def test_invalid_probability_rejected(self, bad):
        prober = SequenceProber([0.2, bad])
        with pytest.raises(ProbeError) as exc_info:
            sequence_frames(np.zeros(2 * 512, dtype=np.float32), 512, prober, 16000)
        assert exc_info.value.window_index == 1

    def test_invalid_probability_logged_as_error(self, caplog):
        prober = SequenceProber([1.5])
        with caplog.at_level("ERROR", logger="vadscope"):
            with pytest.raises(ProbeError):
                sequence_frames(np.zeros(512, dtype=np.float32), 512, prober, 16000)

        errors = [r for r in caplog.records if r.levelname == "ERROR"]
        assert len(errors) == 1
        assert "window 0" in errors[0].getMessage()

    def test_probability_bounds_are_valid(self):
        prober = SequenceProber([0.0, 1.0])
        probs = sequence_frames(np.zeros(2 * 256, dtype=np.float32), 256, prober, 8000)
        assert probs == [0.0, 1.0]
