#!/usr/bin/env python3
"""
Tests for SpeechDetector: configuration, end-to-end runs over replayed
probabilities, and structural properties of the output.
"""

import json
import random

import numpy as np
import pytest

from conftest import SAMPLE_RATE, WINDOW, ranges
from vadscope.config import InvalidConfiguration, UnknownPresetError
from vadscope.modules.speech_segmentation import (
    DetectorConfig,
    ProbeError,
    SpeechDetector,
    create_detector,
)
from vadscope.modules.speech_segmentation.backends.sequence import SequenceProber

S = 0.9
Q = 0.0


class TestDetectorConfig:
    """Derived sample counts and validation."""

    def test_defaults_at_16k(self):
        config = DetectorConfig.create()
        assert config.sample_rate == 16000
        assert config.window_size_samples == 512
        assert config.threshold == 0.5
        assert config.neg_threshold == pytest.approx(0.35)
        assert config.min_speech_samples == 4000
        assert config.min_silence_samples == 1600
        assert config.min_silence_samples_at_max_speech == 1568
        assert config.speech_pad_samples == 480
        assert config.max_speech_samples == float("inf")

    def test_defaults_at_8k(self):
        config = DetectorConfig.create(sample_rate=8000)
        assert config.window_size_samples == 256
        assert config.min_speech_samples == 2000
        assert config.speech_pad_samples == 240

    def test_max_speech_samples_accounts_for_window_and_padding(self):
        config = DetectorConfig.create(max_speech_duration_s=2)
        assert config.max_speech_samples == 32000 - 512 - 2 * 480

    def test_preset_with_override(self):
        config = DetectorConfig.create("conservative", speech_pad_ms=0)
        assert config.threshold == 0.6
        assert config.min_speech_samples == 6400
        assert config.speech_pad_samples == 0

    def test_to_dict_is_json_serializable(self):
        data = DetectorConfig.create().to_dict()
        assert data["max_speech_samples"] is None
        json.dumps(data)

    @pytest.mark.parametrize("options,field", [
        ({"sample_rate": 44100}, "sample_rate"),
        ({"threshold": 1.5}, "threshold"),
        ({"threshold": 0.0}, "threshold"),
        ({"min_speech_duration_ms": -1}, "min_speech_duration_ms"),
        ({"speech_pad_ms": -30}, "speech_pad_ms"),
        ({"max_speech_duration_s": 0}, "max_speech_duration_s"),
    ])
    def test_invalid_options(self, options, field):
        with pytest.raises(InvalidConfiguration) as exc_info:
            DetectorConfig.create(**options)
        assert exc_info.value.field == field

    def test_unknown_option_rejected(self):
        with pytest.raises(InvalidConfiguration):
            DetectorConfig.create(treshold=0.5)

    def test_unknown_preset(self):
        with pytest.raises(UnknownPresetError) as exc_info:
            DetectorConfig.create("loud")
        assert "aggressive" in str(exc_info.value)

    def test_direct_construction_validates(self):
        with pytest.raises(InvalidConfiguration):
            DetectorConfig(
                sample_rate=16000,
                window_size_samples=256,
                threshold=0.5,
                neg_threshold=0.35,
                min_speech_samples=0,
                min_silence_samples=0,
                min_silence_samples_at_max_speech=0,
                speech_pad_samples=0,
                max_speech_samples=float("inf"),
            )

    def test_non_positive_neg_threshold_warns(self, caplog):
        with caplog.at_level("WARNING", logger="vadscope"):
            config = DetectorConfig.create(threshold=0.1)
        assert config.neg_threshold < 0
        assert "not positive" in caplog.text


class TestSpeechDetectorConstruction:

    def test_config_and_options_are_exclusive(self):
        with pytest.raises(ValueError):
            SpeechDetector(SequenceProber(), config=DetectorConfig.create(), threshold=0.6)

    def test_invalid_options_raise_before_use(self):
        prober = SequenceProber([S])
        with pytest.raises(InvalidConfiguration):
            SpeechDetector(prober, sample_rate=22050)

    def test_construction_resets_prober(self):
        prober = SequenceProber([S])
        SpeechDetector(prober)
        assert prober.reset_count == 1

    def test_create_detector_splits_kwargs(self):
        detector = create_detector("sequence", probabilities=[S] * 3, threshold=0.6)
        assert detector.config.threshold == 0.6
        assert len(detector.prober) == 3


class TestAnalyze:
    """End-to-end runs with replayed probabilities."""

    def test_empty_input(self, make_detector):
        detector, _ = make_detector([])
        result = detector.analyze_result(np.zeros(0, dtype=np.float32))
        assert result.segments == []
        assert result.num_windows == 0
        assert result.total_samples == 0

    def test_input_shorter_than_window_never_probes(self, make_detector):
        detector, _ = make_detector([])
        assert detector.analyze(np.zeros(WINDOW - 1, dtype=np.float32)) == []
        assert detector.prober.position == 0

    def test_all_silence(self, make_detector):
        detector, audio = make_detector([Q] * 50)
        assert detector.analyze(audio) == []

    def test_all_speech_covers_whole_buffer(self, make_detector):
        detector, audio = make_detector([S] * 50, tail=100)
        assert ranges(detector.analyze(audio)) == [(0, len(audio))]

    def test_padding_applied(self, make_detector):
        probs = [S] * 10 + [Q] * 5 + [S] * 15 + [Q] * 20
        detector, audio = make_detector(probs)
        assert ranges(detector.analyze(audio)) == [(0, 5600), (7200, 15840)]

    def test_large_padding_merges_neighbours(self, make_detector):
        """Raw [(0, 5120), (7680, 15360)]: the 2560 gap is below 2 * 1600."""
        probs = [S] * 10 + [Q] * 5 + [S] * 15 + [Q] * 20
        detector, audio = make_detector(probs, speech_pad_ms=100)
        assert ranges(detector.analyze(audio)) == [(0, 16960)]

    def test_seconds_derived_from_final_offsets(self, make_detector):
        probs = [S] * 10 + [Q] * 5 + [S] * 15 + [Q] * 20
        detector, audio = make_detector(probs)
        segments = detector.analyze(audio)
        assert segments[0].start_sec == 0.0
        assert segments[0].end_sec == 0.35
        assert segments[1].start_sec == 0.45
        assert segments[1].end_sec == 0.99

    def test_8k_input(self, make_detector):
        detector, audio = make_detector([S] * 20, sample_rate=8000)
        segments = detector.analyze(audio)
        assert ranges(segments) == [(0, 20 * 256)]
        assert segments[0].end_sec == 0.64

    def test_interleaved_stereo_is_downmixed(self, make_detector):
        probs = [Q] * 5 + [S] * 20 + [Q] * 10
        detector, mono = make_detector(probs)
        stereo = np.repeat(mono, 2)
        assert ranges(detector.analyze(stereo, channels=2)) == ranges(detector.analyze(mono))

    def test_each_run_resets_prober(self, make_detector):
        probs = [Q] * 5 + [S] * 20 + [Q] * 10
        detector, audio = make_detector(probs)
        first = detector.analyze(audio)
        second = detector.analyze(audio)
        assert first == second
        assert detector.prober.reset_count == 3

    def test_prober_failure_propagates(self):
        detector = SpeechDetector(SequenceProber([S, S]))
        with pytest.raises(ProbeError) as exc_info:
            detector.analyze(np.zeros(5 * WINDOW, dtype=np.float32))
        assert exc_info.value.window_index == 2

    def test_is_speech_present(self, make_detector):
        detector, audio = make_detector([S] * 20)
        assert detector.is_speech_present(audio)

        detector, audio = make_detector([Q] * 20)
        assert not detector.is_speech_present(audio)

    def test_result_metadata(self, make_detector):
        detector, audio = make_detector([S] * 50)
        result = detector.analyze_result(audio)
        assert result.method == "sequence"
        assert result.num_windows == 50
        assert result.total_samples == 50 * WINDOW
        assert result.sample_rate == SAMPLE_RATE
        assert result.parameters["threshold"] == 0.5
        assert result.parameters["max_speech_samples"] is None
        assert result.speech_coverage_ratio == 1.0
        json.dumps(result.to_dict())

    def test_analyze_probabilities_rejects_too_many_windows(self):
        detector = SpeechDetector(SequenceProber())
        with pytest.raises(ValueError):
            detector.analyze_probabilities([S] * 10, 9 * WINDOW)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), 1.5, -0.2])
    def test_analyze_probabilities_rejects_invalid_values(self, bad):
        detector = SpeechDetector(SequenceProber())
        probs = [S] * 5 + [bad] + [Q] * 4
        with pytest.raises(ValueError, match="Window 5"):
            detector.analyze_probabilities(probs, 10 * WINDOW)

    def test_analyze_probabilities_accepts_numpy_array(self):
        detector = SpeechDetector(SequenceProber(), speech_pad_ms=0)
        probs = np.array([S] * 10 + [Q] * 10, dtype=np.float32)
        assert ranges(detector.analyze_probabilities(probs, 20 * WINDOW)) == [(0, 10 * WINDOW)]

    def test_analyze_probabilities_without_prober(self):
        detector = SpeechDetector(SequenceProber(), speech_pad_ms=0)
        segments = detector.analyze_probabilities([S] * 10 + [Q] * 10, 20 * WINDOW)
        assert ranges(segments) == [(0, 10 * WINDOW)]


class TestOutputProperties:
    """Structural guarantees checked over random probability sequences."""

    @staticmethod
    def _random_probs(seed, n):
        rng = random.Random(seed)
        probs = []
        value = 0.0
        for _ in range(n):
            # Runs of similar values so segments actually form
            if rng.random() < 0.1:
                value = rng.random()
            probs.append(value)
        return probs

    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("pad_ms", [0, 30, 250])
    def test_sorted_disjoint_and_in_bounds(self, make_detector, seed, pad_ms):
        probs = self._random_probs(seed, 400)
        detector, audio = make_detector(probs, tail=137, speech_pad_ms=pad_ms)
        segments = detector.analyze(audio)

        for seg in segments:
            assert 0 <= seg.start_sample < seg.end_sample <= len(audio)
        for prev, nxt in zip(segments, segments[1:]):
            assert prev.end_sample < nxt.start_sample
            assert prev.end_sec <= nxt.start_sec

    @pytest.mark.parametrize("seed", range(10))
    def test_segments_longer_than_min_speech(self, make_detector, seed):
        probs = self._random_probs(seed, 400)
        detector, audio = make_detector(probs, speech_pad_ms=0)
        for seg in detector.analyze(audio):
            assert seg.num_samples > detector.config.min_speech_samples

    @pytest.mark.parametrize("seed", range(10))
    def test_split_segments_respect_max_duration(self, make_detector, seed):
        probs = self._random_probs(seed, 400)
        detector, audio = make_detector(probs, speech_pad_ms=0, max_speech_duration_s=1.0)
        for seg in detector.analyze(audio):
            assert seg.num_samples <= SAMPLE_RATE * 1.0

    @pytest.mark.parametrize("seed", range(5))
    def test_runs_are_idempotent(self, make_detector, seed):
        probs = self._random_probs(seed, 300)
        detector, audio = make_detector(probs)
        assert detector.analyze(audio) == detector.analyze(audio)
