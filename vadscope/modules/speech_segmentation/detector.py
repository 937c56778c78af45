"""
Speech detector.

Runs the complete analysis for one buffer of PCM audio:

    reset prober -> downmix -> frame sequencing -> state machine
    -> padding & merge -> time mapping

Each call is an independent run. The prober's memory is reset first and the
detector lock keeps two threads from driving the same prober at once.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import logging
import threading
import time

import numpy as np

from .audio_io import load_audio
from .base import FrameProber, SegmentationResult, SpeechSegment
from .config import DetectorConfig
from .padding import pad_and_merge
from .sequencer import AudioInput, downmix, is_probability, sequence_frames
from .state_machine import detect_raw_segments
from .timing import build_segments

logger = logging.getLogger("vadscope")


class SpeechDetector:
    """
    Detects speech segments in PCM audio using a frame prober.

    Example:
        detector = SpeechDetector(prober, sample_rate=16000, threshold=0.5)
        for segment in detector.analyze(samples):
            print(f"{segment.start_sec:.3f}s - {segment.end_sec:.3f}s")
    """

    def __init__(
        self,
        prober: FrameProber,
        config: Optional[DetectorConfig] = None,
        preset: Optional[str] = None,
        **options: Any
    ):
        """
        Initialize the detector.

        Args:
            prober: Frame prober producing per-window speech probabilities
            config: Prebuilt configuration. Mutually exclusive with options.
            preset: Options preset name ("default", "conservative", ...)
            **options: ``DetectorOptions`` fields (threshold, sample_rate, ...)

        Raises:
            InvalidConfiguration: If the options are invalid
            ValueError: If both ``config`` and options are given
        """
        if config is not None and (options or preset is not None):
            raise ValueError("Pass either a DetectorConfig or options, not both")

        self.config = config if config is not None else DetectorConfig.create(preset, **options)
        self.prober = prober
        self._lock = threading.Lock()

        logger.debug(f"SpeechDetector created: prober={prober.name}, config={self.config}")
        self.reset()

    @property
    def sample_rate(self) -> int:
        return self.config.sample_rate

    @property
    def window_size_samples(self) -> int:
        return self.config.window_size_samples

    def reset(self) -> None:
        """Reset the prober's memory without analyzing anything."""
        self.prober.reset()

    def analyze(self, samples: AudioInput, channels: int = 1) -> List[SpeechSegment]:
        """
        Detect speech in a PCM buffer.

        Args:
            samples: Float PCM in [-1, 1], interleaved when ``channels`` > 1
            channels: Number of interleaved channels

        Returns:
            Sorted, non-overlapping speech segments (empty if none)

        Raises:
            ProbeError: If the prober fails on any window
        """
        return self.analyze_result(samples, channels).segments

    def analyze_result(self, samples: AudioInput, channels: int = 1) -> SegmentationResult:
        """Like ``analyze()`` but returns the full ``SegmentationResult``."""
        start_time = time.time()
        mono = downmix(samples, channels)
        total_samples = len(mono)

        with self._lock:
            self.prober.reset()
            if total_samples < self.window_size_samples:
                logger.debug(
                    f"Audio shorter than one window ({total_samples} < "
                    f"{self.window_size_samples} samples); no speech"
                )
                probs: List[float] = []
            else:
                probs = sequence_frames(
                    mono, self.window_size_samples, self.prober, self.sample_rate
                )

        segments = self.analyze_probabilities(probs, total_samples)

        result = SegmentationResult(
            segments=segments,
            sample_rate=self.sample_rate,
            total_samples=total_samples,
            num_windows=len(probs),
            method=self.prober.name,
            parameters=self._get_parameters(),
            processing_time_sec=time.time() - start_time,
        )
        logger.debug(f"Analysis complete: {result}")
        return result

    def analyze_probabilities(
        self,
        probs: Union[Sequence[float], np.ndarray],
        total_samples: int
    ) -> List[SpeechSegment]:
        """
        Segment an already computed probability sequence.

        Args:
            probs: One probability per window, in order
            total_samples: Length of the mono buffer the windows came from

        Raises:
            ValueError: If the windows do not fit in ``total_samples`` or a
                value is not a finite probability in [0, 1]
        """
        if len(probs) * self.window_size_samples > total_samples:
            raise ValueError(
                f"{len(probs)} windows of {self.window_size_samples} samples do not fit "
                f"in {total_samples} samples"
            )
        for i, prob in enumerate(probs):
            if not is_probability(float(prob)):
                raise ValueError(
                    f"Window {i} has probability {prob!r}; expected a value in [0, 1]"
                )

        raw = detect_raw_segments(probs, self.config, total_samples)
        ranges = pad_and_merge(raw, self.config.speech_pad_samples, total_samples)
        return build_segments(ranges, self.sample_rate)

    def is_speech_present(self, samples: AudioInput, channels: int = 1) -> bool:
        """True if ``analyze()`` finds at least one segment."""
        return len(self.analyze(samples, channels)) > 0

    def analyze_file(self, audio_path: Union[str, Path]) -> SegmentationResult:
        """Load an audio file at the detector's sampling rate and analyze it."""
        logger.info(f"Analyzing: {audio_path}")
        audio, _ = load_audio(audio_path, self.sample_rate)
        result = self.analyze_result(audio)
        logger.info(
            f"Found {result.num_segments} speech segment(s), "
            f"coverage {result.speech_coverage_ratio:.1%}"
        )
        return result

    def _get_parameters(self) -> Dict[str, Any]:
        """Return current detector parameters."""
        return self.config.to_dict()

    def __repr__(self) -> str:
        return (
            f"SpeechDetector(prober={self.prober.name!r}, "
            f"sample_rate={self.sample_rate}, threshold={self.config.threshold})"
        )


def create_detector(backend: str = "silero", preset: Optional[str] = None, **kwargs) -> SpeechDetector:
    """
    Create a prober through the factory and wrap it in a detector.

    Keyword arguments that are ``DetectorOptions`` fields configure the
    detector; the rest go to the prober backend.
    """
    from vadscope.config.options import DetectorOptions
    from .factory import FrameProberFactory

    option_names = set(DetectorOptions.model_fields)
    options = {k: v for k, v in kwargs.items() if k in option_names}
    prober_kwargs = {k: v for k, v in kwargs.items() if k not in option_names}

    config = DetectorConfig.create(preset, **options)
    prober = FrameProberFactory.create(backend, **prober_kwargs)
    return SpeechDetector(prober, config=config)
