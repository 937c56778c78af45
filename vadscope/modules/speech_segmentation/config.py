"""
Derived detector configuration.

Converts validated ``DetectorOptions`` (milliseconds/seconds) into the sample
counts used by the segmentation state machine and padding pass.
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from vadscope.config.errors import InvalidConfiguration
from vadscope.config.options import DetectorOptions, build_options

logger = logging.getLogger("vadscope")

# Window length expected by the prober, per sampling rate
WINDOW_SIZES = {
    8000: 256,
    16000: 512,
}


@dataclass(frozen=True)
class DetectorConfig:
    """
    Immutable per-detector configuration, all durations in samples.

    Use ``DetectorConfig.from_options()`` or ``DetectorConfig.create()``;
    both validate and raise ``InvalidConfiguration`` on bad input.
    """
    sample_rate: int
    window_size_samples: int
    threshold: float
    neg_threshold: float
    min_speech_samples: float
    min_silence_samples: float
    min_silence_samples_at_max_speech: float
    speech_pad_samples: int
    max_speech_samples: float

    def __post_init__(self):
        if self.sample_rate not in WINDOW_SIZES:
            raise InvalidConfiguration(
                "Sampling rate not supported. Only 8000 or 16000 Hz are allowed.",
                field="sample_rate",
                value=self.sample_rate,
            )
        if self.window_size_samples != WINDOW_SIZES[self.sample_rate]:
            raise InvalidConfiguration(
                f"Window size must be {WINDOW_SIZES[self.sample_rate]} at {self.sample_rate} Hz",
                field="window_size_samples",
                value=self.window_size_samples,
            )
        if not 0.0 < self.threshold < 1.0:
            raise InvalidConfiguration(
                "Threshold must lie strictly between 0 and 1",
                field="threshold",
                value=self.threshold,
            )
        if self.neg_threshold >= self.threshold:
            raise InvalidConfiguration(
                "Silence threshold must be below the speech threshold",
                field="neg_threshold",
                value=self.neg_threshold,
            )
        for name in (
            "min_speech_samples",
            "min_silence_samples",
            "min_silence_samples_at_max_speech",
            "speech_pad_samples",
        ):
            if getattr(self, name) < 0:
                raise InvalidConfiguration(
                    "Duration must not be negative", field=name, value=getattr(self, name)
                )

    @classmethod
    def from_options(cls, options: DetectorOptions) -> "DetectorConfig":
        sr = options.sample_rate
        if sr not in WINDOW_SIZES:
            raise InvalidConfiguration(
                "Sampling rate not supported. Only 8000 or 16000 Hz are allowed.",
                field="sample_rate",
                value=sr,
            )
        window = WINDOW_SIZES[sr]
        speech_pad_samples = int(sr * options.speech_pad_ms / 1000)

        if math.isinf(options.max_speech_duration_s):
            max_speech_samples = math.inf
        else:
            max_speech_samples = (
                sr * options.max_speech_duration_s - window - 2 * speech_pad_samples
            )

        config = cls(
            sample_rate=sr,
            window_size_samples=window,
            threshold=options.threshold,
            neg_threshold=options.neg_threshold,
            min_speech_samples=sr * options.min_speech_duration_ms / 1000,
            min_silence_samples=sr * options.min_silence_duration_ms / 1000,
            min_silence_samples_at_max_speech=sr * options.min_silence_at_max_speech_ms / 1000,
            speech_pad_samples=speech_pad_samples,
            max_speech_samples=max_speech_samples,
        )

        if config.neg_threshold <= 0.0:
            logger.warning(
                f"Silence threshold {config.neg_threshold:.3f} is not positive; "
                f"segments will only close at the end of the audio or at max_speech_duration_s"
            )
        if max_speech_samples <= window:
            logger.warning(
                f"max_speech_duration_s={options.max_speech_duration_s} leaves no room "
                f"after padding; every segment will be split after one window"
            )
        return config

    @classmethod
    def create(cls, preset: Optional[str] = None, **options: Any) -> "DetectorConfig":
        """Validate keyword options (optionally on top of a preset) and derive the config."""
        return cls.from_options(build_options(preset, **options))

    def to_dict(self) -> Dict[str, Any]:
        # None stands for "no limit"; JSON has no infinity
        return {
            key: None if isinstance(value, float) and math.isinf(value) else value
            for key, value in asdict(self).items()
        }
