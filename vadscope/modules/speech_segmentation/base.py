"""
Base classes and protocols for speech segmentation.

This module defines the core data structures and the interface that every
frame prober (the per-window speech probability model) must implement.
"""

from typing import Protocol, List, Dict, Any, runtime_checkable
from dataclasses import dataclass, field

import numpy as np

from .timing import offset_to_seconds


@dataclass(frozen=True)
class SpeechSegment:
    """
    A detected speech interval.

    Offsets are sample indices into the analyzed mono buffer. Seconds are
    derived from them (floored to the millisecond) and cannot be set.

    Attributes:
        start_sample: First sample of the segment (inclusive)
        end_sample: End of the segment (exclusive)
        sample_rate: Sampling rate used to derive seconds
    """
    start_sample: int
    end_sample: int
    sample_rate: int

    def __post_init__(self):
        if self.start_sample < 0 or self.end_sample < self.start_sample:
            raise ValueError(
                f"Invalid segment bounds: [{self.start_sample}, {self.end_sample})"
            )

    @property
    def start_sec(self) -> float:
        """Start time in seconds, floored to millisecond resolution."""
        return offset_to_seconds(self.start_sample, self.sample_rate)

    @property
    def end_sec(self) -> float:
        """End time in seconds, floored to millisecond resolution."""
        return offset_to_seconds(self.end_sample, self.sample_rate)

    @property
    def duration_sec(self) -> float:
        """Duration of the segment in seconds."""
        return self.end_sec - self.start_sec

    @property
    def num_samples(self) -> int:
        return self.end_sample - self.start_sample

    def to_dict(self) -> Dict[str, Any]:
        """Export segment for JSON serialization."""
        return {
            "start_sample": self.start_sample,
            "end_sample": self.end_sample,
            "start_sec": self.start_sec,
            "end_sec": self.end_sec,
            "duration_sec": round(self.duration_sec, 3),
        }

    def __repr__(self) -> str:
        return f"SpeechSegment({self.start_sec:.3f}s - {self.end_sec:.3f}s)"


@dataclass
class SegmentationResult:
    """
    Complete result from one analysis run.

    Attributes:
        segments: Final, sorted, non-overlapping speech segments
        sample_rate: Sampling rate of the analyzed audio
        total_samples: Length of the analyzed mono buffer
        num_windows: Number of windows sent to the prober
        method: Name of the prober used
        parameters: Detector parameters used for the run
        processing_time_sec: Time taken to process (seconds)
    """
    segments: List[SpeechSegment]
    sample_rate: int
    total_samples: int
    num_windows: int
    method: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    processing_time_sec: float = 0.0

    @property
    def audio_duration_sec(self) -> float:
        return self.total_samples / self.sample_rate if self.sample_rate else 0.0

    @property
    def speech_coverage_sec(self) -> float:
        """Total seconds of detected speech."""
        return sum(seg.num_samples for seg in self.segments) / self.sample_rate

    @property
    def speech_coverage_ratio(self) -> float:
        """Ratio of speech to total audio duration."""
        if self.total_samples <= 0:
            return 0.0
        return sum(seg.num_samples for seg in self.segments) / self.total_samples

    @property
    def num_segments(self) -> int:
        """Total number of segments."""
        return len(self.segments)

    @property
    def has_speech(self) -> bool:
        return bool(self.segments)

    def to_dict(self) -> Dict[str, Any]:
        """Export result for JSON serialization."""
        return {
            "method": self.method,
            "sample_rate": self.sample_rate,
            "total_samples": self.total_samples,
            "audio_duration_sec": round(self.audio_duration_sec, 3),
            "num_windows": self.num_windows,
            "speech_coverage_sec": round(self.speech_coverage_sec, 3),
            "speech_coverage_ratio": round(self.speech_coverage_ratio, 4),
            "processing_time_sec": round(self.processing_time_sec, 3),
            "parameters": self.parameters,
            "segments": [seg.to_dict() for seg in self.segments],
        }

    def __repr__(self) -> str:
        return (
            f"SegmentationResult(method={self.method}, "
            f"segments={self.num_segments}, "
            f"coverage={self.speech_coverage_ratio:.1%})"
        )


@runtime_checkable
class FrameProber(Protocol):
    """
    Protocol for per-window speech probability models.

    A prober may keep internal (e.g. recurrent) memory between calls.
    ``reset()`` must be called before every independent analysis, and a
    single prober must not be driven by two analyses at once.
    """

    @property
    def name(self) -> str:
        """
        Unique backend identifier.

        Examples: "silero", "sequence"
        """
        ...

    def probe(self, window: np.ndarray, sample_rate: int) -> float:
        """
        Return the speech probability in [0, 1] for one window.

        Args:
            window: Mono float32 samples, exactly one window long
            sample_rate: Sampling rate of the window

        Raises:
            ValueError: If the window has the wrong size for the model
        """
        ...

    def reset(self) -> None:
        """Clear internal memory so the next window starts a fresh analysis."""
        ...
