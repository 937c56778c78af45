"""
Time mapping for speech segments.

Sample offsets are converted to seconds truncated to millisecond resolution.
Only final (padded and merged) offsets are mapped.
"""

from typing import Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import SpeechSegment


def offset_to_seconds(offset: int, sample_rate: int) -> float:
    """
    Convert a sample offset to seconds, floored to the millisecond.

    Integer arithmetic keeps exact boundaries exact: 16016 samples at
    16 kHz is 1.001, not 1.0.
    """
    return (int(offset) * 1000 // int(sample_rate)) / 1000


def build_segments(
    ranges: Iterable[Tuple[int, int]],
    sample_rate: int
) -> List["SpeechSegment"]:
    """Map final ``(start, end)`` sample ranges to ``SpeechSegment`` objects."""
    from .base import SpeechSegment

    return [
        SpeechSegment(start_sample=start, end_sample=end, sample_rate=sample_rate)
        for start, end in ranges
    ]


def segment_at(
    segments: Sequence["SpeechSegment"],
    time_sec: float
) -> Optional["SpeechSegment"]:
    """
    Return the segment containing a playback position, or None.

    Both boundaries are inclusive, so a position exactly on ``end_sec``
    still counts as speech.
    """
    for segment in segments:
        if segment.start_sec <= time_sec <= segment.end_sec:
            return segment
        if segment.start_sec > time_sec:
            break
    return None


def is_speech_at(segments: Sequence["SpeechSegment"], time_sec: float) -> bool:
    """True if ``time_sec`` falls inside any segment."""
    return segment_at(segments, time_sec) is not None
