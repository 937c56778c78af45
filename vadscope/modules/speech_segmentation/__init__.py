"""
Speech Segmentation Module

Turns per-window speech probabilities into padded, merged speech segments.
The probability model is pluggable through the ``FrameProber`` protocol.

Available probers:
- silero (default): Silero VAD ONNX graph via onnxruntime
- sequence: Replays precomputed probabilities

Example usage:
    from vadscope.modules.speech_segmentation import create_detector

    detector = create_detector("silero", threshold=0.5, speech_pad_ms=30)
    result = detector.analyze_file("speech.wav")

    for segment in result.segments:
        print(f"{segment.start_sec:.3f}s - {segment.end_sec:.3f}s")
"""

from .base import (
    FrameProber,
    SegmentationResult,
    SpeechSegment,
)
from .config import DetectorConfig, WINDOW_SIZES
from .detector import SpeechDetector, create_detector
from .factory import FrameProberFactory
from .live import LiveSpeechMonitor
from .padding import merge_segments, pad_and_merge, pad_segments
from .sequencer import ProbeError, downmix, sequence_frames
from .state_machine import (
    Phase,
    SegmentationState,
    SegmentationStateMachine,
    detect_raw_segments,
)
from .timing import build_segments, is_speech_at, offset_to_seconds, segment_at

__all__ = [
    "FrameProber",
    "SegmentationResult",
    "SpeechSegment",
    "DetectorConfig",
    "WINDOW_SIZES",
    "SpeechDetector",
    "create_detector",
    "FrameProberFactory",
    "LiveSpeechMonitor",
    "merge_segments",
    "pad_and_merge",
    "pad_segments",
    "ProbeError",
    "downmix",
    "sequence_frames",
    "Phase",
    "SegmentationState",
    "SegmentationStateMachine",
    "detect_raw_segments",
    "build_segments",
    "is_speech_at",
    "offset_to_seconds",
    "segment_at",
]
