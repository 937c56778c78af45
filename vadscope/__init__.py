"""vadscope - speech segment detection from per-window speech probabilities"""

from vadscope.__version__ import __version__, __version_info__

# Public API exports
from vadscope.config import (
    ConfigurationError,
    DetectorOptions,
    InvalidConfiguration,
    load_options,
)
from vadscope.modules.speech_segmentation import (
    FrameProber,
    FrameProberFactory,
    LiveSpeechMonitor,
    ProbeError,
    SegmentationResult,
    SpeechDetector,
    SpeechSegment,
    create_detector,
)
from vadscope.utils.logger import setup_logger

__all__ = [
    "__version__",
    "ConfigurationError",
    "DetectorOptions",
    "InvalidConfiguration",
    "load_options",
    "FrameProber",
    "FrameProberFactory",
    "LiveSpeechMonitor",
    "ProbeError",
    "SegmentationResult",
    "SpeechDetector",
    "SpeechSegment",
    "create_detector",
    "setup_logger",
]
