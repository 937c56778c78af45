"""
Configuration layer for vadscope.

Exports the pydantic options model, presets, YAML loading and the
configuration exception hierarchy.
"""

from .errors import (
    ConfigurationError,
    InvalidConfiguration,
    OptionsFileError,
    UnknownPresetError,
)
from .options import (
    DetectorOptions,
    PRESETS,
    SUPPORTED_SAMPLE_RATES,
    THRESHOLD_GAP,
    build_options,
    get_schema,
    load_options,
)

__all__ = [
    "ConfigurationError",
    "InvalidConfiguration",
    "OptionsFileError",
    "UnknownPresetError",
    "DetectorOptions",
    "PRESETS",
    "SUPPORTED_SAMPLE_RATES",
    "THRESHOLD_GAP",
    "build_options",
    "get_schema",
    "load_options",
]
