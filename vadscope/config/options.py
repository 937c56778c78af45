"""
User-facing detector options.

Options are expressed in milliseconds/seconds and validated with pydantic.
``DetectorConfig`` (in ``modules.speech_segmentation.config``) turns a
validated ``DetectorOptions`` into the sample counts the segmenter works with.

Options can come from keyword arguments, a named preset, or a YAML file:

    # detector.yaml
    preset: conservative
    threshold: 0.55
    speech_pad_ms: 60
"""

import math
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfiguration, OptionsFileError, UnknownPresetError

# Sample rates the frame prober models are trained for
SUPPORTED_SAMPLE_RATES = (8000, 16000)

# Distance between the speech threshold and the silence threshold
THRESHOLD_GAP = 0.15


class DetectorOptions(BaseModel):
    """
    Speech detector options. Defaults match the reference runner settings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sample_rate: int = Field(
        16000,
        description="Sampling rate of the analyzed audio (8000 or 16000 Hz)."
    )
    threshold: float = Field(
        0.5,
        gt=0.0, lt=1.0,
        description="Speech probability at or above which a window counts as speech."
    )
    threshold_gap: float = Field(
        THRESHOLD_GAP,
        gt=0.0, lt=1.0,
        description="Silence threshold is threshold minus this gap (hysteresis)."
    )
    min_speech_duration_ms: int = Field(
        250,
        ge=0,
        description="Speech shorter than this is discarded."
    )
    min_silence_duration_ms: int = Field(
        100,
        ge=0,
        description="Silence must last this long before a segment is closed."
    )
    min_silence_at_max_speech_ms: int = Field(
        98,
        ge=0,
        description="Silence long enough to be used as a cut point when a segment exceeds max_speech_duration_s."
    )
    max_speech_duration_s: float = Field(
        math.inf,
        gt=0.0,
        description="Segments longer than this are split. Use .inf for no limit."
    )
    speech_pad_ms: int = Field(
        30,
        ge=0,
        description="Padding added on both sides of detected speech in milliseconds."
    )

    @field_validator("sample_rate")
    @classmethod
    def _check_sample_rate(cls, value: int) -> int:
        if value not in SUPPORTED_SAMPLE_RATES:
            raise ValueError(
                f"Sampling rate not supported. Only "
                f"{' or '.join(str(sr) for sr in SUPPORTED_SAMPLE_RATES)} Hz are allowed."
            )
        return value

    @property
    def neg_threshold(self) -> float:
        return self.threshold - self.threshold_gap


PRESETS: Dict[str, DetectorOptions] = {
    "default": DetectorOptions(),
    "conservative": DetectorOptions(
        threshold=0.6,
        min_speech_duration_ms=400,
        min_silence_duration_ms=300,
        speech_pad_ms=30,
    ),
    "balanced": DetectorOptions(
        threshold=0.5,
        min_speech_duration_ms=250,
        min_silence_duration_ms=200,
        speech_pad_ms=60,
    ),
    "aggressive": DetectorOptions(
        threshold=0.35,
        min_speech_duration_ms=100,
        min_silence_duration_ms=100,
        speech_pad_ms=100,
    ),
}


def build_options(preset: Optional[str] = None, **overrides: Any) -> DetectorOptions:
    """
    Build validated options from an optional preset plus keyword overrides.

    Raises:
        UnknownPresetError: If ``preset`` is not a known preset name
        InvalidConfiguration: If any value fails validation
    """
    base: Dict[str, Any] = {}
    if preset is not None:
        if preset not in PRESETS:
            raise UnknownPresetError(preset, list(PRESETS))
        base = PRESETS[preset].model_dump()

    base.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return DetectorOptions.model_validate(base)
    except ValidationError as e:
        errors = e.errors()
        if errors:
            first = errors[0]
            field_path = ".".join(str(p) for p in first.get("loc", []))
            raise InvalidConfiguration(
                first.get("msg", str(e)),
                field=field_path or None,
                value=first.get("input"),
            ) from e
        raise InvalidConfiguration(str(e)) from e


def load_options(
    path: Union[str, Path],
    preset: Optional[str] = None,
    **overrides: Any
) -> DetectorOptions:
    """
    Load options from a YAML file.

    Precedence (lowest to highest): ``preset`` argument, the file's own
    ``preset:`` key, the file's option values, keyword ``overrides``.

    Uses safe_load to prevent arbitrary code execution.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise OptionsFileError("File not found", file_path=file_path)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        line = column = None
        if hasattr(e, "problem_mark") and e.problem_mark:
            line = e.problem_mark.line + 1
            column = e.problem_mark.column + 1
        raise OptionsFileError(
            f"YAML syntax error: {e}",
            file_path=file_path,
            line=line,
            column=column,
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise OptionsFileError("YAML root must be a mapping (dict)", file_path=file_path)

    file_preset = data.pop("preset", None)
    values = {**data, **{k: v for k, v in overrides.items() if v is not None}}
    return build_options(file_preset or preset, **values)


def get_schema() -> Dict[str, Any]:
    """Get parameter schema for introspection (CLI help, GUIs)."""
    parameters = []
    for field_name, field_info in DetectorOptions.model_fields.items():
        param = {
            "name": field_name,
            "type": getattr(field_info.annotation, "__name__", str(field_info.annotation)),
            "description": field_info.description or "",
            "default": field_info.default,
        }
        constraints = _extract_constraints(field_info)
        if constraints:
            param["constraints"] = constraints
        parameters.append(param)

    return {"parameters": parameters, "presets": sorted(PRESETS)}


def _extract_constraints(field_info) -> Dict[str, Any]:
    """Extract numeric constraints from field metadata."""
    constraints = {}

    for meta in field_info.metadata:
        for key in ("ge", "le", "gt", "lt"):
            if getattr(meta, key, None) is not None:
                constraints[key] = getattr(meta, key)

    return constraints
