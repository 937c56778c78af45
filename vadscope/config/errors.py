"""
Custom exceptions for the vadscope configuration layer.

These exceptions provide clear, actionable error messages for configuration issues.
A detector is never constructed from options that raise one of these.
"""

from typing import Any, List


class ConfigurationError(Exception):
    """Base exception for all configuration errors."""
    pass


class InvalidConfiguration(ConfigurationError):
    """
    Raised when detector options fail validation.

    Provides context about which field failed and what value was provided.
    """

    def __init__(self, message: str, field: str = None, value: Any = None):
        self.field = field
        self.value = value
        super().__init__(message)

    def __str__(self):
        if self.field:
            return f"Invalid configuration for '{self.field}': {self.args[0]} (got: {self.value!r})"
        return self.args[0]


class UnknownPresetError(InvalidConfiguration):
    """
    Raised when an unknown options preset is referenced.

    Provides list of available presets for easy correction.
    """

    def __init__(self, name: str, available: List[str]):
        self.available = available
        super().__init__(
            f"Unknown preset. Available options: {', '.join(sorted(available))}",
            field="preset",
            value=name,
        )


class OptionsFileError(ConfigurationError):
    """Raised when an options file cannot be read or parsed."""

    def __init__(self, message: str, file_path=None, line: int = None, column: int = None):
        self.file_path = file_path
        self.line = line
        self.column = column
        location = ""
        if file_path is not None:
            location = f"{file_path}"
            if line is not None:
                location += f":{line}"
                if column is not None:
                    location += f":{column}"
            location += ": "
        super().__init__(f"{location}{message}")
