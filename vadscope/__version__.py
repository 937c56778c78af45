#!/usr/bin/env python3
"""Version information for vadscope."""

# PEP 440 compliant version for pip/wheel
__version__ = "0.3.1"

# Human-readable version for display
__version_display__ = "0.3.1"

# Version metadata
__version_info__ = {
    "major": 0,
    "minor": 3,
    "patch": 1,
    "release": "",
}
