"""Utility helpers for vadscope."""

from .logger import setup_logger

__all__ = ["setup_logger"]
