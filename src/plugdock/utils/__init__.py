"""Utility helpers shared by the host and the plugin machinery."""

from .paths import nice_path, normalize_path
from .validation import validate

__all__ = ["nice_path", "normalize_path", "validate"]
