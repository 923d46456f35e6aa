"""Helpers for displaying filesystem paths in log messages."""

import os
import re

_DRIVE_LETTER = re.compile(r"^([a-z]):")


def normalize_path(path: str) -> str:
    """Use forward slashes and an upper-case drive letter."""
    path = path.replace("\\", "/")
    return _DRIVE_LETTER.sub(lambda m: m.group(1).upper() + ":", path)


def nice_path(path: str) -> str:
    """Render a path relative to the working directory when possible.

    Relative paths are returned unchanged. Absolute paths below the working
    directory are returned as ``./<relative>``; anything else is returned
    normalized but absolute.
    """
    if not os.path.isabs(path):
        return path

    try:
        relative = os.path.relpath(path, os.getcwd())
    except ValueError:
        # Different drive on Windows
        return normalize_path(path)

    if relative.startswith(".."):
        return normalize_path(path)
    return f"./{normalize_path(relative)}"
