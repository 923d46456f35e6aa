"""plugdock - plugin discovery and loading for host applications."""

from .application import Application, Logger
from .config import Options
from .plugins import discover_plugins, load_plugins

__version__ = "0.1.0"

__all__ = [
    "Application",
    "Logger",
    "Options",
    "discover_plugins",
    "load_plugins",
]
