"""Plugin discovery and loading for plugdock."""

from .discovery import PLUGIN_KEYWORDS, discover_installed_plugins, discover_plugins, is_plugin
from .loader import ENTRY_POINT, get_plugin_display_name, load_plugins

__all__ = [
    "ENTRY_POINT",
    "PLUGIN_KEYWORDS",
    "discover_installed_plugins",
    "discover_plugins",
    "get_plugin_display_name",
    "is_plugin",
    "load_plugins",
]
