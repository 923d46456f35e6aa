"""Automatic discovery of installed plugins.

Plugins are packages installed in a ``__pypackages__`` directory next to the
project or in any of its parent directories. A package is a plugin when the
``keywords`` of its ``pyproject.toml`` contain one of :data:`PLUGIN_KEYWORDS`::

    __pypackages__/
        plugdock-mermaid/
            pyproject.toml      # [project] keywords = ["plugdock-plugin"]
            __init__.py         # def load(app): ...
        @acme/
            widgets/
                pyproject.toml
                __init__.py
"""

import os
import tomllib
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, StrictStr

from ..utils.validation import validate
from .formats import SCOPE_MARKER

PACKAGE_STORE = "__pypackages__"
PACKAGE_INFO_FILE = "pyproject.toml"
PLUGIN_KEYWORDS = ("plugdockplugin", "plugdock-plugin", "plugdock-theme")


class ProjectMetadata(BaseModel):
    """The ``[project]`` table of a ``pyproject.toml``, reduced to its keywords."""

    model_config = ConfigDict(extra="ignore")

    keywords: List[StrictStr]


class PackageDescriptor(BaseModel):
    """Parsed package metadata, as far as plugin detection cares."""

    model_config = ConfigDict(extra="ignore")

    project: ProjectMetadata


def discover_plugins(app) -> List[str]:
    """Return the plugins the application should load.

    If the ``plugin`` option is set, automatic discovery is disabled and the
    configured list is returned as is.
    """
    if app.options.is_set("plugin"):
        return list(app.options.get_value("plugin"))

    return discover_installed_plugins(app.logger)


def discover_installed_plugins(logger, start: Optional[str] = None) -> List[str]:
    """Find plugins in every ``__pypackages__`` from ``start`` up to the root.

    Args:
        logger: Receives an error for every metadata file that cannot be parsed
        start: Directory to start from, defaults to the working directory

    Returns:
        Plugin directory paths, innermost package store first
    """
    result: List[str] = []
    path = os.path.abspath(start or os.getcwd())

    while True:
        modules = os.path.join(path, PACKAGE_STORE)
        if os.path.isdir(modules):
            result.extend(_discover_modules(logger, modules))

        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent

    return result


def _discover_modules(logger, base_path: str) -> List[str]:
    """Scan one package store for plugins."""
    candidates: List[str] = []
    for name in sorted(os.listdir(base_path)):
        scope_dir = os.path.join(base_path, name)
        if name.startswith(SCOPE_MARKER) and os.path.isdir(scope_dir):
            candidates.extend(os.path.join(name, child) for child in sorted(os.listdir(scope_dir)))
        candidates.append(name)

    plugins = []
    for name in candidates:
        info_file = os.path.join(base_path, name, PACKAGE_INFO_FILE)
        if not os.path.exists(info_file):
            continue

        info = load_package_info(logger, info_file)
        if is_plugin(info):
            plugins.append(os.path.join(base_path, name))
    return plugins


def load_package_info(logger, file_name: str) -> Any:
    """Load and parse the given ``pyproject.toml``.

    Returns an empty dict, after logging an error, if the file cannot be read
    or is not valid TOML.
    """
    try:
        with open(file_name, "rb") as f:
            return tomllib.load(f)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        logger.error(f"Could not parse {file_name}")
        return {}


def is_plugin(info: Any) -> bool:
    """Test whether the given package metadata describes a plugdock plugin."""
    if not validate(PackageDescriptor, info):
        return False

    keywords = info["project"]["keywords"]
    return any(keyword.lower() in PLUGIN_KEYWORDS for keyword in keywords)
