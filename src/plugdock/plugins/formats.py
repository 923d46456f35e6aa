"""Module formats understood by the plugin loader.

Plugins come in two formats. Ordinary modules are imported eagerly through
the regular import machinery. Modules that use top-level ``await`` (or
``async for`` / ``async with``) cannot be imported that way, compiling them
raises a ``SyntaxError``. Those are executed by :func:`import_async_module`,
which runs the module body as a coroutine on the running event loop.

Plugin identifiers are either filesystem paths (a package directory or a
single ``.py`` file) or dotted module names resolvable through ``sys.path``.
"""

import ast
import hashlib
import importlib
import importlib.util
import inspect
import os
import re
import sys
from importlib.machinery import ModuleSpec
from pathlib import Path
from types import FunctionType, ModuleType
from typing import List, Optional, Tuple
from urllib.parse import urlsplit
from urllib.request import url2pathname

SCOPE_MARKER = "@"

# Modules loaded from a path are registered in sys.modules under this prefix
PATH_MODULE_PREFIX = "plugdock_plugin_"

_TOP_LEVEL_AWAIT_MESSAGES = frozenset(
    {
        "'await' outside function",
        "'async for' outside async function",
        "'async with' outside async function",
        "asynchronous comprehension outside of an asynchronous function",
    }
)


class UnsupportedSpecifierError(ImportError):
    """The async loader was given something other than a file: URL or module name."""


def requires_async_format(error: BaseException) -> bool:
    """Tell whether an import error means the module needs the async loader."""
    return isinstance(error, SyntaxError) and error.msg in _TOP_LEVEL_AWAIT_MESSAGES


def is_path_identifier(plugin: str) -> bool:
    """Tell filesystem paths apart from dotted module names."""
    if os.path.isabs(plugin):
        return True
    if plugin.startswith(("./", "../", ".\\", "..\\")):
        return True
    return os.sep in plugin or bool(os.altsep and os.altsep in plugin)


def to_async_specifier(plugin: str) -> str:
    """Convert a path to a file: URL, pass module names through.

    Relative paths are resolved against the working directory, as the eager
    loader does.
    """
    if is_path_identifier(plugin):
        return Path(plugin).resolve().as_uri()
    return plugin


def module_name_for_path(path: Path) -> str:
    """Derive the sys.modules name used for a plugin loaded from a path.

    The name ends with a digest of the full path, so two plugins only share
    a name when they are the same file. ``/store/@acme/widgets`` becomes
    ``plugdock_plugin_acme_widgets_<digest>``.
    """
    parts = [path.stem if path.suffix == ".py" else path.name]
    if path.parent.name.startswith(SCOPE_MARKER):
        parts.insert(0, path.parent.name[len(SCOPE_MARKER):])
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:10]
    return PATH_MODULE_PREFIX + "_".join(re.sub(r"\W", "_", part) for part in parts) + "_" + digest


def _module_location(path: Path) -> Tuple[Path, Optional[List[str]]]:
    """Return the source file and, for packages, the submodule search path."""
    if path.is_dir():
        return path / "__init__.py", [str(path)]
    return path, None


def _new_module(name: str, origin: Path, search_locations: Optional[List[str]]) -> Tuple[ModuleType, ModuleSpec]:
    spec = importlib.util.spec_from_file_location(
        name, str(origin), submodule_search_locations=search_locations
    )
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module from {origin}", name=name, path=str(origin))
    return importlib.util.module_from_spec(spec), spec


def _cached_module(name: str, origin: Path) -> Optional[ModuleType]:
    module = sys.modules.get(name)
    if module is not None and getattr(module, "__file__", None) == str(origin):
        return module
    return None


def import_module_eager(plugin: str) -> ModuleType:
    """Import a plugin with the regular import machinery.

    Module names go through :func:`importlib.import_module`. Paths are loaded
    from their file (``__init__.py`` for package directories) and registered
    in ``sys.modules``; loading the same file twice returns the cached module.

    Raises:
        ModuleNotFoundError: If the identifier does not resolve to a module.
        SyntaxError: If the module source does not compile, including modules
            in the async format (see :func:`requires_async_format`).
    """
    if not is_path_identifier(plugin):
        return importlib.import_module(plugin)

    path = Path(plugin).resolve()
    name = module_name_for_path(path)
    origin, search_locations = _module_location(path)
    if not origin.is_file():
        raise ModuleNotFoundError(f"Cannot find module '{plugin}'", name=name, path=str(origin))

    cached = _cached_module(name, origin)
    if cached is not None:
        return cached

    module, spec = _new_module(name, origin, search_locations)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def _resolve_specifier(specifier: str) -> Tuple[str, Path, Optional[List[str]]]:
    parsed = urlsplit(specifier)

    if parsed.scheme == "file":
        path = Path(url2pathname(parsed.path))
        origin, search_locations = _module_location(path)
        if not origin.is_file():
            raise ModuleNotFoundError(f"Cannot find module '{specifier}'", name=specifier, path=str(origin))
        return module_name_for_path(path), origin, search_locations

    # A Windows path such as C:\plugins\foo parses with the scheme "c"
    if parsed.scheme or is_path_identifier(specifier):
        raise UnsupportedSpecifierError(
            f"Only file: URLs and module names are supported by the async loader, received '{specifier}'",
            name=specifier,
        )

    spec = importlib.util.find_spec(specifier)
    if spec is None or not spec.has_location or spec.origin is None:
        raise ModuleNotFoundError(f"No module named '{specifier}'", name=specifier)
    search_locations = spec.submodule_search_locations
    return specifier, Path(spec.origin), list(search_locations) if search_locations is not None else None


async def import_async_module(specifier: str) -> ModuleType:
    """Execute a module that uses top-level await.

    Args:
        specifier: A ``file:`` URL or a dotted module name. Bare paths are
            rejected, convert them with :func:`to_async_specifier` first.

    Returns:
        The executed module, registered in ``sys.modules``. A module that is
        already loaded from the same file is returned without running it again.

    Raises:
        UnsupportedSpecifierError: If the specifier is a bare path or a URL
            with a scheme other than ``file``.
        ModuleNotFoundError: If the specifier does not resolve to a module.
    """
    name, origin, search_locations = _resolve_specifier(specifier)
    cached = _cached_module(name, origin)
    if cached is not None:
        return cached

    source = importlib.util.decode_source(origin.read_bytes())
    code = compile(source, str(origin), "exec", flags=ast.PyCF_ALLOW_TOP_LEVEL_AWAIT, dont_inherit=True)

    module, _ = _new_module(name, origin, search_locations)
    sys.modules[name] = module
    try:
        result = FunctionType(code, module.__dict__)()
        if inspect.isawaitable(result):
            await result
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module
