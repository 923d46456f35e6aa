"""Loading plugins into a running application."""

import inspect
import traceback
from types import ModuleType
from typing import Awaitable, Callable, Sequence

from ..utils.paths import nice_path
from .base import (
    EntryPointLookup,
    EntryPointStatus,
    ModuleFormat,
    ModuleLoaded,
    ModuleLoadFailed,
    ModuleLoadResult,
)
from .discovery import PACKAGE_STORE
from .formats import (
    import_async_module,
    import_module_eager,
    requires_async_format,
    to_async_specifier,
)

ENTRY_POINT = "load"

_STORE_PREFIX = f"./{PACKAGE_STORE}/"


async def load_plugins(app, plugins: Sequence[str]) -> None:
    """Load the given plugins into the application, one after the other.

    Each plugin's ``load(app)`` is called, and awaited if it returns an
    awaitable, before the next plugin is touched. A plugin that fails to
    import or raises from ``load`` is reported on ``app.logger`` and skipped;
    no error escapes this function.
    """
    for plugin in plugins:
        plugin_display = get_plugin_display_name(plugin)

        try:
            result = await load_plugin_module(plugin)
            if isinstance(result, ModuleLoadFailed):
                raise result.error

            entry_point = find_entry_point(result.module)
            if entry_point.found:
                outcome = entry_point.function(app)
                if inspect.isawaitable(outcome):
                    await outcome
                app.logger.info(f"Loaded plugin {plugin_display}")
            else:
                app.logger.error(
                    f"Invalid structure in plugin {plugin_display}, no {ENTRY_POINT} function found."
                )
        except Exception as error:
            app.logger.error(f"The plugin {plugin_display} could not be loaded.")
            if error.__traceback__ is not None:
                app.logger.error("".join(traceback.format_exception(error)).rstrip())


async def load_plugin_module(
    plugin: str,
    import_eager: Callable[[str], ModuleType] = import_module_eager,
    import_async: Callable[[str], Awaitable[ModuleType]] = import_async_module,
) -> ModuleLoadResult:
    """Import a plugin, falling back to the async format when required.

    The eager import runs first. Only when it fails because the module uses
    top-level await is the import retried, once, with the async loader.
    """
    try:
        return ModuleLoaded(import_eager(plugin), ModuleFormat.EAGER)
    except Exception as error:
        if not requires_async_format(error):
            return ModuleLoadFailed(error)

    try:
        module = await import_async(to_async_specifier(plugin))
    except Exception as error:
        return ModuleLoadFailed(error)
    return ModuleLoaded(module, ModuleFormat.ASYNC)


def find_entry_point(module: ModuleType) -> EntryPointLookup:
    """Look up the plugin's ``load`` function on a loaded module."""
    if not hasattr(module, ENTRY_POINT):
        return EntryPointLookup(EntryPointStatus.MISSING)

    function = getattr(module, ENTRY_POINT)
    if not callable(function):
        return EntryPointLookup(EntryPointStatus.NOT_CALLABLE)
    return EntryPointLookup(EntryPointStatus.FOUND, function)


def get_plugin_display_name(plugin: str) -> str:
    """Short name for log messages, without the package store prefix."""
    path = nice_path(plugin)
    if path.startswith(_STORE_PREFIX):
        return path[len(_STORE_PREFIX):]
    return plugin
