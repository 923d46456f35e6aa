"""Result types shared by the plugin loader."""

from dataclasses import dataclass
from enum import Enum
from types import ModuleType
from typing import Any, Callable, Optional, Union


class ModuleFormat(str, Enum):
    """How a plugin module was brought into the process."""

    EAGER = "eager"
    ASYNC = "async"


@dataclass(frozen=True)
class ModuleLoaded:
    """A plugin module was imported successfully."""

    module: ModuleType
    format: ModuleFormat


@dataclass(frozen=True)
class ModuleLoadFailed:
    """A plugin module could not be imported."""

    error: Exception


ModuleLoadResult = Union[ModuleLoaded, ModuleLoadFailed]


class EntryPointStatus(str, Enum):
    FOUND = "found"
    MISSING = "missing"
    NOT_CALLABLE = "not_callable"


@dataclass(frozen=True)
class EntryPointLookup:
    """Outcome of looking up a plugin's entry point.

    Attributes:
        status: Whether the entry point exists and is callable.
        function: The entry point, only set when status is FOUND.
    """

    status: EntryPointStatus
    function: Optional[Callable[[Any], Any]] = None

    @property
    def found(self) -> bool:
        return self.status is EntryPointStatus.FOUND
