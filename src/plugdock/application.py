"""The host application plugins are loaded into."""

from typing import Any, Dict, Optional

from .config import Options
from .logging import get_logger
from .plugins import discover_plugins, load_plugins


class Logger:
    """Thin wrapper around a structlog logger that counts problems.

    Plugins receive it as ``app.logger``; the CLI uses the counters to pick
    its exit status.
    """

    def __init__(self, logger: Any = None):
        self._logger = logger if logger is not None else get_logger("plugdock")
        self.error_count = 0
        self.warning_count = 0

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self.warning_count += 1
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self.error_count += 1
        self._logger.error(message)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def reset(self) -> None:
        self.error_count = 0
        self.warning_count = 0


class Application:
    """Host application.

    Attributes:
        options: Effective configuration.
        logger: Logger shared with plugins.
        themes: Themes registered by plugins, by name.
    """

    def __init__(self, options: Optional[Options] = None, logger: Optional[Logger] = None):
        self.options = options or Options()
        self.logger = logger or Logger()
        self.themes: Dict[str, Any] = {}

    def define_theme(self, name: str, theme: Any) -> None:
        """Register a theme under a unique name."""
        if name in self.themes:
            raise ValueError(f"The theme '{name}' has already been defined.")
        self.themes[name] = theme

    async def bootstrap(self) -> None:
        """Discover plugins (unless configured explicitly) and load them."""
        plugins = discover_plugins(self)
        await load_plugins(self, plugins)
