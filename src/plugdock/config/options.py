"""Option access for the host application."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from .parser import ConfigSource, HostConfig, load_config


class Options:
    """Read access to the effective configuration, with set/unset tracking.

    An option counts as set when any source other than the built-in
    defaults supplied it, even if the supplied value equals the default.
    """

    def __init__(self, config: Optional[HostConfig] = None, sources: Optional[List[ConfigSource]] = None):
        self._config = config or HostConfig()
        self._sources = list(sources or [ConfigSource("defaults", self._config.model_dump())])

    @classmethod
    def load(cls, repo_path: Optional[Path] = None, cli_overrides: Optional[Dict[str, Any]] = None) -> "Options":
        """Load options for the given project directory (default: cwd)."""
        config, sources = load_config(repo_path or Path.cwd(), cli_overrides)
        return cls(config, sources)

    @property
    def config(self) -> HostConfig:
        return self._config

    @property
    def sources(self) -> List[ConfigSource]:
        return list(self._sources)

    def is_set(self, name: str) -> bool:
        """Return whether the option was explicitly supplied."""
        self._check_name(name)
        return any(name in source.data for source in self._sources if source.name != "defaults")

    def get_value(self, name: str) -> Any:
        self._check_name(name)
        return getattr(self._config, name)

    def set_value(self, name: str, value: Any) -> None:
        """Set an option programmatically, validating the new value."""
        self._check_name(name)
        data = self._config.model_dump()
        data[name] = value
        self._config = HostConfig(**data)
        self._sources.append(ConfigSource("api", {name: value}))

    def _check_name(self, name: str) -> None:
        if name not in HostConfig.model_fields:
            raise KeyError(f"Unknown option: {name}")
