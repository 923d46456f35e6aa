"""Configuration parser with Pydantic validation."""

import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "PLUGDOCK_"
CONFIG_DIR = ".plugdock"
CONFIG_FILE = "config.yaml"

# Keys whose values are always lists of strings
_LIST_KEYS = frozenset({"plugin"})


class HostConfig(BaseModel):
    """Host application configuration.

    Attributes:
        version: Configuration schema version.
        plugin: Explicit list of plugins to load. When supplied by any source
            other than the defaults, automatic discovery is skipped.
        log_level: Logging level name.
        log_format: Log renderer, "console" or "json".
    """

    version: str = "1.0"
    plugin: List[str] = Field(default_factory=list)
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @field_validator("plugin", mode="before")
    @classmethod
    def coerce_plugin_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


class ConfigSource:
    """Configuration source tracking."""

    def __init__(self, name: str, data: Dict[str, Any]):
        self.name = name
        self.data = data


def _parse_env_vars() -> Dict[str, Any]:
    """Parse PLUGDOCK_* environment variables."""
    env_config = {}

    for key, value in os.environ.items():
        if key.startswith(ENV_PREFIX):
            config_key = key[len(ENV_PREFIX):].lower()
            if config_key in _LIST_KEYS:
                env_config[config_key] = _split_list(value)
            else:
                env_config[config_key] = _parse_env_value(value)

    return env_config


def _parse_env_value(value: str) -> Any:
    """Parse environment variable value to appropriate type."""
    # Handle comma-separated lists
    if "," in value:
        return _split_list(value)

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    return value


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """Merge multiple config dictionaries with later ones taking precedence."""
    result = {}

    for config in configs:
        _deep_merge(result, config)

    return result


def _deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> None:
    """Deep merge source into target."""
    for key, value in source.items():
        if key in target and isinstance(target[key], dict) and isinstance(value, dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value


def _resolve_plugin_paths(value: Any, base: Path) -> Any:
    """Make relative plugin paths (``./x``, ``../x``) absolute against ``base``."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return value
    return [
        os.path.normpath(os.path.join(base, item)) if isinstance(item, str) and item.startswith(".") else item
        for item in value
    ]


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")
    return data


def load_config(
    repo_path: Path, cli_overrides: Optional[Dict[str, Any]] = None
) -> Tuple[HostConfig, List[ConfigSource]]:
    """Load configuration with inheritance: defaults < config.yaml < env vars < CLI args."""
    sources = []

    # 1. Built-in defaults
    defaults = HostConfig().model_dump()
    sources.append(ConfigSource("defaults", defaults))

    # 2. Config file
    config_path = repo_path / CONFIG_DIR / CONFIG_FILE
    file_config = {}
    if config_path.exists():
        file_config = _read_config_file(config_path)
        sources.append(ConfigSource(CONFIG_FILE, file_config))

    # 3. Environment variables
    env_config = _parse_env_vars()
    if env_config:
        sources.append(ConfigSource("environment", env_config))

    # 4. CLI overrides
    cli_config = cli_overrides or {}
    if cli_config:
        sources.append(ConfigSource("cli", cli_config))

    merged_config = _merge_configs(defaults, file_config, env_config, cli_config)
    merged_config["plugin"] = _resolve_plugin_paths(merged_config.get("plugin"), repo_path)
    config = HostConfig(**merged_config)

    return config, sources
