"""Configuration module."""

from .options import Options
from .parser import ConfigSource, HostConfig, load_config

__all__ = ["ConfigSource", "HostConfig", "Options", "load_config"]
