#!/usr/bin/env python3
"""Main CLI entry point for plugdock."""

import argparse
import asyncio
import sys
from pathlib import Path

from ..application import Application
from ..config import Options, load_config
from ..logging import configure_logging
from ..plugins import discover_plugins


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover and load plugdock plugins")
    parser.add_argument("--version", action="version", version="plugdock 0.1.0")

    # Global config override arguments
    parser.add_argument(
        "--plugin",
        action="append",
        metavar="PATH_OR_NAME",
        help="Load this plugin instead of discovering installed ones (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        help="Log output format (default: console)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("discover", help="List the plugins that would be loaded")
    subparsers.add_parser("load", help="Load all plugins into a new application")

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_parser.set_defaults(print_help=config_parser.print_help)
    config_subparsers.add_parser("validate", help="Validate configuration")
    show_parser = config_subparsers.add_parser("show", help="Show effective configuration")
    show_parser.add_argument(
        "--json", action="store_true", help="Output in JSON format"
    )

    return parser


def main(argv=None) -> int:
    """Main CLI function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Build CLI config overrides
    cli_overrides = {}
    if args.plugin:
        cli_overrides["plugin"] = args.plugin
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    if args.command == "discover":
        return discover_command(args, cli_overrides)
    elif args.command == "load":
        return load_command(args, cli_overrides)
    elif args.command == "config":
        if args.config_command == "validate":
            return config_validate(args, cli_overrides)
        elif args.config_command == "show":
            return config_show(args, cli_overrides)
        args.print_help()
        return 0
    else:
        parser.print_help()
    return 0


def _create_application(cli_overrides) -> Application:
    try:
        options = Options.load(Path.cwd(), cli_overrides)
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(options.config.log_level, options.config.log_format)
    return Application(options)


def discover_command(args, cli_overrides=None) -> int:
    """Print the plugins that `load` would load, one per line."""
    app = _create_application(cli_overrides)
    for plugin in discover_plugins(app):
        print(plugin)
    return 1 if app.logger.has_errors() else 0


def load_command(args, cli_overrides=None) -> int:
    """Load every plugin; the exit status reflects logged errors."""
    app = _create_application(cli_overrides)
    asyncio.run(app.bootstrap())
    return 1 if app.logger.has_errors() else 0


def config_validate(args, cli_overrides=None) -> int:
    """Validate configuration."""
    repo_path = Path.cwd()
    try:
        config, sources = load_config(repo_path, cli_overrides)
    except Exception as e:
        print(f"✗ Configuration validation failed: {e}", file=sys.stderr)
        return 1

    names = [source.name for source in sources]
    print(f"✓ Sources: {', '.join(names)}")
    print(f"✓ Version: {config.version}")
    if Options(config, sources).is_set("plugin"):
        print(f"✓ Explicit plugins: {len(config.plugin)} (discovery disabled)")
    else:
        print("✓ Plugins: automatic discovery")

    print("\nConfiguration validation completed successfully.")
    return 0


def config_show(args, cli_overrides=None) -> int:
    """Show effective configuration."""
    repo_path = Path.cwd()
    try:
        config, sources = load_config(repo_path, cli_overrides)
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(config.model_dump_json(indent=2))
        return 0

    # Later sources win
    source_map = {}
    for source in sources:
        for key in source.data:
            source_map[key] = source.name

    for key, value in config.model_dump().items():
        print(f"{key}: {value} (from {source_map.get(key, 'defaults')})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
