"""Config command for eureka-client.

Validates instance configuration files and shows the registration body
they produce.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from eureka_client.cli.context import EXIT_ERROR, EXIT_SUCCESS, EXIT_VALIDATION_FAILED
from eureka_client.config import ConfigError, load_config

__all__ = ["register_parser", "run"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the config command subparser.

    Args:
        subparsers: The argparse subparsers action to add to.
    """
    parser = subparsers.add_parser(
        "config",
        help="Inspect or validate instance configuration.",
        description="Validate instance configuration files.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  eureka-client config validate eureka.yaml
  eureka-client config show eureka.yaml
        """,
    )
    parser.set_defaults(handler=run)

    config_subparsers = parser.add_subparsers(dest="subcommand", required=True)

    validate_parser = config_subparsers.add_parser(
        "validate",
        help="Validate a configuration file.",
    )
    validate_parser.add_argument(
        "config_file",
        type=Path,
        help="Path to the configuration file to validate.",
    )

    show_parser = config_subparsers.add_parser(
        "show",
        help="Print the registration body built from a configuration file.",
    )
    show_parser.add_argument(
        "config_file",
        type=Path,
        help="Path to the configuration file.",
    )


def run(args: argparse.Namespace) -> int:
    """Execute the config command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0=success, 1=error, 2=validation failed).
    """
    config_file: Path = args.config_file
    if not config_file.exists():
        print(f"Error: Configuration file not found: {config_file}", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = load_config(config_file)
    except ConfigError as exc:
        print(f"Validation failed: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_FAILED

    if args.subcommand == "validate":
        print(f"✓ Configuration file is valid: {config_file}")
        print(f"  instance: {config.instance_id}")
        print(f"  registry: {config.eureka_default_url}")
        return EXIT_SUCCESS
    if args.subcommand == "show":
        print(json.dumps(config.registration_payload(), indent=2))
        return EXIT_SUCCESS

    print(f"Error: Unknown subcommand '{args.subcommand}'", file=sys.stderr)
    return EXIT_ERROR
