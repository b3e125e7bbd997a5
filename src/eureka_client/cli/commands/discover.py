"""Service discovery command for eureka-client.

Resolves application instances through the registry, falling back to the
configured instance provider.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys

from eureka_client.cli.context import EXIT_ERROR, EXIT_SUCCESS, build_client
from eureka_client.client import EurekaClient
from eureka_client.config import ConfigError
from eureka_client.discover import InstanceSummary, ServiceInstance
from eureka_client.exceptions import InstanceFailure

__all__ = ["register_parser", "run"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the discover command subparser.

    Args:
        subparsers: The argparse subparsers action to add to.
    """
    parser = subparsers.add_parser(
        "discover",
        help="Service discovery tooling.",
        description="Query the registry for the instances of an application.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  eureka-client discover list billing
  eureka-client discover list billing --format json
  eureka-client --config eureka.yaml discover pick billing
        """,
    )
    parser.set_defaults(handler=run)

    discover_subparsers = parser.add_subparsers(dest="subcommand", required=True)

    list_parser = discover_subparsers.add_parser(
        "list",
        help="List the instances of an application.",
    )
    list_parser.add_argument(
        "app_name",
        help="Name of the application to query.",
    )
    list_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text).",
    )

    pick_parser = discover_subparsers.add_parser(
        "pick",
        help="Pick one instance with the configured discovery strategy.",
    )
    pick_parser.add_argument(
        "app_name",
        help="Name of the application to query.",
    )
    pick_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text).",
    )


def run(args: argparse.Namespace) -> int:
    """Execute the discover command.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0=success, 1=error).
    """
    if args.subcommand not in ("list", "pick"):
        print(f"Error: Unknown subcommand '{args.subcommand}'", file=sys.stderr)
        return EXIT_ERROR
    try:
        client = build_client(args, require_file=False)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR
    try:
        instances = asyncio.run(_resolve(client, args.app_name, pick=args.subcommand == "pick"))
    except InstanceFailure as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_ERROR

    if args.format == "json":
        payload = instances[0] if args.subcommand == "pick" else instances
        print(json.dumps(payload, indent=2))
    else:
        _print_instances_text(instances)
    return EXIT_SUCCESS


async def _resolve(client: EurekaClient, app_name: str, *, pick: bool) -> list[ServiceInstance]:
    async with client:
        if pick:
            return [await client.fetch_instance(app_name)]
        return await client.fetch_instances(app_name)


def _print_instances_text(instances: list[ServiceInstance]) -> None:
    for i, instance in enumerate(instances, 1):
        summary = InstanceSummary.from_instance(instance)
        print(f"[{i}] {summary.address or 'N/A'}")
        print(f"    instance: {summary.instance_id or 'N/A'}")
        print(f"    status: {summary.status or 'N/A'}")
