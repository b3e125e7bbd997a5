"""Registration lifecycle commands for eureka-client.

Provides register, deregister, status, heartbeat and run.
"""
from __future__ import annotations

import argparse
import asyncio
import signal
import sys

from eureka_client.cli.context import EXIT_ERROR, EXIT_SUCCESS, build_client
from eureka_client.client import EurekaClient
from eureka_client.config import ConfigError
from eureka_client.exceptions import EurekaClientError

__all__ = ["register_parser", "run"]


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the lifecycle command subparsers.

    Args:
        subparsers: The argparse subparsers action to add to.
    """
    register = subparsers.add_parser(
        "register",
        help="Register the configured instance once.",
    )
    register.set_defaults(handler=run, action="register")

    deregister = subparsers.add_parser(
        "deregister",
        help="Remove the configured instance from the registry.",
    )
    deregister.set_defaults(handler=run, action="deregister")

    status = subparsers.add_parser(
        "status",
        help="Report whether the configured instance is registered.",
    )
    status.set_defaults(handler=run, action="status")

    heartbeat = subparsers.add_parser(
        "heartbeat",
        help="Send a single heartbeat for the configured instance.",
    )
    heartbeat.set_defaults(handler=run, action="heartbeat")

    run_parser = subparsers.add_parser(
        "run",
        help="Register and keep sending heartbeats until interrupted.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  eureka-client --config eureka.yaml run
  eureka-client --config eureka.yaml run --deregister-on-exit
        """,
    )
    run_parser.add_argument(
        "--deregister-on-exit",
        action="store_true",
        help="De-register the instance when the loop is stopped.",
    )
    run_parser.set_defaults(handler=run, action="run")


def run(args: argparse.Namespace) -> int:
    """Execute a lifecycle command.

    Returns:
        Exit code (0=success, 1=error).
    """
    try:
        client = build_client(args)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    try:
        return asyncio.run(_dispatch(client, args))
    except EurekaClientError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        return EXIT_SUCCESS


async def _dispatch(client: EurekaClient, args: argparse.Namespace) -> int:
    async with client:
        if args.action == "register":
            await client.register()
            print(f"Registered {client.config.instance_id}")
            return EXIT_SUCCESS
        if args.action == "deregister":
            await client.deregister()
            print(f"De-registered {client.config.instance_id}")
            return EXIT_SUCCESS
        if args.action == "status":
            registered = await client.is_registered()
            state = "registered" if registered else "not registered"
            print(f"{client.config.instance_id}: {state}")
            return EXIT_SUCCESS if registered else EXIT_ERROR
        if args.action == "heartbeat":
            return EXIT_SUCCESS if await client.heartbeat() else EXIT_ERROR
        if args.action == "run":
            await _run_forever(client, deregister_on_exit=args.deregister_on_exit)
            return EXIT_SUCCESS
    print(f"Error: Unknown command '{args.action}'", file=sys.stderr)
    return EXIT_ERROR


async def _run_forever(client: EurekaClient, *, deregister_on_exit: bool) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            continue
        installed.append(sig)
    try:
        await client.start(stop_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
    if deregister_on_exit:
        await client.deregister()
