"""
queuehub CLI.

Runs single queue operations against the stores named in a JSON config file
(same layout as QueueHandler.create() input).

    queuehub --config stores.json push --identifier orders --key o1 --value '{"targetType": ["email"]}'
    queuehub --config stores.json items --identifier orders --store redis
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from dotenv import load_dotenv

from queuehub.config import get_settings
from queuehub.exceptions import ConfigurationError, QueueError
from queuehub.handler import QueueHandler
from queuehub.logging import LogContext, configure_logging, get_logger
from queuehub.models import DispatchOutcome

logger = get_logger("cli")


def _load_config(path: Optional[str]) -> Any:
    """Read the store config file."""
    path = path or get_settings().config_file
    if not path:
        raise ConfigurationError("No store config given (use --config or QUEUEHUB_CONFIG)")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read store config '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Store config '{path}' is not valid JSON: {e}") from e


def _queue_data(args, with_key: bool = False, with_value: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {"identifier": args.identifier}
    if with_key:
        data["key"] = args.key
    if with_value:
        try:
            data["value"] = json.loads(args.value)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"--value is not valid JSON: {e}") from e
    if args.store:
        data["store"] = args.store
    return data


def format_outcome(outcome: DispatchOutcome) -> str:
    return json.dumps(outcome.to_dict(), indent=2, default=str)


async def cmd_push(handler: QueueHandler, args) -> DispatchOutcome:
    """Insert one value."""
    return await handler.push(_queue_data(args, with_key=True, with_value=True), callback=lambda o: None)


async def cmd_read(handler: QueueHandler, args) -> DispatchOutcome:
    """Read one value."""
    return await handler.read(_queue_data(args, with_key=True))


async def cmd_keys(handler: QueueHandler, args) -> DispatchOutcome:
    """List keys of a queue."""
    return await handler.read_keys(_queue_data(args))


async def cmd_items(handler: QueueHandler, args) -> DispatchOutcome:
    """List keys and values of a queue."""
    return await handler.read_keys_and_values(_queue_data(args))


async def cmd_delete(handler: QueueHandler, args) -> DispatchOutcome:
    """Delete one key."""
    return await handler.delete_key(_queue_data(args, with_key=True), callback=lambda o: None)


async def cmd_registrations(handler: QueueHandler, args) -> DispatchOutcome:
    """Show first-seen / last-read times of registered identifiers."""
    return await handler.read_registrations(args.store)


async def cmd_ping(handler: QueueHandler, args) -> DispatchOutcome:
    """Check store connectivity."""
    return await handler.ping(args.store)


COMMANDS = {
    "push": cmd_push,
    "read": cmd_read,
    "keys": cmd_keys,
    "items": cmd_items,
    "delete": cmd_delete,
    "registrations": cmd_registrations,
    "ping": cmd_ping,
}


async def run_command(args) -> int:
    """Build a handler, run one command and print its outcome."""
    handler = await QueueHandler.create(_load_config(args.config))
    async with handler:
        with LogContext(command=args.command):
            outcome = await COMMANDS[args.command](handler, args)
    print(format_outcome(outcome))
    return 0 if outcome.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="queuehub",
        description="Run queue operations against the configured stores",
    )
    parser.add_argument("--config", "-c", help="Store config JSON file (default: $QUEUEHUB_CONFIG)")
    parser.add_argument("--log-level", help="Override QUEUEHUB_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_store(sub):
        sub.add_argument(
            "--store", "-s", action="append", help="Restrict to this store (repeatable)"
        )

    push_parser = subparsers.add_parser("push", help="Insert a value")
    push_parser.add_argument("--identifier", "-i", required=True)
    push_parser.add_argument("--key", "-k", required=True)
    push_parser.add_argument("--value", "-v", required=True, help="JSON object")
    add_store(push_parser)

    for name, help_text in (("read", "Read one value"), ("delete", "Delete one key")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--identifier", "-i", required=True)
        sub.add_argument("--key", "-k", required=True)
        add_store(sub)

    for name, help_text in (("keys", "List keys"), ("items", "List keys and values")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--identifier", "-i", required=True)
        add_store(sub)

    add_store(subparsers.add_parser("registrations", help="Show registration records"))
    add_store(subparsers.add_parser("ping", help="Check store connectivity"))

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        sys.exit(2)

    configure_logging(args.log_level)

    try:
        code = asyncio.run(run_command(args))
    except QueueError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
