#!/usr/bin/env python3

import argparse
import logging
from collections.abc import Callable, Sequence

from billbeam.runtime.logging import configure_logging, set_log_level
from billbeam.runtime.storage import StorageError


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    except StorageError as exc:
        print(f"Storage error: {exc}")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="billbeam",
        description="BillBeam bill splitting CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  serve [--host] [--port]    Start the API server
  split <image> --people ... Extract a receipt and split it
  history --user <id>        List saved receipts
  groups --user <id>         List saved groups (* = default)
""",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=None, help="Host to bind to (default: from settings)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind to (default: from settings)")

    split_parser = subparsers.add_parser("split", help="Extract a receipt photo and split it")
    split_parser.add_argument("image", help="Path to receipt image")
    split_parser.add_argument("--people", nargs="+", help="Names of people sharing the bill")
    split_parser.add_argument("--equal", action="store_true", help="Everyone shares every item")
    split_parser.add_argument("--round", action="store_true", help="Round each total to the nearest dollar")
    split_parser.add_argument("--share", action="store_true", help="Print a shareable itemized message")
    split_parser.add_argument("--user", default=None, help="User id (loads default group, enables --save)")
    split_parser.add_argument("--save", action="store_true", help="Save the receipt to the user's history")

    history_parser = subparsers.add_parser("history", help="List saved receipts")
    history_parser.add_argument("--user", required=True, help="User id")

    groups_parser = subparsers.add_parser("groups", help="List saved groups")
    groups_parser.add_argument("--user", required=True, help="User id")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging()
    if args.verbose:
        set_log_level(logging.DEBUG)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "serve":
        from billbeam.cli.commands import cmd_serve

        return _run_command(cmd_serve, args)
    elif args.command == "split":
        from billbeam.cli.commands import cmd_split

        return _run_command(cmd_split, args)
    elif args.command == "history":
        from billbeam.cli.commands import cmd_history

        return _run_command(cmd_history, args)
    elif args.command == "groups":
        from billbeam.cli.commands import cmd_groups

        return _run_command(cmd_groups, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
