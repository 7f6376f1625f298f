"""usercount command line: ``usercount <command> [options]``."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from usercount.cli.commands import database, system
from usercount.logging_config import setup_logging

COMMAND_GROUPS = (database, system)


def _print_help(parser: argparse.ArgumentParser):
    def _handler(_args: argparse.Namespace) -> int:
        parser.print_help()
        return 0

    return _handler


def build_parser() -> argparse.ArgumentParser:
    """Top-level parser; bare ``usercount`` and ``usercount help`` print help."""
    parser = argparse.ArgumentParser(
        prog="usercount",
        description="Serve the user count API, set up its database, check health.",
    )
    show_help = _print_help(parser)
    parser.set_defaults(_handler=show_help)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("help", help="Show this help").set_defaults(_handler=show_help)
    for group in COMMAND_GROUPS:
        group.register(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    setup_logging()
    args = build_parser().parse_args(argv)
    raise SystemExit(int(args._handler(args) or 0))


if __name__ == "__main__":
    main()
