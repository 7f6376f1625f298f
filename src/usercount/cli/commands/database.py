"""Database CLI commands: setup and direct count."""

from __future__ import annotations

import argparse

from usercount.cli.commands.common import run_async, with_count_engine
from usercount.config import settings
from usercount.core.count_engine import CountEngine
from usercount.core.exceptions import UserCountError
from usercount.db.setup import setup_database


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    init_cmd = subparsers.add_parser(
        "init-db", help="Create user_list and load the sample users"
    )
    init_cmd.add_argument(
        "--path",
        default=None,
        help="SQLite file to create (default: UC_DATABASE_URL if set, else UC_DATABASE_PATH)",
    )
    init_cmd.add_argument(
        "--no-seed", action="store_true", help="Leave the table empty"
    )
    init_cmd.set_defaults(_handler=cmd_init_db)

    count_cmd = subparsers.add_parser("count", help="Print the user count")
    count_cmd.set_defaults(_handler=cmd_count)


def cmd_init_db(args: argparse.Namespace) -> int:
    return run_async(_cmd_init_db(args.path, seed=not args.no_seed))


async def _cmd_init_db(path: str | None, seed: bool) -> int:
    users = None if seed else []
    # Seed the same database `count` and the API read.
    if path is None and settings.database_url:
        target = settings.database_url
        total = await setup_database(url=target, users=users)
    else:
        target = path or settings.database_path
        total = await setup_database(target, users=users)
    print(f"database: {target}")
    print(f"total users: {total}")
    return 0


def cmd_count(_args: argparse.Namespace) -> int:
    return run_async(with_count_engine(_cmd_count))


async def _cmd_count(engine: CountEngine) -> int:
    try:
        total = await engine.count_users()
    except UserCountError as exc:
        print(f"error: {exc.message} [{exc.code}]")
        return 1
    print(total)
    return 0
