"""Command line entry point: ``python -m codicibot``.

Subcommands:

- ``run``: answer Telegram messages (long polling) until Ctrl+C.
- ``query KIND NAME``: print the codes a user would receive.
- ``submit KIND NAME CODE``: apply one contribution, e.g. to seed codes
  as a privileged user.

Configuration comes from the environment (see :class:`CodiciConfig`).
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import AsyncIterator, Sequence

from codicibot.bot import CodiciBot
from codicibot.config import CodiciConfig
from codicibot.exceptions import CodiciError
from codicibot.models.outcome import QueryStatus
from codicibot.models.record import VehicleKey, VehicleKind
from codicibot.polling import CodiciPoller
from codicibot.store.base import CodeStore
from codicibot.store.memory import InMemoryCodeStore
from codicibot.store.sqlite import SqliteCodeStore

_logger = logging.getLogger("codicibot")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="codicibot",
        description="Crowdsourced OpenMove codes bot for Trentino public transport.",
    )
    parser.add_argument(
        "--database",
        help="SQLite file for the code store (default: $CODICIBOT_DATABASE or codicibot.sqlite3).",
    )
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Keep codes in memory only (lost on exit).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Start long polling against the Telegram Bot API.")

    query = sub.add_parser("query", help="Print the trusted codes of a vehicle.")
    query.add_argument("kind", choices=[kind.value for kind in VehicleKind])
    query.add_argument("name")

    submit = sub.add_parser("submit", help="Submit a code for a vehicle.")
    submit.add_argument("kind", choices=[kind.value for kind in VehicleKind])
    submit.add_argument("name")
    submit.add_argument("code")
    submit.add_argument("--user", default="cli", help="Submitter id recorded on the code.")
    submit.add_argument(
        "--privileged",
        action="store_true",
        help="Submit as a superuser: overrides consensus and persists the code.",
    )
    return parser.parse_args(argv)


@contextlib.asynccontextmanager
async def _open_store(config: CodiciConfig, memory: bool) -> AsyncIterator[CodeStore]:
    if memory:
        yield InMemoryCodeStore()
        return
    store = SqliteCodeStore(config.database_path, timeout=config.store_timeout)
    await store.initialize()
    try:
        yield store
    finally:
        await store.close()


async def _run(config: CodiciConfig, bot: CodiciBot) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(signum, stop.set)
    async with CodiciPoller(config, bot) as poller:
        await poller.run(stop)


async def _async_main(args: argparse.Namespace) -> int:
    overrides = {"database_path": args.database} if args.database else {}
    config = CodiciConfig.from_env(**overrides)

    async with _open_store(config, args.memory) as store:
        bot = CodiciBot.from_store(config, store)

        if args.command == "run":
            await _run(config, bot)
            return 0

        if args.command == "query":
            result = await bot.resolver.resolve(VehicleKey(kind=VehicleKind(args.kind), name=args.name))
            if result.status is QueryStatus.INTERNAL_ERROR:
                print("query failed, see log", file=sys.stderr)
                return 1
            for code in result.codes:
                print(code)
            return 0

        outcome = await bot.engine.submit(
            VehicleKind(args.kind),
            args.name,
            args.code,
            args.user,
            privileged=args.privileged,
        )
        print(outcome.kind.value)
        return 1 if outcome.kind.is_error else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_async_main(args))
    except CodiciError as exc:
        _logger.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
