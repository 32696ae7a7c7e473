"""Code record store interface."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from codicibot.exceptions import CodiciStoreTimeoutError
from codicibot.models.record import CodeRecord, VehicleKey

T = TypeVar("T")


class CodeStore(Protocol):
    """Structural store interface used by the consensus engine and the query resolver.

    Records are keyed by ``code``. Having a protocol here makes it easy to
    pass test doubles while keeping the production implementations concrete.
    """

    async def get(self, code: str) -> CodeRecord | None:
        ...

    async def put(self, record: CodeRecord) -> None:
        """Insert or replace the record with ``record.code``."""
        ...

    async def find(self, vehicle: VehicleKey, *, min_confirms: int) -> list[CodeRecord]:
        """Records attached to *vehicle* that are persisted or have ``confirms >= min_confirms``.

        Names match case-insensitively. Results come in insertion order.
        """
        ...


async def bounded(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    """Await a store call, raising :class:`CodiciStoreTimeoutError` after *timeout* seconds.

    A timeout of ``0`` disables the bound. Only the await is cancelled:
    stores that hand work to a thread must enforce the same limit
    themselves (see :class:`~codicibot.store.sqlite.SqliteCodeStore`),
    otherwise a timed-out write may still land.
    """
    if timeout <= 0:
        return await awaitable
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except TimeoutError as exc:
        raise CodiciStoreTimeoutError(
            f"Store {operation} timed out after {timeout:.1f}s",
            operation=operation,
        ) from exc
