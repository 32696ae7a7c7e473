"""SQLite-backed code record store."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from codicibot.exceptions import CodiciStoreError, CodiciStoreTimeoutError
from codicibot.models.record import CodeRecord, VehicleKey, VehicleKind

_logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS codes (
    code TEXT PRIMARY KEY,
    vehicle TEXT NOT NULL CHECK (vehicle IN ('bus', 'ropeway', 'train')),
    vehicle_name TEXT NOT NULL,
    name_key TEXT NOT NULL,
    persist INTEGER NOT NULL DEFAULT 0,
    confirms INTEGER NOT NULL DEFAULT 0 CHECK (confirms >= 0),
    submitted_by TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS codes_vehicle_idx ON codes (vehicle, name_key);
"""

_UPSERT = """
INSERT INTO codes (code, vehicle, vehicle_name, name_key, persist, confirms, submitted_by, created_at, updated_at)
VALUES (:code, :vehicle, :vehicle_name, :name_key, :persist, :confirms, :submitted_by, :created_at, :updated_at)
ON CONFLICT (code) DO UPDATE SET
    vehicle = excluded.vehicle,
    vehicle_name = excluded.vehicle_name,
    name_key = excluded.name_key,
    persist = excluded.persist,
    confirms = excluded.confirms,
    submitted_by = excluded.submitted_by,
    updated_at = excluded.updated_at
"""

_COLUMNS = "code, vehicle, vehicle_name, persist, confirms, submitted_by, created_at, updated_at"


def _row_to_record(row: sqlite3.Row) -> CodeRecord:
    return CodeRecord(
        code=row["code"],
        vehicle_kind=VehicleKind(row["vehicle"]),
        vehicle_name=row["vehicle_name"],
        persist=bool(row["persist"]),
        confirms=row["confirms"],
        submitted_by=row["submitted_by"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class SqliteCodeStore:
    """Durable store on a single SQLite file.

    The blocking ``sqlite3`` calls run in a worker thread; a lock serialises
    access to the shared connection. A worker thread cannot be cancelled
    from the event loop, so each call bounds itself: waiting for the lock
    and for SQLite's own file lock together may not exceed *timeout*
    seconds, after which :class:`CodiciStoreTimeoutError` is raised and
    nothing is written.
    """

    def __init__(self, path: str | Path, *, timeout: float = 5.0) -> None:
        self.path = Path(path)
        self.timeout = timeout
        self._lock = threading.Lock()
        self._connection: sqlite3.Connection | None = None

    def _connect(self) -> sqlite3.Connection:
        if self._connection is None:
            if str(self.path) != ":memory:" and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.path, check_same_thread=False)
            connection.row_factory = sqlite3.Row
            self._connection = connection
        return self._connection

    async def _run(self, operation: str, fn: Callable[[sqlite3.Connection], T]) -> T:
        def _locked() -> T:
            deadline = time.monotonic() + self.timeout if self.timeout > 0 else None
            if not self._lock.acquire(timeout=self.timeout if deadline is not None else -1):
                raise CodiciStoreTimeoutError(
                    f"SQLite {operation} waited more than {self.timeout:.1f}s for the connection",
                    operation=operation,
                )
            try:
                connection = self._connect()
                if deadline is not None:
                    remaining_ms = max(int((deadline - time.monotonic()) * 1000), 1)
                    connection.execute(f"PRAGMA busy_timeout = {remaining_ms}")
                return fn(connection)
            finally:
                self._lock.release()

        try:
            return await asyncio.to_thread(_locked)
        except sqlite3.OperationalError as exc:
            _logger.error("SQLite %s failed on %s: %s", operation, self.path, exc)
            error_cls = CodiciStoreTimeoutError if "locked" in str(exc) else CodiciStoreError
            raise error_cls(f"SQLite {operation} failed: {exc}", operation=operation) from exc
        except sqlite3.Error as exc:
            _logger.error("SQLite %s failed on %s: %s", operation, self.path, exc)
            raise CodiciStoreError(f"SQLite {operation} failed: {exc}", operation=operation) from exc

    async def initialize(self) -> None:
        """Create the schema if it does not exist yet."""

        def _create(connection: sqlite3.Connection) -> None:
            with connection:
                connection.executescript(_SCHEMA)

        await self._run("initialize", _create)
        _logger.info("Code store ready at %s", self.path)

    async def close(self) -> None:
        def _close() -> None:
            with self._lock:
                if self._connection is not None:
                    self._connection.close()
                    self._connection = None

        await asyncio.to_thread(_close)

    async def get(self, code: str) -> CodeRecord | None:
        def _get(connection: sqlite3.Connection) -> CodeRecord | None:
            row = connection.execute(f"SELECT {_COLUMNS} FROM codes WHERE code = ?", (code,)).fetchone()
            return _row_to_record(row) if row is not None else None

        return await self._run("get", _get)

    async def put(self, record: CodeRecord) -> None:
        params = {
            "code": record.code,
            "vehicle": record.vehicle_kind.value,
            "vehicle_name": record.vehicle_name,
            "name_key": record.vehicle_name.casefold(),
            "persist": int(record.persist),
            "confirms": record.confirms,
            "submitted_by": record.submitted_by,
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }

        def _put(connection: sqlite3.Connection) -> None:
            with connection:
                connection.execute(_UPSERT, params)

        await self._run("put", _put)

    async def find(self, vehicle: VehicleKey, *, min_confirms: int) -> list[CodeRecord]:
        def _find(connection: sqlite3.Connection) -> list[CodeRecord]:
            rows = connection.execute(
                f"SELECT {_COLUMNS} FROM codes "
                "WHERE vehicle = ? AND name_key = ? AND (confirms >= ? OR persist = 1) "
                "ORDER BY rowid",
                (vehicle.kind.value, vehicle.name_key, min_confirms),
            ).fetchall()
            return [_row_to_record(row) for row in rows]

        return await self._run("find", _find)
