"""In-memory code record store."""

from __future__ import annotations

from codicibot.models.record import CodeRecord, VehicleKey


class InMemoryCodeStore:
    """Dict-backed store; contents are lost when the process exits."""

    def __init__(self, records: list[CodeRecord] | None = None) -> None:
        self._records: dict[str, CodeRecord] = {}
        for record in records or []:
            self._records[record.code] = record

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, code: str) -> CodeRecord | None:
        return self._records.get(code)

    async def put(self, record: CodeRecord) -> None:
        # Replacing keeps the original insertion position.
        self._records[record.code] = record

    async def find(self, vehicle: VehicleKey, *, min_confirms: int) -> list[CodeRecord]:
        return [
            record
            for record in self._records.values()
            if record.vehicle_kind == vehicle.kind
            and record.vehicle_name.casefold() == vehicle.name_key
            and record.is_authoritative(min_confirms)
        ]
