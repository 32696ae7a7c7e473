from __future__ import annotations

from datetime import UTC, datetime

import pytest

from codicibot.exceptions import CodiciStoreError
from codicibot.models.outcome import QueryStatus
from codicibot.models.record import CodeRecord, VehicleKey, VehicleKind
from codicibot.query import QueryResolver
from codicibot.store.memory import InMemoryCodeStore


def _record(code: str, kind: VehicleKind, name: str, *, confirms: int = 0, persist: bool = False) -> CodeRecord:
    ts = datetime(2026, 1, 1, tzinfo=UTC)
    return CodeRecord(
        code=code,
        vehicle_kind=kind,
        vehicle_name=name,
        confirms=confirms,
        persist=persist,
        created_at=ts,
        updated_at=ts,
    )


class _BrokenStore:
    async def get(self, code: str) -> CodeRecord | None:
        return None

    async def put(self, record: CodeRecord) -> None:
        return None

    async def find(self, vehicle: VehicleKey, *, min_confirms: int) -> list[CodeRecord]:
        raise CodiciStoreError("no such table: codes", operation="find")


class _LeakyStore(InMemoryCodeStore):
    """Ignores the confidence filter, like a misconfigured backend would."""

    async def find(self, vehicle: VehicleKey, *, min_confirms: int) -> list[CodeRecord]:
        return await super().find(vehicle, min_confirms=0)


@pytest.fixture
def store() -> InMemoryCodeStore:
    return InMemoryCodeStore(
        [
            _record("TT100", VehicleKind.BUS, "420", confirms=2),
            _record("TT101", VehicleKind.BUS, "420", confirms=1),
            _record("TT102", VehicleKind.BUS, "420", confirms=0, persist=True),
            _record("TT103", VehicleKind.BUS, "420", confirms=5),
            _record("TT200", VehicleKind.TRAIN, "Trento", confirms=3),
            _record("TT300", VehicleKind.ROPEWAY, "funivia trento", persist=True),
        ]
    )


@pytest.mark.asyncio
async def test_returns_trusted_codes_in_store_order(store: InMemoryCodeStore) -> None:
    resolver = QueryResolver(store, confidence_threshold=2)

    result = await resolver.resolve(VehicleKey(kind=VehicleKind.BUS, name="420"))

    assert result.status is QueryStatus.FOUND
    assert result.codes == ("TT100", "TT102", "TT103")


@pytest.mark.asyncio
async def test_name_match_is_case_insensitive(store: InMemoryCodeStore) -> None:
    resolver = QueryResolver(store, confidence_threshold=2)

    assert await resolver.lookup(VehicleKey(kind=VehicleKind.TRAIN, name="TRENTO")) == ["TT200"]


@pytest.mark.asyncio
async def test_kind_must_match(store: InMemoryCodeStore) -> None:
    resolver = QueryResolver(store, confidence_threshold=2)

    result = await resolver.resolve(VehicleKey(kind=VehicleKind.TRAIN, name="420"))

    assert result.status is QueryStatus.NOT_FOUND
    assert result.codes == ()


@pytest.mark.asyncio
async def test_below_threshold_is_not_found() -> None:
    store = InMemoryCodeStore([_record("TT123", VehicleKind.BUS, "42", confirms=1)])
    resolver = QueryResolver(store, confidence_threshold=2)

    result = await resolver.resolve(VehicleKey(kind=VehicleKind.BUS, name="42"))

    assert result.status is QueryStatus.NOT_FOUND


@pytest.mark.asyncio
async def test_zero_threshold_returns_everything_for_vehicle(store: InMemoryCodeStore) -> None:
    resolver = QueryResolver(store, confidence_threshold=0)

    codes = await resolver.lookup(VehicleKey(kind=VehicleKind.BUS, name="420"))

    assert codes == ["TT100", "TT101", "TT102", "TT103"]


@pytest.mark.asyncio
async def test_untrusted_codes_never_returned_even_if_store_leaks_them(store: InMemoryCodeStore) -> None:
    leaky = _LeakyStore(list(store._records.values()))  # noqa: SLF001
    resolver = QueryResolver(leaky, confidence_threshold=2)

    codes = await resolver.lookup(VehicleKey(kind=VehicleKind.BUS, name="420"))

    assert "TT101" not in codes


@pytest.mark.asyncio
async def test_store_failure_is_internal_error() -> None:
    resolver = QueryResolver(_BrokenStore(), confidence_threshold=2)

    result = await resolver.resolve(VehicleKey(kind=VehicleKind.BUS, name="420"))

    assert result.status is QueryStatus.INTERNAL_ERROR


@pytest.mark.asyncio
async def test_lookup_propagates_store_failure() -> None:
    resolver = QueryResolver(_BrokenStore(), confidence_threshold=2)

    with pytest.raises(CodiciStoreError):
        await resolver.lookup(VehicleKey(kind=VehicleKind.BUS, name="420"))
