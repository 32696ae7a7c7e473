"""Read path: which codes answer a vehicle lookup."""

from __future__ import annotations

import logging

from codicibot.exceptions import CodiciStoreError
from codicibot.models.outcome import QueryResult, QueryStatus
from codicibot.models.record import VehicleKey
from codicibot.store.base import CodeStore, bounded

_logger = logging.getLogger(__name__)


class QueryResolver:
    """Return the codes currently trusted for a vehicle.

    A code is trusted when it is persisted or has at least
    ``confidence_threshold`` confirms.
    """

    def __init__(self, store: CodeStore, *, confidence_threshold: int = 2, store_timeout: float = 5.0) -> None:
        self._store = store
        self._confidence_threshold = confidence_threshold
        self._store_timeout = store_timeout

    async def lookup(self, vehicle: VehicleKey) -> list[str]:
        """Trusted codes in store order. Raises :class:`CodiciStoreError`."""
        records = await bounded(
            self._store.find(vehicle, min_confirms=self._confidence_threshold),
            self._store_timeout,
            "find",
        )
        return [record.code for record in records if record.is_authoritative(self._confidence_threshold)]

    async def resolve(self, vehicle: VehicleKey) -> QueryResult:
        try:
            codes = await self.lookup(vehicle)
        except CodiciStoreError as exc:
            _logger.error("Lookup of %s %r failed: %s", vehicle.kind.value, vehicle.name, exc)
            return QueryResult(status=QueryStatus.INTERNAL_ERROR)
        if not codes:
            return QueryResult(status=QueryStatus.NOT_FOUND)
        return QueryResult(status=QueryStatus.FOUND, codes=tuple(codes))
