"""Consensus engine: applies submissions to the code record store."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from codicibot._locks import KeyedLocks
from codicibot.consensus.policy import decide, normalize_code
from codicibot.exceptions import CodiciStoreError
from codicibot.models.outcome import OutcomeKind, Submission, SubmissionOutcome
from codicibot.models.record import VehicleKey, VehicleKind
from codicibot.store.base import CodeStore, bounded

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConsensusEngine:
    """Validate, decide and persist crowdsourced code submissions.

    Submissions for the same code are serialised within this process. Two
    processes sharing one database may still interleave and lose an
    update; confidence counters are approximate by nature.
    """

    def __init__(
        self,
        store: CodeStore,
        *,
        grace: timedelta = timedelta(hours=1),
        store_timeout: float = 5.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._grace = grace
        self._store_timeout = store_timeout
        self._clock = clock
        self._locks = KeyedLocks()

    async def submit(
        self,
        vehicle_kind: VehicleKind,
        vehicle_name: str,
        raw_code: str,
        submitter_id: str,
        privileged: bool = False,
    ) -> SubmissionOutcome:
        """Apply one contribution and report what happened.

        Never raises for store failures: they are logged and reported as
        :attr:`OutcomeKind.INTERNAL_ERROR`.
        """
        code = normalize_code(raw_code)
        if code is None:
            _logger.info("Rejected malformed code %r from %s", raw_code, submitter_id)
            return SubmissionOutcome(kind=OutcomeKind.INVALID_FORMAT)

        submission = Submission(
            code=code,
            vehicle=VehicleKey(kind=vehicle_kind, name=vehicle_name),
            submitter_id=submitter_id,
            privileged=privileged,
        )

        try:
            async with self._locks.hold(code):
                current = await bounded(self._store.get(code), self._store_timeout, "get")
                decision = decide(current, submission, now=self._clock(), grace=self._grace)
                if decision.write is not None:
                    await bounded(self._store.put(decision.write), self._store_timeout, "put")
        except CodiciStoreError as exc:
            _logger.error("Submission of %s by %s failed: %s", code, submitter_id, exc)
            return SubmissionOutcome(kind=OutcomeKind.INTERNAL_ERROR, code=code)

        record = decision.record
        _logger.info(
            "Code %s %s by %s%s: %s %r, confirms=%d, persist=%s",
            code,
            decision.outcome.value,
            submitter_id,
            " (privileged)" if privileged else "",
            record.vehicle_kind.value,
            record.vehicle_name,
            record.confirms,
            record.persist,
        )
        return SubmissionOutcome(kind=decision.outcome, code=code, record=record)
