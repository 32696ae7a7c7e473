"""Deterministic crowdsourcing policy.

This module contains *no* store access. Given the current record for a
code (if any), a validated submission and the current time it computes the
next record state and the outcome to report.

Policy:
- Unknown code: create it with one confirm; privileged creators persist it.
- Privileged submissions always win: they set the vehicle and persist the
  record, leaving ``confirms`` alone.
- Persisted records ignore everybody else.
- A submission naming exactly the same vehicle (kind and name, case
  included) at least ``grace`` after the last update adds a confirm.
- Anything else (a different vehicle, or a matching one arriving too soon)
  removes a confirm. Once the counter is at zero the record is attached to
  the latest claim.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from codicibot._constants import OPENMOVE_CODE_RE
from codicibot.models.outcome import OutcomeKind, Submission
from codicibot.models.record import CodeRecord


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of applying one submission.

    ``write`` is the record to store, or ``None`` when the store must not
    be touched. ``record`` is the state visible after the submission.
    """

    outcome: OutcomeKind
    record: CodeRecord
    write: CodeRecord | None


def normalize_code(raw: str) -> str | None:
    """Upper-case *raw* and return it if it is a valid OpenMove code."""
    code = raw.strip().upper()
    if OPENMOVE_CODE_RE.fullmatch(code) is None:
        return None
    return code


def _create(submission: Submission, now: datetime) -> Decision:
    record = CodeRecord(
        code=submission.code,
        vehicle_kind=submission.vehicle.kind,
        vehicle_name=submission.vehicle.name,
        persist=submission.privileged,
        confirms=1,
        submitted_by=submission.submitter_id,
        created_at=now,
        updated_at=now,
    )
    return Decision(OutcomeKind.CREATED, record, record)


def _decay(current: CodeRecord, submission: Submission, now: datetime) -> Decision:
    confirms = max(current.confirms - 1, 0)
    update: dict[str, object] = {
        "confirms": confirms,
        "submitted_by": submission.submitter_id,
        "updated_at": now,
    }
    outcome = OutcomeKind.DECAYED
    if confirms == 0:
        # Floor reached: the record follows the latest contested claim.
        if not current.describes(submission.vehicle):
            outcome = OutcomeKind.FLIPPED
        update["vehicle_kind"] = submission.vehicle.kind
        update["vehicle_name"] = submission.vehicle.name
    record = current.model_copy(update=update)
    return Decision(outcome, record, record)


def decide(
    current: CodeRecord | None,
    submission: Submission,
    *,
    now: datetime,
    grace: timedelta,
) -> Decision:
    """Compute the next state of ``submission.code``."""
    if current is None:
        return _create(submission, now)

    if submission.privileged:
        record = current.model_copy(
            update={
                "vehicle_kind": submission.vehicle.kind,
                "vehicle_name": submission.vehicle.name,
                "persist": True,
                "updated_at": now,
            }
        )
        return Decision(OutcomeKind.OVERRIDDEN, record, record)

    if current.persist:
        return Decision(OutcomeKind.ACKNOWLEDGED, current, None)

    if current.describes(submission.vehicle) and now - current.updated_at >= grace:
        record = current.model_copy(
            update={
                "confirms": current.confirms + 1,
                "submitted_by": submission.submitter_id,
                "updated_at": now,
            }
        )
        return Decision(OutcomeKind.CONFIRMED, record, record)

    # Content mismatch, or a matching submission inside the grace interval.
    return _decay(current, submission, now)
