"""Submission and query outcomes."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from codicibot.models.record import CodeRecord, VehicleKey


class OutcomeKind(StrEnum):
    CREATED = "created"
    CONFIRMED = "confirmed"
    DECAYED = "decayed"
    FLIPPED = "flipped"
    OVERRIDDEN = "overridden"
    ACKNOWLEDGED = "acknowledged"
    INVALID_FORMAT = "invalid_format"
    INTERNAL_ERROR = "internal_error"

    @property
    def is_error(self) -> bool:
        return self in (OutcomeKind.INVALID_FORMAT, OutcomeKind.INTERNAL_ERROR)


class Submission(BaseModel):
    """A contribution that already passed code-format validation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str
    vehicle: VehicleKey
    submitter_id: str
    privileged: bool = False


class SubmissionOutcome(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: OutcomeKind
    code: str | None = None
    record: CodeRecord | None = None
    """Record state after the submission (``None`` when nothing was read)."""


class QueryStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    INTERNAL_ERROR = "internal_error"


class QueryResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: QueryStatus
    codes: tuple[str, ...] = ()
