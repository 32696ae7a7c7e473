"""Code record and vehicle models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from codicibot.models._base import UtcDatetime


class VehicleKind(StrEnum):
    BUS = "bus"
    TRAIN = "train"
    ROPEWAY = "ropeway"


class VehicleKey(BaseModel):
    """A classified vehicle: what a code is attached to."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: VehicleKind
    name: str

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("vehicle name must be non-empty")
        return name

    @property
    def name_key(self) -> str:
        """Case-folded name used for case-insensitive matching."""
        return self.name.casefold()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CodeRecord(BaseModel):
    """One crowdsourced OpenMove code and the vehicle it is attached to.

    Records are frozen; the consensus policy derives the next state with
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str
    vehicle_kind: VehicleKind
    vehicle_name: str
    persist: bool = False
    """Persisted codes cannot be crowd-edited."""
    confirms: int = Field(default=0, ge=0)
    """Number of confirmations received from users."""
    submitted_by: str = ""
    """Creator, or most recent non-privileged editor."""
    created_at: UtcDatetime = Field(default_factory=_utcnow)
    updated_at: UtcDatetime = Field(default_factory=_utcnow)

    @property
    def vehicle(self) -> VehicleKey:
        return VehicleKey(kind=self.vehicle_kind, name=self.vehicle_name)

    def describes(self, key: VehicleKey) -> bool:
        """Whether the record is attached to exactly *key* (kind and name, case-sensitive)."""
        return self.vehicle_kind == key.kind and self.vehicle_name == key.name

    def is_authoritative(self, confidence_threshold: int) -> bool:
        return self.persist or self.confirms >= confidence_threshold
