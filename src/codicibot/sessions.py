"""Per-user dialogue state for the ``/feed`` form.

A session lives in process memory only. It is created on a user's first
message and evicted after ``idle_ttl`` seconds without activity; a restart
simply drops any half-finished dialogue.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from enum import StrEnum

from codicibot._locks import KeyedLocks
from codicibot.exceptions import CodiciSessionError
from codicibot.models.record import VehicleKey, VehicleKind

_logger = logging.getLogger(__name__)


class DialoguePhase(StrEnum):
    IDLE = "idle"
    AWAITING_VEHICLE = "awaiting_vehicle"
    AWAITING_TRAIN_CODE = "awaiting_train_code"
    AWAITING_BUS_CODE = "awaiting_bus_code"


_TRANSITIONS: frozenset[tuple[DialoguePhase, DialoguePhase]] = frozenset(
    {
        (DialoguePhase.IDLE, DialoguePhase.AWAITING_VEHICLE),
        (DialoguePhase.AWAITING_VEHICLE, DialoguePhase.AWAITING_TRAIN_CODE),
        (DialoguePhase.AWAITING_VEHICLE, DialoguePhase.AWAITING_BUS_CODE),
        (DialoguePhase.AWAITING_TRAIN_CODE, DialoguePhase.IDLE),
        (DialoguePhase.AWAITING_BUS_CODE, DialoguePhase.IDLE),
    }
)

_CODE_PHASES: dict[VehicleKind, DialoguePhase] = {
    VehicleKind.TRAIN: DialoguePhase.AWAITING_TRAIN_CODE,
    VehicleKind.BUS: DialoguePhase.AWAITING_BUS_CODE,
}


@dataclass
class DialogueSession:
    """Where one user is inside the feed dialogue."""

    user_id: str
    phase: DialoguePhase = DialoguePhase.IDLE
    pending_vehicle_name: str | None = None
    touched_at: float = field(default_factory=time.monotonic)

    @property
    def is_idle(self) -> bool:
        return self.phase is DialoguePhase.IDLE

    def _move(self, target: DialoguePhase) -> None:
        if (self.phase, target) not in _TRANSITIONS:
            raise CodiciSessionError(f"Cannot move from {self.phase} to {target} for user {self.user_id}")
        self.phase = target

    def reset(self) -> None:
        """Abandon any dialogue in progress."""
        self.phase = DialoguePhase.IDLE
        self.pending_vehicle_name = None

    def begin_feed(self) -> None:
        # /feed in the middle of a dialogue starts over.
        self.reset()
        self._move(DialoguePhase.AWAITING_VEHICLE)

    def name_vehicle(self, vehicle: VehicleKey) -> None:
        """Record the vehicle named in the first step; only trains and buses take codes."""
        target = _CODE_PHASES.get(vehicle.kind)
        if target is None:
            raise CodiciSessionError(f"No code step for {vehicle.kind} vehicles")
        self._move(target)
        self.pending_vehicle_name = vehicle.name

    def take_pending(self) -> VehicleKey:
        """Return the vehicle awaiting a code and close the dialogue."""
        if self.phase is DialoguePhase.AWAITING_TRAIN_CODE:
            kind = VehicleKind.TRAIN
        elif self.phase is DialoguePhase.AWAITING_BUS_CODE:
            kind = VehicleKind.BUS
        else:
            raise CodiciSessionError(f"User {self.user_id} is not awaiting a code (phase {self.phase})")
        if self.pending_vehicle_name is None:
            raise CodiciSessionError(f"User {self.user_id} has no pending vehicle")
        vehicle = VehicleKey(kind=kind, name=self.pending_vehicle_name)
        self._move(DialoguePhase.IDLE)
        self.pending_vehicle_name = None
        return vehicle


class SessionTracker:
    """Concurrency-safe map of user id to :class:`DialogueSession`.

    Usage::

        async with tracker.hold(user_id) as session:
            session.begin_feed()

    Only one holder per user at a time; different users never wait on
    each other.
    """

    def __init__(
        self,
        *,
        idle_ttl: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: dict[str, DialogueSession] = {}
        self._locks = KeyedLocks()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._sessions

    def peek(self, user_id: str) -> DialogueSession | None:
        """Current session for *user_id* without locking (for inspection only)."""
        return self._sessions.get(user_id)

    def evict_idle(self) -> int:
        """Drop sessions untouched for longer than the idle TTL; returns how many."""
        if self._idle_ttl <= 0:
            return 0
        deadline = self._clock() - self._idle_ttl
        expired = [
            user_id
            for user_id, session in self._sessions.items()
            if session.touched_at < deadline and not self._locks.is_busy(user_id)
        ]
        for user_id in expired:
            session = self._sessions.pop(user_id)
            if not session.is_idle:
                _logger.debug("Abandoned %s dialogue of user %s expired", session.phase, user_id)
        return len(expired)

    @contextlib.asynccontextmanager
    async def hold(self, user_id: str) -> AsyncIterator[DialogueSession]:
        self.evict_idle()
        async with self._locks.hold(user_id):
            session = self._sessions.get(user_id)
            if session is None:
                session = DialogueSession(user_id=user_id, touched_at=self._clock())
                self._sessions[user_id] = session
            try:
                yield session
            finally:
                session.touched_at = self._clock()
