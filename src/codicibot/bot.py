"""Event dispatcher: routes each inbound event to the read or write path."""

from __future__ import annotations

import logging

from codicibot import _constants as texts
from codicibot.classify import classify_feed, classify_query
from codicibot.config import CodiciConfig
from codicibot.consensus.engine import ConsensusEngine
from codicibot.models.events import EventKind, InboundEvent
from codicibot.models.outcome import OutcomeKind, QueryStatus, SubmissionOutcome
from codicibot.models.record import VehicleKind
from codicibot.query import QueryResolver
from codicibot.sessions import DialoguePhase, DialogueSession, SessionTracker
from codicibot.store.base import CodeStore

_logger = logging.getLogger(__name__)

_OUTCOME_TEXTS: dict[OutcomeKind, str] = {
    OutcomeKind.CREATED: texts.CONTRIBUTION_TEXT,
    OutcomeKind.CONFIRMED: texts.CONTRIBUTION_TEXT,
    OutcomeKind.DECAYED: texts.CONTRIBUTION_TEXT,
    OutcomeKind.FLIPPED: texts.CONTRIBUTION_TEXT,
    OutcomeKind.OVERRIDDEN: texts.CONTRIBUTION_TEXT,
    OutcomeKind.ACKNOWLEDGED: texts.ACKNOWLEDGED_TEXT,
    OutcomeKind.INVALID_FORMAT: texts.INVALID_CODE_TEXT,
    OutcomeKind.INTERNAL_ERROR: texts.SUBMIT_ERROR_TEXT,
}


def outcome_text(outcome: SubmissionOutcome) -> str:
    return _OUTCOME_TEXTS[outcome.kind]


class CodiciBot:
    """Transport-independent bot logic.

    ``handle`` turns one :class:`InboundEvent` into the list of reply texts
    to deliver, in order.
    """

    def __init__(
        self,
        config: CodiciConfig,
        *,
        engine: ConsensusEngine,
        resolver: QueryResolver,
        sessions: SessionTracker,
    ) -> None:
        self._config = config
        self.engine = engine
        self.resolver = resolver
        self.sessions = sessions

    @classmethod
    def from_store(cls, config: CodiciConfig, store: CodeStore) -> CodiciBot:
        """Wire engine, resolver and session tracker around *store*."""
        return cls(
            config,
            engine=ConsensusEngine(
                store,
                grace=config.grace_interval,
                store_timeout=config.store_timeout,
            ),
            resolver=QueryResolver(
                store,
                confidence_threshold=config.confidence_threshold,
                store_timeout=config.store_timeout,
            ),
            sessions=SessionTracker(idle_ttl=config.session_idle_ttl),
        )

    async def handle(self, event: InboundEvent) -> list[str]:
        if event.is_bot:
            return [texts.NO_BOTS_TEXT]

        async with self.sessions.hold(event.user_id) as session:
            if event.kind is EventKind.START:
                _logger.info("Started: %s", event.user_id)
                session.reset()
                return [texts.START_TEXT]
            if event.kind is EventKind.HELP:
                session.reset()
                return [texts.HELP_TEXT]
            if event.kind is EventKind.FEED:
                session.begin_feed()
                return [texts.FEED_PROMPT_TEXT]
            return await self._handle_text(session, event)

    async def _handle_text(self, session: DialogueSession, event: InboundEvent) -> list[str]:
        if session.phase is DialoguePhase.AWAITING_VEHICLE:
            return self._name_vehicle(session, event.text)
        if session.phase in (DialoguePhase.AWAITING_TRAIN_CODE, DialoguePhase.AWAITING_BUS_CODE):
            vehicle = session.take_pending()
            outcome = await self.engine.submit(
                vehicle.kind,
                vehicle.name,
                event.text,
                event.user_id,
                privileged=self._config.is_privileged(event.user_name),
            )
            return [outcome_text(outcome)]
        return await self._query(event.text)

    def _name_vehicle(self, session: DialogueSession, text: str) -> list[str]:
        vehicle = classify_feed(text)
        if vehicle is None:
            session.reset()
            return [texts.ABANDON_TEXT]
        session.name_vehicle(vehicle)
        if vehicle.kind is VehicleKind.TRAIN:
            return [texts.TRAIN_CODE_PROMPT_TEXT.format(name=vehicle.name)]
        return [texts.BUS_CODE_PROMPT_TEXT.format(name=vehicle.name)]

    async def _query(self, text: str) -> list[str]:
        vehicle = classify_query(text)
        if vehicle is None:
            return [texts.NOT_UNDERSTOOD_TEXT]
        result = await self.resolver.resolve(vehicle)
        if result.status is QueryStatus.INTERNAL_ERROR:
            return [texts.QUERY_ERROR_TEXT]
        if result.status is QueryStatus.NOT_FOUND:
            return [texts.UNKNOWN_CODE_TEXT]
        return list(result.codes)
