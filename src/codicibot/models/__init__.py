"""Data models for codes, dialogue events and Telegram payloads."""

from codicibot.models._base import TelegramBaseModel, UtcDatetime, ensure_utc
from codicibot.models.events import EventKind, InboundEvent
from codicibot.models.outcome import (
    OutcomeKind,
    QueryResult,
    QueryStatus,
    Submission,
    SubmissionOutcome,
)
from codicibot.models.record import CodeRecord, VehicleKey, VehicleKind
from codicibot.models.telegram import (
    TelegramChat,
    TelegramMessage,
    TelegramUpdate,
    TelegramUser,
    parse_command,
)

__all__ = [
    "CodeRecord",
    "EventKind",
    "InboundEvent",
    "OutcomeKind",
    "QueryResult",
    "QueryStatus",
    "Submission",
    "SubmissionOutcome",
    "TelegramBaseModel",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
    "UtcDatetime",
    "VehicleKey",
    "VehicleKind",
    "ensure_utc",
    "parse_command",
]
