"""Inbound events consumed by the bot dispatcher.

The transport layer converts whatever it receives into these events.
Commands arrive pre-classified; free text is left raw.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class EventKind(StrEnum):
    START = "start"
    HELP = "help"
    FEED = "feed"
    TEXT = "text"


class InboundEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str
    user_name: str | None = None
    text: str = ""
    kind: EventKind = EventKind.TEXT
    is_bot: bool = False

    @field_validator("user_id", mode="before")
    @classmethod
    def _normalize_user_id(cls, value: object) -> str:
        user_id = str(value).strip()
        if not user_id:
            raise ValueError("user_id must be non-empty")
        return user_id
