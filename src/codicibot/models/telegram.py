"""Telegram Bot API models.

Only the fields the bot reads are declared; see
https://core.telegram.org/bots/api#update for the full shapes.
"""

from __future__ import annotations

from pydantic import Field

from codicibot.models._base import TelegramBaseModel
from codicibot.models.events import EventKind, InboundEvent

_COMMANDS: dict[str, EventKind] = {
    "start": EventKind.START,
    "help": EventKind.HELP,
    "feed": EventKind.FEED,
}


def parse_command(text: str) -> EventKind:
    """Map ``/start``, ``/help``, ``/feed`` (optionally ``@botname``-suffixed) to an event kind.

    Anything else, unknown commands included, is plain text.
    """
    stripped = text.strip()
    if not stripped.startswith("/"):
        return EventKind.TEXT
    command = stripped[1:].split(maxsplit=1)[0] if len(stripped) > 1 else ""
    command = command.split("@", 1)[0].lower()
    return _COMMANDS.get(command, EventKind.TEXT)


class TelegramUser(TelegramBaseModel):
    id: int
    is_bot: bool = False
    username: str | None = None
    first_name: str = ""


class TelegramChat(TelegramBaseModel):
    id: int
    type: str = "private"


class TelegramMessage(TelegramBaseModel):
    message_id: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None


class TelegramUpdate(TelegramBaseModel):
    update_id: int
    message: TelegramMessage | None = None

    def to_inbound_event(self) -> InboundEvent | None:
        """Convert a text message update; other update types yield ``None``."""
        message = self.message
        if message is None or message.text is None or message.from_user is None:
            return None
        sender = message.from_user
        return InboundEvent(
            user_id=str(sender.id),
            user_name=sender.username,
            text=message.text,
            kind=parse_command(message.text),
            is_bot=sender.is_bot,
        )
