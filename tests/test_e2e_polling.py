"""End-to-end flows through the poller with a scripted Telegram transport."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from codicibot import _constants as texts
from codicibot.bot import CodiciBot
from codicibot.config import CodiciConfig
from codicibot.exceptions import CodiciApiError, CodiciTransportError
from codicibot.models.telegram import TelegramUpdate
from codicibot.polling import CodiciPoller
from codicibot.sessions import DialoguePhase
from codicibot.store.memory import InMemoryCodeStore

pytestmark = [pytest.mark.e2e, pytest.mark.asyncio]


def _update(update_id: int, text: str, *, user_id: int = 42, chat_id: int = 555) -> TelegramUpdate:
    return TelegramUpdate.model_validate(
        {
            "update_id": update_id,
            "message": {
                "message_id": update_id,
                "chat": {"id": chat_id, "type": "private"},
                "from": {"id": user_id, "is_bot": False, "first_name": "Mario", "username": f"user{user_id}"},
                "text": text,
            },
        }
    )


class _ScriptedTransport:
    """Replays one batch per ``get_updates`` call and records replies."""

    def __init__(self, *batches: list[TelegramUpdate] | Exception, stop: asyncio.Event | None = None) -> None:
        self._batches = list(batches)
        self._stop = stop
        self.offsets: list[int | None] = []
        self.sent: list[tuple[int, str]] = []
        self.failing_chats: set[int] = set()

    async def get_updates(self, offset: int | None, timeout: int) -> list[TelegramUpdate]:
        self.offsets.append(offset)
        if not self._batches:
            if self._stop is not None:
                self._stop.set()
            return []
        batch = self._batches.pop(0)
        if isinstance(batch, Exception):
            raise batch
        return batch

    async def send_message(self, chat_id: int, text: str) -> None:
        if chat_id in self.failing_chats:
            raise CodiciApiError("Forbidden: bot was blocked by the user", error_code=403, method="sendMessage")
        self.sent.append((chat_id, text))


def _config(**overrides: Any) -> CodiciConfig:
    values: dict[str, Any] = {"bot_token": "123:abc", "confidence_threshold": 1, "grace_interval_ms": 0}
    values.update(overrides)
    return CodiciConfig(**values)


async def test_feed_then_query_round_trip() -> None:
    config = _config()
    bot = CodiciBot.from_store(config, InMemoryCodeStore())
    transport = _ScriptedTransport(
        [_update(1, "/feed")],
        [_update(2, "Trento")],
        [_update(3, "tt001")],
        [_update(4, "trento")],
    )

    async with CodiciPoller(config, bot, transport=transport) as poller:
        for _ in range(4):
            await poller.poll_once()
            await poller.drain()

        assert poller.offset == 5

    assert transport.offsets == [None, 2, 3, 4]
    assert [text for _, text in transport.sent] == [
        texts.FEED_PROMPT_TEXT,
        texts.TRAIN_CODE_PROMPT_TEXT.format(name="Trento"),
        texts.CONTRIBUTION_TEXT,
        "TT001",
    ]
    session = bot.sessions.peek("42")
    assert session is not None
    assert session.phase is DialoguePhase.IDLE


async def test_failed_reply_does_not_stop_other_updates() -> None:
    config = _config()
    bot = CodiciBot.from_store(config, InMemoryCodeStore())
    transport = _ScriptedTransport([_update(10, "/help", chat_id=13, user_id=1), _update(11, "/start", user_id=2)])
    transport.failing_chats.add(13)

    async with CodiciPoller(config, bot, transport=transport) as poller:
        processed = await poller.poll_once()
        await poller.drain()

        assert processed == 2
        assert poller.offset == 12

    assert transport.sent == [(555, texts.START_TEXT)]


async def test_fetch_failure_keeps_offset() -> None:
    config = _config()
    bot = CodiciBot.from_store(config, InMemoryCodeStore())
    transport = _ScriptedTransport(
        [_update(20, "/start")],
        CodiciTransportError("Request to getUpdates timed out", method="getUpdates"),
    )

    async with CodiciPoller(config, bot, transport=transport) as poller:
        assert await poller.poll_once() == 1
        assert await poller.poll_once() is None
        assert poller.offset == 21


async def test_non_text_updates_advance_offset_silently() -> None:
    config = _config()
    bot = CodiciBot.from_store(config, InMemoryCodeStore())
    transport = _ScriptedTransport([TelegramUpdate(update_id=30)])

    async with CodiciPoller(config, bot, transport=transport) as poller:
        await poller.poll_once()
        await poller.drain()
        assert poller.offset == 31

    assert transport.sent == []


async def test_run_until_stopped() -> None:
    config = _config()
    bot = CodiciBot.from_store(config, InMemoryCodeStore())
    stop = asyncio.Event()
    transport = _ScriptedTransport(
        CodiciTransportError("connection reset", method="getUpdates"),
        [_update(40, "/start")],
        stop=stop,
    )

    async with CodiciPoller(config, bot, transport=transport, error_backoff=0.01) as poller:
        await asyncio.wait_for(poller.run(stop), timeout=5)

    assert transport.sent == [(555, texts.START_TEXT)]
    assert transport.offsets == [None, None, 41]
