"""Long-polling runner connecting the bot to Telegram."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from codicibot._transport import BotTransport, TelegramTransport
from codicibot.bot import CodiciBot
from codicibot.config import CodiciConfig
from codicibot.exceptions import CodiciError
from codicibot.models.telegram import TelegramUpdate

_logger = logging.getLogger(__name__)

_ERROR_BACKOFF_SECONDS = 5.0


class CodiciPoller:
    """Fetch updates and answer each one in its own task.

    Usage::

        async with CodiciPoller(config, bot) as poller:
            await poller.run(stop_event)
    """

    def __init__(
        self,
        config: CodiciConfig,
        bot: CodiciBot,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: BotTransport | None = None,
        error_backoff: float = _ERROR_BACKOFF_SECONDS,
    ) -> None:
        self._config = config
        self._bot = bot
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._error_backoff = error_backoff
        self._offset: int | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CodiciPoller:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = TelegramTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.drain()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_transport(self) -> BotTransport:
        if self._transport is None:
            raise CodiciError("Poller not initialized. Use 'async with CodiciPoller(...) as poller:'")
        return self._transport

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    @property
    def offset(self) -> int | None:
        return self._offset

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until *stop* is set (or forever)."""
        stop = stop or asyncio.Event()
        _logger.info("Polling for updates")
        while not stop.is_set():
            processed = await self.poll_once()
            if processed is None:
                try:
                    await asyncio.wait_for(stop.wait(), self._error_backoff)
                except TimeoutError:
                    pass
        _logger.info("Polling stopped")

    async def poll_once(self) -> int | None:
        """Fetch one batch and schedule it; ``None`` when fetching failed."""
        transport = self._require_transport()
        try:
            updates = await transport.get_updates(self._offset, self._config.poll_timeout)
        except CodiciError as exc:
            _logger.warning("getUpdates failed: %s", exc)
            return None
        for update in updates:
            self._offset = update.update_id + 1
            task = asyncio.create_task(self._process(update), name=f"update-{update.update_id}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return len(updates)

    async def drain(self) -> None:
        """Wait for in-flight updates to be answered."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _process(self, update: TelegramUpdate) -> None:
        transport = self._require_transport()
        event = update.to_inbound_event()
        if event is None or update.message is None:
            return
        chat_id = update.message.chat.id
        try:
            replies = await self._bot.handle(event)
            for reply in replies:
                await transport.send_message(chat_id, reply)
        except Exception:
            # Failures stay inside this update.
            _logger.exception("Failed to process update %s from %s", update.update_id, event.user_id)
