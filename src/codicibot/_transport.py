"""Telegram Bot API transport over aiohttp."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from codicibot._redact import redact_for_log, redact_url
from codicibot.config import CodiciConfig
from codicibot.exceptions import CodiciApiError, CodiciConfigError, CodiciTransportError
from codicibot.models.telegram import TelegramUpdate

_logger = logging.getLogger(__name__)

# Extra seconds granted on top of the long-polling timeout before the HTTP
# request itself is abandoned.
_POLL_GRACE_SECONDS = 10.0
_REQUEST_TIMEOUT_SECONDS = 30.0


def _parse_update(item: dict[str, Any]) -> TelegramUpdate:
    try:
        return TelegramUpdate.model_validate(item)
    except ValidationError as exc:
        # Keep the id so the offset still advances past the bad update.
        _logger.warning("Ignoring malformed update %s: %s", item.get("update_id"), exc)
        return TelegramUpdate(update_id=int(item["update_id"]))


class BotTransport(Protocol):
    """Structural transport interface used by the poller."""

    async def get_updates(self, offset: int | None, timeout: int) -> list[TelegramUpdate]:
        ...

    async def send_message(self, chat_id: int, text: str) -> None:
        ...


class TelegramTransport:
    """Minimal Bot API client: long polling and plain-text replies."""

    def __init__(self, config: CodiciConfig, http_session: aiohttp.ClientSession) -> None:
        if not config.bot_token:
            raise CodiciConfigError("BOT_TOKEN is required to talk to Telegram")
        self._config = config
        self._http = http_session
        self._base = f"{config.api_base_url.rstrip('/')}/bot{config.bot_token}"

    async def call(
        self,
        method: str,
        payload: Mapping[str, Any] | None = None,
        *,
        timeout: float = _REQUEST_TIMEOUT_SECONDS,
    ) -> Any:
        """POST a Bot API method and return its ``result``."""
        url = f"{self._base}/{method}"
        _logger.debug("POST %s %s", redact_url(url), redact_for_log(payload))

        try:
            async with self._http.post(
                url,
                json=dict(payload or {}),
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise CodiciTransportError(f"Request to {method} failed: {exc}", method=method) from exc
        except TimeoutError as exc:
            raise CodiciTransportError(f"Request to {method} timed out", method=method) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CodiciTransportError(
                f"Invalid JSON from {method} (HTTP {status}): {text[:200]}",
                status_code=status,
                method=method,
            ) from exc

        if not isinstance(body, dict):
            raise CodiciTransportError(f"Unexpected body from {method}", status_code=status, method=method)

        if not body.get("ok"):
            # Telegram reports API errors as JSON with a non-200 status.
            raise CodiciApiError(
                str(body.get("description") or f"{method} failed (HTTP {status})"),
                error_code=body.get("error_code"),
                method=method,
            )

        _logger.debug("%s response: %s", method, redact_for_log(body))
        return body.get("result")

    async def get_updates(self, offset: int | None, timeout: int) -> list[TelegramUpdate]:
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        result = await self.call("getUpdates", payload, timeout=timeout + _POLL_GRACE_SECONDS)
        if not isinstance(result, list):
            raise CodiciTransportError("getUpdates result is not a list", method="getUpdates")
        return [_parse_update(item) for item in result if isinstance(item, dict) and "update_id" in item]

    async def send_message(self, chat_id: int, text: str) -> None:
        await self.call("sendMessage", {"chat_id": chat_id, "text": text})
