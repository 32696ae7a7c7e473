"""Helpers for safe debug logging.

Telegram payloads carry personal data (names, phone numbers) and every
Bot API URL embeds the bot token. This module redacts those before they
reach DEBUG logs.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "token",
        "bot_token",
        "first_name",
        "last_name",
        "phone_number",
        "authorization",
    }
)

_TOKEN_IN_URL_RE = re.compile(r"/bot[^/]+/")


def redact_url(url: str) -> str:
    """Replace the bot token embedded in a Bot API URL."""
    return _TOKEN_IN_URL_RE.sub("/bot<redacted>/", url)


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of a decoded Bot API JSON value that is safe to log.

    Values under sensitive keys are masked at any depth and long strings are
    cut to *max_string* characters. Numbers, booleans and ``None`` pass
    through unchanged.
    """
    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated {len(value) - max_string} chars>"
        return value
    if isinstance(value, Mapping):
        return {
            key: (
                "<redacted>"
                if str(key).lower() in _SENSITIVE_VALUE_KEYS
                else redact_for_log(item, max_string=max_string)
            )
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact_for_log(item, max_string=max_string) for item in value]
    return value
