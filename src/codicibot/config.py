"""Bot configuration for codicibot."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from typing import Any

from codicibot._constants import TELEGRAM_API_URL
from codicibot.exceptions import CodiciConfigError


def _split_names(value: str | None) -> frozenset[str]:
    if value is None:
        return frozenset()
    return frozenset(name.strip() for name in value.split(";") if name.strip())


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise CodiciConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class CodiciConfig:
    """Bot configuration.

    Parameters
    ----------
    bot_token : str
        Telegram Bot API token. Only required for polling.
    confidence_threshold : int
        Minimum ``confirms`` for a non-persisted code to be returned by
        queries.
    grace_interval_ms : int
        Minimum time in milliseconds between two confirmations of the same
        code. A matching submission arriving sooner decays the code instead.
    privileged_user_names : frozenset[str]
        Telegram user names whose submissions always win and persist.
    database_path : str
        SQLite file backing the code record store.
    store_timeout : float
        Seconds before a single store operation is abandoned.
    session_idle_ttl : float
        Seconds after which an untouched dialogue session is evicted.
    api_base_url : str
        Telegram Bot API base URL.
    poll_timeout : int
        Long-polling timeout in seconds passed to ``getUpdates``.
    """

    bot_token: str = ""
    confidence_threshold: int = 2
    grace_interval_ms: int = 3_600_000
    privileged_user_names: frozenset[str] = frozenset()
    database_path: str = "codicibot.sqlite3"
    store_timeout: float = 5.0
    session_idle_ttl: float = 900.0
    api_base_url: str = TELEGRAM_API_URL
    poll_timeout: int = 30

    def __post_init__(self) -> None:
        for name in ("confidence_threshold", "grace_interval_ms", "store_timeout", "session_idle_ttl", "poll_timeout"):
            if getattr(self, name) < 0:
                raise CodiciConfigError(f"{name} must be >= 0, got {getattr(self, name)}")
        if not isinstance(self.privileged_user_names, frozenset):
            object.__setattr__(self, "privileged_user_names", frozenset(self.privileged_user_names))

    @property
    def grace_interval(self) -> timedelta:
        return timedelta(milliseconds=self.grace_interval_ms)

    def is_privileged(self, user_name: str | None) -> bool:
        """Whether *user_name* is on the superuser allow-list."""
        return user_name is not None and user_name in self.privileged_user_names

    @classmethod
    def from_env(cls, **overrides: Any) -> CodiciConfig:
        """Create configuration from environment variables.

        Reads ``BOT_TOKEN``, ``CONFIDENCE``, ``TIME_INTERVAL`` and
        ``SUPERUSERS`` (semicolon-separated user names) plus optional
        ``CODICIBOT_*`` variables. Explicit keyword arguments override
        environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        token = env.get("BOT_TOKEN")
        if token is not None:
            config_kwargs["bot_token"] = token.strip()

        database = env.get("CODICIBOT_DATABASE")
        if database is not None:
            config_kwargs["database_path"] = database

        base_url = env.get("CODICIBOT_API_BASE_URL")
        if base_url is not None:
            config_kwargs["api_base_url"] = base_url.rstrip("/")

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "CONFIDENCE": ("confidence_threshold", int),
            "TIME_INTERVAL": ("grace_interval_ms", int),
            "CODICIBOT_STORE_TIMEOUT": ("store_timeout", float),
            "CODICIBOT_SESSION_TTL": ("session_idle_ttl", float),
            "CODICIBOT_POLL_TIMEOUT": ("poll_timeout", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val.strip(), cast)

        if "privileged_user_names" not in overrides:
            config_kwargs["privileged_user_names"] = _split_names(env.get("SUPERUSERS"))

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
