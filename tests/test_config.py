from __future__ import annotations

from datetime import timedelta

import pytest

from codicibot.config import CodiciConfig
from codicibot.exceptions import CodiciConfigError

_ENV_KEYS = (
    "BOT_TOKEN",
    "CONFIDENCE",
    "TIME_INTERVAL",
    "SUPERUSERS",
    "CODICIBOT_DATABASE",
    "CODICIBOT_STORE_TIMEOUT",
    "CODICIBOT_SESSION_TTL",
    "CODICIBOT_API_BASE_URL",
    "CODICIBOT_POLL_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = CodiciConfig.from_env()

    assert config.confidence_threshold == 2
    assert config.grace_interval_ms == 3_600_000
    assert config.grace_interval == timedelta(hours=1)
    assert config.privileged_user_names == frozenset()
    assert config.bot_token == ""


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOT_TOKEN", " 123:abc ")
    monkeypatch.setenv("CONFIDENCE", "3")
    monkeypatch.setenv("TIME_INTERVAL", "60000")
    monkeypatch.setenv("SUPERUSERS", "alice;bob; ;carol")
    monkeypatch.setenv("CODICIBOT_DATABASE", "/var/lib/codicibot/codes.db")
    monkeypatch.setenv("CODICIBOT_API_BASE_URL", "http://localhost:8081/")

    config = CodiciConfig.from_env()

    assert config.bot_token == "123:abc"
    assert config.confidence_threshold == 3
    assert config.grace_interval == timedelta(minutes=1)
    assert config.privileged_user_names == frozenset({"alice", "bob", "carol"})
    assert config.database_path == "/var/lib/codicibot/codes.db"
    assert config.api_base_url == "http://localhost:8081"


def test_overrides_win_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONFIDENCE", "3")
    monkeypatch.setenv("SUPERUSERS", "alice")

    config = CodiciConfig.from_env(confidence_threshold=5, privileged_user_names={"zed"})

    assert config.confidence_threshold == 5
    assert config.privileged_user_names == frozenset({"zed"})


def test_non_numeric_value_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIME_INTERVAL", "one hour")

    with pytest.raises(CodiciConfigError, match="TIME_INTERVAL"):
        CodiciConfig.from_env()


def test_negative_value_rejected() -> None:
    with pytest.raises(CodiciConfigError, match="confidence_threshold"):
        CodiciConfig(confidence_threshold=-1)


def test_is_privileged() -> None:
    config = CodiciConfig(privileged_user_names=frozenset({"alice"}))

    assert config.is_privileged("alice")
    assert not config.is_privileged("Alice")
    assert not config.is_privileged(None)
