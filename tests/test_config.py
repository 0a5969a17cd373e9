# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from taskbot.config import Settings

_VARS = [
    "TASKBOT_VERIFICATION_TOKEN",
    "SLACK_VERIFICATION_TOKEN",
    "VERIFICATION_TOKEN",
    "TASKBOT_BOT_TOKEN",
    "SLACK_BOT_TOKEN",
    "BOT_TOKEN",
    "TASKBOT_PORT",
    "TASKBOT_HTTP_TIMEOUT_SECONDS",
    "TASKBOT_SLACK_API_URL",
    "TASKBOT_LOG_DIR",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_need_no_secrets() -> None:
    s = Settings.from_env()
    assert s.verification_token is None
    assert s.bot_token is None
    assert s.port == 3000
    assert s.slack_api_url == "https://slack.com/api"
    assert s.log_dir == Path(".local/taskbot")


def test_prefixed_names_win_over_fallbacks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VERIFICATION_TOKEN", "bare")
    monkeypatch.setenv("SLACK_VERIFICATION_TOKEN", "slack")
    assert Settings.from_env().verification_token == "slack"

    monkeypatch.setenv("TASKBOT_VERIFICATION_TOKEN", "prefixed")
    assert Settings.from_env().verification_token == "prefixed"


def test_bot_token_fallback_and_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKBOT_BOT_TOKEN", "   ")
    monkeypatch.setenv("BOT_TOKEN", "xoxb-1")
    assert Settings.from_env().bot_token == "xoxb-1"


def test_bad_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKBOT_PORT", "eighty")
    monkeypatch.setenv("TASKBOT_HTTP_TIMEOUT_SECONDS", "0")
    monkeypatch.setenv("TASKBOT_SLACK_API_URL", "http://localhost:9999/api/")
    s = Settings.from_env()
    assert s.port == 3000
    assert s.http_timeout_seconds == 1.0
    assert s.slack_api_url == "http://localhost:9999/api"
