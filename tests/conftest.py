# tests/conftest.py

from __future__ import annotations

import time
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskbot.cli.bootstrap import create_initial_state
from taskbot.core.state import AppState

from .fakes import FakeMessenger
from .helpers import TOKEN


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the connectors.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment/.env.
    """
    return SimpleNamespace(
        app_name="taskbot-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        host="127.0.0.1",
        port=0,
        verification_token=TOKEN,
        bot_token="xoxb-test",
        slack_api_url="https://slack.test/api",
        http_timeout_seconds=5.0,
    )


@pytest.fixture()
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture()
def state(settings: SimpleNamespace, messenger: FakeMessenger) -> AppState:
    """AppState wired exactly like production, with the Slack connector replaced by a fake."""
    return create_initial_state(settings=settings, messenger=messenger, clock=time.time)

