# tests/helpers.py

from __future__ import annotations

from typing import Any

TOKEN = "s3cret-verification-token"


def auth_headers(token: str = TOKEN) -> dict[str, str]:
    return {"x-slack-request-token": token}


def command_body(
    command: str,
    text: str = "",
    user_id: str = "U1",
    channel_id: str = "C1",
) -> dict[str, Any]:
    return {
        "command": command,
        "text": text,
        "user_id": user_id,
        "channel_id": channel_id,
        "response_url": "https://hooks.slack.test/commands/1",
    }


class RecordingEmitter:
    """EventEmitter that only records emissions (no delivery)."""

    def __init__(self) -> None:
        self.emitted: list[tuple[str, dict[str, Any]]] = []

    def emit(self, topic: str, data: dict[str, Any]) -> int:
        self.emitted.append((topic, dict(data)))
        return 1
