# src/taskbot/connectors/slack_messenger.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import MessengerError

logger = logging.getLogger(__name__)


class SlackMessenger:
    """
    OutboundMessenger backed by Slack's chat.postMessage.

    The bot token is read per call: without it only that delivery fails, the rest of the
    app keeps working. Slack answers HTTP 200 with {"ok": false, "error": ...} for most API
    errors, so both the status code and the body are checked.
    """

    def __init__(self, settings, *, client: httpx.AsyncClient | None = None) -> None:
        self._bot_token: str | None = getattr(settings, "bot_token", None)
        self._api_url = str(getattr(settings, "slack_api_url", "https://slack.com/api")).rstrip("/")
        timeout = float(getattr(settings, "http_timeout_seconds", 10.0))
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def post_message(self, *, channel: str, text: str) -> None:
        if not self._bot_token:
            raise MessengerError("SLACK_BOT_TOKEN not set")

        try:
            response = await self._client.post(
                f"{self._api_url}/chat.postMessage",
                headers={"Authorization": f"Bearer {self._bot_token}"},
                json={"channel": channel, "text": text},
            )
        except httpx.HTTPError as e:
            raise MessengerError(f"Failed to send message: {e!r}") from e

        if response.is_error:
            raise MessengerError(f"Failed to send message: HTTP {response.status_code}")

        payload: dict[str, Any] = {}
        try:
            data = response.json()
            if isinstance(data, dict):
                payload = data
        except ValueError:
            logger.debug("chat.postMessage returned a non-JSON body")

        if payload and not payload.get("ok", False):
            raise MessengerError(f"Slack API error: {payload.get('error', 'unknown_error')}")

        logger.debug("chat.postMessage ok channel=%s", channel)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
