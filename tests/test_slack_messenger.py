# tests/test_slack_messenger.py

from __future__ import annotations

import json
from types import SimpleNamespace

import httpx
import pytest

from taskbot.connectors.slack_messenger import SlackMessenger
from taskbot.errors import MessengerError


def _messenger(settings: SimpleNamespace, handler) -> SlackMessenger:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SlackMessenger(settings, client=client)


@pytest.mark.asyncio
async def test_post_message_sends_bearer_token_and_json(settings: SimpleNamespace) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    messenger = _messenger(settings, handler)
    await messenger.post_message(channel="C1", text="⏰ Reminder for <@U1>: hi")

    [request] = seen
    assert str(request.url) == "https://slack.test/api/chat.postMessage"
    assert request.headers["authorization"] == "Bearer xoxb-test"
    assert json.loads(request.content) == {"channel": "C1", "text": "⏰ Reminder for <@U1>: hi"}


@pytest.mark.asyncio
async def test_slack_ok_false_is_an_error(settings: SimpleNamespace) -> None:
    messenger = _messenger(
        settings, lambda request: httpx.Response(200, json={"ok": False, "error": "channel_not_found"})
    )
    with pytest.raises(MessengerError, match="channel_not_found"):
        await messenger.post_message(channel="C404", text="x")


@pytest.mark.asyncio
async def test_http_error_status_is_an_error(settings: SimpleNamespace) -> None:
    messenger = _messenger(settings, lambda request: httpx.Response(503, text="unavailable"))
    with pytest.raises(MessengerError, match="503"):
        await messenger.post_message(channel="C1", text="x")


@pytest.mark.asyncio
async def test_transport_failure_is_an_error(settings: SimpleNamespace) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    messenger = _messenger(settings, handler)
    with pytest.raises(MessengerError):
        await messenger.post_message(channel="C1", text="x")


@pytest.mark.asyncio
async def test_missing_bot_token_fails_without_calling_slack(settings: SimpleNamespace) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"ok": True})

    settings.bot_token = None
    messenger = _messenger(settings, handler)
    with pytest.raises(MessengerError, match="SLACK_BOT_TOKEN"):
        await messenger.post_message(channel="C1", text="x")
    assert calls == []
