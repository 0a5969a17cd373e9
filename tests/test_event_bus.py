# tests/test_event_bus.py

from __future__ import annotations

import asyncio
import logging

import pytest

from taskbot.bus.event_bus import EventBus
from taskbot.bus.events import Event


@pytest.mark.asyncio
async def test_emit_reaches_every_subscriber_of_the_topic_only() -> None:
    bus = EventBus()
    seen: dict[str, list[str]] = {"a": [], "b": [], "other": []}

    async def h_a(event: Event) -> None:
        seen["a"].append(event.data["n"])

    async def h_b(event: Event) -> None:
        seen["b"].append(event.data["n"])

    async def h_other(event: Event) -> None:
        seen["other"].append(event.data["n"])

    bus.subscribe("t", h_a)
    bus.subscribe("t", h_b)
    bus.subscribe("x", h_other)

    assert bus.emit("t", {"n": "1"}) == 2
    await bus.join()

    assert seen == {"a": ["1"], "b": ["1"], "other": []}
    await bus.close()


@pytest.mark.asyncio
async def test_emit_does_not_wait_for_handlers() -> None:
    bus = EventBus()
    release = asyncio.Event()
    finished: list[str] = []

    async def slow(event: Event) -> None:
        await release.wait()
        finished.append(event.topic)

    bus.subscribe("t", slow)
    bus.emit("t", {})

    # emit() already returned; the handler is parked on `release`.
    await asyncio.sleep(0)
    assert finished == []

    release.set()
    await bus.join()
    assert finished == ["t"]
    await bus.close()


@pytest.mark.asyncio
async def test_same_topic_events_are_delivered_in_emission_order() -> None:
    bus = EventBus()
    order: list[int] = []

    async def handler(event: Event) -> None:
        # Yield between events so a broken queue would interleave them.
        await asyncio.sleep(0)
        order.append(event.data["i"])

    bus.subscribe("t", handler)
    for i in range(20):
        bus.emit("t", {"i": i})

    await bus.join()
    assert order == list(range(20))
    await bus.close()


@pytest.mark.asyncio
async def test_failing_handler_is_logged_and_isolated(caplog: pytest.LogCaptureFixture) -> None:
    bus = EventBus()
    ok: list[int] = []
    calls = {"bad": 0}

    def bad(event: Event) -> None:
        calls["bad"] += 1
        raise RuntimeError("boom")

    def good(event: Event) -> None:
        ok.append(event.data["i"])

    bus.subscribe("t", bad)
    bus.subscribe("t", good)

    with caplog.at_level(logging.ERROR, logger="taskbot.bus.event_bus"):
        assert bus.emit("t", {"i": 1}) == 2
        bus.emit("t", {"i": 2})
        await bus.join()

    assert ok == [1, 2]
    assert calls["bad"] == 2  # the worker survives the first failure
    assert "boom" in caplog.text
    await bus.close()


@pytest.mark.asyncio
async def test_emit_without_subscribers_returns_zero() -> None:
    bus = EventBus()
    assert bus.emit("nobody", {"x": 1}) == 0
    await asyncio.wait_for(bus.join(), timeout=1.0)


@pytest.mark.asyncio
async def test_handler_emissions_are_awaited_by_join() -> None:
    bus = EventBus()
    seen: list[str] = []

    def first(event: Event) -> None:
        bus.emit("second", {"from": event.topic})

    async def second(event: Event) -> None:
        await asyncio.sleep(0.01)
        seen.append(event.data["from"])

    bus.subscribe("first", first)
    bus.subscribe("second", second)
    bus.emit("first", {})

    await bus.join()
    assert seen == ["first"]
    await bus.close()


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery() -> None:
    bus = EventBus()
    seen: list[int] = []

    def handler(event: Event) -> None:
        seen.append(event.data["i"])

    bus.subscribe("t", handler)
    bus.emit("t", {"i": 1})
    await bus.join()

    bus.unsubscribe("t", handler)
    assert bus.subscriber_count("t") == 0
    assert bus.emit("t", {"i": 2}) == 0
    await bus.join()

    assert seen == [1]
    await bus.close()


def test_events_emitted_outside_a_loop_are_delivered_once_started() -> None:
    bus = EventBus()
    seen: list[int] = []

    bus.subscribe("t", lambda event: seen.append(event.data["i"]))

    # No running loop yet: the event is queued, nothing runs.
    assert bus.emit("t", {"i": 7}) == 1
    assert seen == []

    async def drain() -> None:
        await bus.join()
        await bus.close()

    asyncio.run(drain())
    assert seen == [7]


@pytest.mark.asyncio
async def test_close_drops_undelivered_events(caplog: pytest.LogCaptureFixture) -> None:
    bus = EventBus()
    release = asyncio.Event()

    async def slow(event: Event) -> None:
        await release.wait()

    bus.subscribe("t", slow)
    bus.emit("t", {})
    bus.emit("t", {})
    await asyncio.sleep(0)

    with caplog.at_level(logging.WARNING, logger="taskbot.bus.event_bus"):
        await bus.close()

    assert "Dropping 1 undelivered event" in caplog.text
    await asyncio.wait_for(bus.join(), timeout=1.0)
    await bus.close()
