# src/taskbot/bus/event_bus.py

from __future__ import annotations

"""
Event bus.

emit() is fire-and-forget: it puts the event on the queue of every subscription for the
topic and returns immediately. Each subscription is drained by its own worker task, so:
- a handler sees emissions of one topic in emission order,
- a slow handler never delays other handlers or the emitter,
- there is no ordering across topics.

A handler that raises is logged here and never reaches the emitter.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from .events import Event

logger = logging.getLogger(__name__)

EventHandler = Callable[[Event], Awaitable[None] | None]


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


@dataclass(slots=True, eq=False)
class _Subscription:
    topic: str
    handler: EventHandler
    queue: asyncio.Queue[Event] = field(default_factory=asyncio.Queue)
    worker: asyncio.Task[None] | None = None


class EventBus:
    """In-process publish/subscribe with per-subscription FIFO delivery."""

    def __init__(self) -> None:
        self._subs: dict[str, list[_Subscription]] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()

    # ---- registration ----

    def subscribe(self, topic: str, handler: EventHandler) -> None:
        sub = _Subscription(topic=topic, handler=handler)
        self._subs.setdefault(topic, []).append(sub)
        logger.debug("Subscribed %s to %s", _handler_name(handler), topic)
        self._ensure_workers()

    def unsubscribe(self, topic: str, handler: EventHandler) -> None:
        """Remove a handler; events already queued for it are dropped."""
        subs = self._subs.get(topic, [])
        for sub in [s for s in subs if s.handler == handler]:
            subs.remove(sub)
            self._drop_queued(sub)
            if sub.worker is not None:
                sub.worker.cancel()
            logger.debug("Unsubscribed %s from %s", _handler_name(handler), topic)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subs.get(topic, []))

    # ---- emission ----

    def emit(self, topic: str, data: dict[str, Any]) -> int:
        """
        Hand the event to every subscriber of the topic.

        Returns the number of subscriptions the event was queued for.
        Never waits for handlers.
        """
        subs = list(self._subs.get(topic, []))
        if not subs:
            logger.debug("No subscribers for topic=%s; event dropped", topic)
            return 0

        event = Event(topic=topic, data=dict(data))
        for sub in subs:
            sub.queue.put_nowait(event)
            self._in_flight += 1
        self._idle.clear()

        self._ensure_workers()
        logger.debug("Emitted topic=%s to %d subscriber(s)", topic, len(subs))
        return len(subs)

    # ---- lifecycle ----

    def start(self) -> None:
        """Spawn workers on the running loop. Must be called from inside the loop."""
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # asyncio primitives bind to the first loop that waits on them.
            self._loop = loop
            for sub in self._all_subs():
                sub.worker = None
                sub.queue = self._rebind_queue(sub.queue)
            idle = asyncio.Event()
            if self._idle.is_set():
                idle.set()
            self._idle = idle

        for sub in self._all_subs():
            if sub.worker is None or sub.worker.done():
                sub.worker = loop.create_task(
                    self._worker(sub),
                    name=f"bus:{sub.topic}:{_handler_name(sub.handler)}",
                )

    async def join(self) -> None:
        """Wait until every queued event (including ones emitted by handlers) was handled."""
        self.start()
        await self._idle.wait()

    async def close(self) -> None:
        """Cancel all workers. Undelivered events are dropped and logged."""
        workers = []
        for sub in self._all_subs():
            dropped = self._drop_queued(sub)
            if dropped:
                logger.warning(
                    "Dropping %d undelivered event(s) for %s on %s",
                    dropped,
                    _handler_name(sub.handler),
                    sub.topic,
                )
            if sub.worker is not None:
                sub.worker.cancel()
                workers.append(sub.worker)
                sub.worker = None

        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        self._in_flight = 0
        self._idle.set()

    # ---- internals ----

    def _all_subs(self) -> list[_Subscription]:
        return [s for subs in self._subs.values() for s in subs]

    def _ensure_workers(self) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Not inside a loop yet: start() will spawn workers later.
            return
        self.start()

    @staticmethod
    def _rebind_queue(old: asyncio.Queue[Event]) -> asyncio.Queue[Event]:
        new: asyncio.Queue[Event] = asyncio.Queue()
        while True:
            try:
                new.put_nowait(old.get_nowait())
            except asyncio.QueueEmpty:
                return new

    def _drop_queued(self, sub: _Subscription) -> int:
        dropped = 0
        while True:
            try:
                sub.queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            sub.queue.task_done()
            dropped += 1
        self._mark_done(dropped)
        return dropped

    def _mark_done(self, n: int = 1) -> None:
        self._in_flight = max(0, self._in_flight - n)
        if self._in_flight == 0:
            self._idle.set()

    async def _worker(self, sub: _Subscription) -> None:
        while True:
            event = await sub.queue.get()
            try:
                await self._dispatch(sub, event)
            finally:
                sub.queue.task_done()
                self._mark_done()

    @staticmethod
    async def _dispatch(sub: _Subscription, event: Event) -> None:
        try:
            result = sub.handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "Event handler %s failed topic=%s",
                _handler_name(sub.handler),
                event.topic,
            )
