# src/taskbot/reminders/scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A task_reminder event becomes a one-shot job in a priority queue keyed by fire time.
A background loop sleeps until the earliest job is due (or until a new job arrives),
then delivers it through the injected messenger port.

- unparseable time      -> InvalidTimeFormat, logged, abandoned
- time not in the future -> ReminderInThePast, logged, abandoned
- delivery failure       -> logged, not retried, not re-queued

Jobs live only in memory; a restart drops them. There is no cancel operation.
To stop the loop, cancel the run() task, then await aclose() to cancel in-flight deliveries.
"""

import asyncio
import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..bus.events import Event
from ..core.ports import Clock, OutboundMessenger
from ..errors import InvalidTimeFormat, ReminderInThePast

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True, order=True)
class ReminderJob:
    fire_at: datetime
    id: int
    text: str = field(compare=False)
    user: str = field(compare=False)
    channel: str = field(compare=False)

    def render(self) -> str:
        return f"⏰ Reminder for <@{self.user}>: {self.text}"


def parse_reminder_time(raw: str) -> datetime:
    """
    Parse an ISO-8601 instant ("2099-01-01T00:00:00Z", "2099-01-01 09:30+02:00", ...).

    Naive values are interpreted in the server's local timezone.
    """
    value = (raw or "").strip()
    if not value:
        raise InvalidTimeFormat("Invalid time format: empty time")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise InvalidTimeFormat(f"Invalid time format: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


class ReminderScheduler:
    def __init__(
            self,
            messenger: OutboundMessenger,
            *,
            clock: Clock = time.time,
            max_sleep_seconds: float = 60.0,
    ) -> None:
        self._messenger = messenger
        self._clock = clock
        self._max_sleep = max(0.01, float(max_sleep_seconds))
        self._heap: list[ReminderJob] = []
        self._seq = itertools.count(1)
        self._wakeup: asyncio.Event | None = None
        self._deliveries: set[asyncio.Task[None]] = set()

    # ---- scheduling ----

    def schedule(self, *, text: str, user: str, channel: str, when: str) -> ReminderJob:
        """Validate the reminder time and queue a job. Raises SchedulingError subclasses."""
        fire_at = parse_reminder_time(when)
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        delay = (fire_at - now).total_seconds()
        if delay <= 0:
            raise ReminderInThePast(f"Reminder time must be in the future: {when}")

        job = ReminderJob(fire_at=fire_at, id=next(self._seq), text=text, user=user, channel=channel)
        heapq.heappush(self._heap, job)
        logger.info(
            "Reminder %s scheduled for %s (in %.0fs) user=%s channel=%s",
            job.id,
            fire_at.isoformat(),
            delay,
            user,
            channel,
        )
        if self._wakeup is not None:
            self._wakeup.set()
        return job

    async def on_task_reminder(self, event: Event) -> None:
        """task_reminder subscriber: scheduling failures are logged and the reminder dropped."""
        data: dict[str, Any] = event.data
        try:
            self.schedule(
                text=str(data.get("text", "")),
                user=str(data["user"]),
                channel=str(data["channel"]),
                when=str(data.get("time", "")),
            )
        except (InvalidTimeFormat, ReminderInThePast) as e:
            logger.error("Error processing reminder: %s", e)

    def pending(self) -> list[ReminderJob]:
        return sorted(self._heap)

    # ---- delivery ----

    def _start_due(self, now_ts: float) -> list[asyncio.Task[None]]:
        """Pop every job whose fire time has passed and start one delivery task per job."""
        now = datetime.fromtimestamp(now_ts, tz=timezone.utc)
        started: list[asyncio.Task[None]] = []
        while self._heap and self._heap[0].fire_at <= now:
            job = heapq.heappop(self._heap)
            delivery = asyncio.create_task(self._deliver(job), name=f"reminder:{job.id}")
            self._deliveries.add(delivery)
            delivery.add_done_callback(self._deliveries.discard)
            started.append(delivery)
        return started

    async def fire_due(self, now_ts: float | None = None) -> int:
        """Deliver every job whose fire time has passed and wait for the sends. Returns the count."""
        started = self._start_due(self._clock() if now_ts is None else now_ts)
        if started:
            await asyncio.gather(*started)
        return len(started)

    async def _deliver(self, job: ReminderJob) -> None:
        try:
            await self._messenger.post_message(channel=job.channel, text=job.render())
        except Exception:
            logger.exception("Error sending reminder %s to channel=%s", job.id, job.channel)
            return
        logger.info("Reminder sent to user %s: %s", job.user, job.text)

    def _seconds_until_next(self) -> float:
        if not self._heap:
            return self._max_sleep
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        delay = (self._heap[0].fire_at - now).total_seconds()
        return max(0.0, min(delay, self._max_sleep))

    async def run(self) -> None:
        """
        Loop forever:
        - start a delivery task per due job (a hung send blocks only itself)
        - sleep until the next fire time, max_sleep_seconds, or a new schedule() call

        Stopping the loop does not stop deliveries already started; await aclose() for that.
        """
        self._wakeup = asyncio.Event()
        logger.info("Reminder scheduler started (%d pending)", len(self._heap))
        try:
            while True:
                self._start_due(self._clock())

                self._wakeup.clear()
                try:
                    await asyncio.wait_for(self._wakeup.wait(), timeout=self._seconds_until_next())
                except asyncio.TimeoutError:
                    pass
        finally:
            self._wakeup = None
            logger.info("Reminder scheduler stopped (%d pending dropped)", len(self._heap))

    async def aclose(self) -> None:
        """Cancel deliveries still in flight and wait for them to finish."""
        in_flight = list(self._deliveries)
        if not in_flight:
            return
        logger.warning("Cancelling %d in-flight reminder deliveries", len(in_flight))
        for delivery in in_flight:
            delivery.cancel()
        await asyncio.gather(*in_flight, return_exceptions=True)
