# src/taskbot/tasks/task_handlers.py

from __future__ import annotations

"""
Task storage subscribers.

task_created   -> append a pending task
task_completed -> complete the oldest matching pending task (no-op if none)

After each successful mutation a task_updated event is emitted with the task as a dict.
Errors are left to the event bus, which logs them.
"""

import logging

from ..bus.event_bus import EventBus
from ..bus.events import TASK_COMPLETED, TASK_CREATED, TASK_UPDATED, Event
from ..core.ports import EventEmitter
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskStorageHandlers:
    def __init__(self, task_store: TaskStore, emitter: EventEmitter | None = None) -> None:
        self._store = task_store
        self._emitter = emitter

    def on_task_created(self, event: Event) -> None:
        data = event.data
        task = self._store.append(
            text=str(data["text"]),
            user=str(data["user"]),
            channel=str(data["channel"]),
            created_at=str(data["timestamp"]),
        )
        logger.info("Task created: %s", task.id)
        self._notify(task.to_dict())

    def on_task_completed(self, event: Event) -> None:
        data = event.data
        task = self._store.complete_first_pending_match(
            text=str(data["text"]),
            user=str(data["user"]),
        )
        if task is None:
            logger.info("No pending task to complete user=%s text=%r", data["user"], data["text"])
            return
        logger.info("Task completed: %s", task.id)
        self._notify(task.to_dict())

    def _notify(self, payload: dict) -> None:
        if self._emitter is not None:
            self._emitter.emit(TASK_UPDATED, payload)


def register_task_handlers(bus: EventBus, task_store: TaskStore) -> TaskStorageHandlers:
    """Subscribe both storage handlers to the bus, sharing the given store."""
    handlers = TaskStorageHandlers(task_store, emitter=bus)
    bus.subscribe(TASK_CREATED, handlers.on_task_created)
    bus.subscribe(TASK_COMPLETED, handlers.on_task_completed)
    return handlers
