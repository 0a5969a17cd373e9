# src/taskbot/tasks/task_store.py

from __future__ import annotations

import logging
import secrets
import string
import threading
import time

from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _new_task_id() -> str:
    """<epoch-ms>-<9 base36 chars>, e.g. 1767225600000-k3j9x0q1z."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


class TaskStore:
    """
    In-memory task store.

    One instance is created in the composition root and injected into every component that
    reads or writes tasks; there is no module-level task list.

    Records are kept in insertion order and never deleted. The process owns the only copy:
    nothing survives a restart.

    Thread-safety:
    - all operations run under one lock, so each append / complete is atomic even if a
      handler ever runs outside the event loop thread
    """

    def __init__(self) -> None:
        self._tasks: list[Task] = []
        self._ids: set[str] = set()
        self._lock = threading.Lock()
        logger.info("TaskStore ready (in-memory)")

    # ---- writes ----

    def append(self, *, text: str, user: str, channel: str, created_at: str) -> Task:
        with self._lock:
            task_id = _new_task_id()
            while task_id in self._ids:
                task_id = _new_task_id()

            task = Task(
                id=task_id,
                text=text,
                user=user,
                channel=channel,
                status=TaskStatus.PENDING,
                created_at=created_at,
            )
            self._tasks.append(task)
            self._ids.add(task_id)

        logger.debug("Task added id=%s user=%s channel=%s", task.id, user, channel)
        return task

    def complete_first_pending_match(self, *, text: str, user: str) -> Task | None:
        """
        Mark the oldest pending task with this exact text for this user as completed.

        Returns the mutated task, or None when nothing matched (not an error).
        """
        with self._lock:
            for task in self._tasks:
                if task.text == text and task.user == user and task.status == TaskStatus.PENDING:
                    task.status = TaskStatus.COMPLETED
                    return task
        return None

    # ---- reads ----

    def filter_by_user(self, user: str) -> list[Task]:
        with self._lock:
            return [t for t in self._tasks if t.user == user]

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            for task in self._tasks:
                if task.id == task_id:
                    return task
        return None

    def all(self) -> list[Task]:
        with self._lock:
            return list(self._tasks)

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)
