# src/taskbot/tasks/task_models.py

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    The only transition is pending -> completed; it is never reversed.
    """

    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class Task:
    id: str
    text: str
    user: str
    channel: str
    status: TaskStatus
    created_at: str  # ISO-8601, taken from the emitting event's timestamp

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["status"] = self.status.value
        return d
