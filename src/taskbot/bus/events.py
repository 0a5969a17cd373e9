# src/taskbot/bus/events.py

"""Event record and the topics emitted inside the app."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

TASK_CREATED = "task_created"
TASK_COMPLETED = "task_completed"
TASK_REMINDER = "task_reminder"
TASK_UPDATED = "task_updated"


@dataclass(slots=True, frozen=True)
class Event:
    """
    A named emission.

    Attributes:
        topic: event kind, one of the TASK_* constants (any string is accepted)
        data: payload; its shape depends on the topic
        emitted_at: epoch seconds, for logs only
    """

    topic: str
    data: dict[str, Any]
    emitted_at: float = field(default_factory=time.time)
