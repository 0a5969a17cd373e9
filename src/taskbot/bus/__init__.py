"""
In-process publish/subscribe.

Components:
- events.py: Event record and topic names
- event_bus.py: EventBus with per-subscription queues and worker tasks
"""

from .event_bus import EventBus, EventHandler
from .events import TASK_COMPLETED, TASK_CREATED, TASK_REMINDER, TASK_UPDATED, Event

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "TASK_COMPLETED",
    "TASK_CREATED",
    "TASK_REMINDER",
    "TASK_UPDATED",
]
