# src/taskbot/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..bus.event_bus import EventBus
from ..commands.interpreter import CommandInterpreter
from ..gateway.gateway import CommandGateway
from ..reminders.scheduler import ReminderScheduler
from ..tasks.task_handlers import TaskStorageHandlers
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: Any

    bus: EventBus
    task_store: TaskStore
    task_handlers: TaskStorageHandlers
    reminders: ReminderScheduler
    interpreter: CommandInterpreter
    gateway: CommandGateway
    messenger: Any  # OutboundMessenger with an async aclose()
