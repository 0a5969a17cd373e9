# src/taskbot/cli/bootstrap.py

"""
Composition root.

- loads settings once (unless injected),
- creates exactly one TaskStore and hands the same instance to every component,
- wires subscribers onto the event bus,
- plugs the chat provider (Slack) in behind the OutboundMessenger port.
"""

from __future__ import annotations

import logging
import time

from ..bus.event_bus import EventBus
from ..bus.events import TASK_REMINDER
from ..commands.interpreter import CommandInterpreter
from ..config import get_settings
from ..connectors.slack_messenger import SlackMessenger
from ..core.ports import Clock
from ..core.state import AppState
from ..gateway.gateway import CommandGateway
from ..reminders.scheduler import ReminderScheduler
from ..tasks.task_handlers import register_task_handlers
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, messenger=None, clock: Clock = time.time) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the messenger injectable makes the app easy to test and avoids
    hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if messenger is None:
        messenger = SlackMessenger(settings)

    bus = EventBus()
    task_store = TaskStore()
    task_handlers = register_task_handlers(bus, task_store)

    reminders = ReminderScheduler(messenger, clock=clock)
    bus.subscribe(TASK_REMINDER, reminders.on_task_reminder)

    interpreter = CommandInterpreter(task_store, clock=clock)
    gateway = CommandGateway(
        interpreter,
        bus,
        verification_token=getattr(settings, "verification_token", None),
    )

    if not getattr(settings, "bot_token", None):
        logger.warning("Bot token is not configured; reminders will fail to deliver")

    return AppState(
        settings=settings,
        bus=bus,
        task_store=task_store,
        task_handlers=task_handlers,
        reminders=reminders,
        interpreter=interpreter,
        gateway=gateway,
        messenger=messenger,
    )
