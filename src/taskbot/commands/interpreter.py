# src/taskbot/commands/interpreter.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from ..bus.events import TASK_COMPLETED, TASK_CREATED, TASK_REMINDER
from ..core.ports import Clock, TaskRepo
from ..tasks.task_models import TaskStatus
from .schemas import CommandReply, SlashCommand

logger = logging.getLogger(__name__)

NO_TASKS_TEXT = "You have no tasks."

ResponseType = Literal["in_channel", "ephemeral"]


@dataclass(slots=True, frozen=True)
class Emission:
    topic: str
    data: dict[str, Any]


@dataclass(slots=True, frozen=True)
class Interpretation:
    """Direct reply for the requester plus at most one event to emit."""

    reply: CommandReply
    emission: Emission | None = None


CommandHandler = Callable[[SlashCommand], Interpretation]


def _reply(text: str, response_type: ResponseType = "in_channel") -> CommandReply:
    return CommandReply(response_type=response_type, text=text)


def _ts_local(iso_ts: str) -> str:
    """Render a stored ISO timestamp in the server's local timezone."""
    try:
        dt = datetime.fromisoformat(iso_ts)
    except ValueError:
        return iso_ts
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def split_reminder_text(text: str) -> tuple[str, str]:
    """'<time> <words...>' -> (time, words). Missing words give an empty remainder."""
    parts = (text or "").strip().split(maxsplit=1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


class CommandInterpreter:
    """
    Slash-command registry used by the gateway (/task, /reminder, /complete, /list).

    Pure with respect to delivery: handlers build the reply and describe the event to emit,
    the gateway does the emitting. /list is the only handler that touches the task store,
    and only to read it.
    """

    def __init__(self, task_store: TaskRepo, *, clock: Clock = time.time) -> None:
        self._store = task_store
        self._clock = clock
        self._handlers: dict[str, CommandHandler] = {}

        self.register("task", self._cmd_task)
        self.register("reminder", self._cmd_reminder)
        self.register("complete", self._cmd_complete)
        self.register("list", self._cmd_list)

    def register(self, name: str, handler: CommandHandler) -> None:
        self._handlers[name.lower().lstrip("/")] = handler

    def commands(self) -> list[str]:
        return [f"/{name}" for name in self._handlers]

    def build_help(self) -> str:
        return f"Unknown command. Available commands: {', '.join(self.commands())}"

    def interpret(self, command: SlashCommand) -> Interpretation:
        name = command.command.strip().lower().lstrip("/")
        handler = self._handlers.get(name)
        if handler is None:
            logger.info("Unknown command %r from user=%s", command.command, command.user_id)
            return Interpretation(reply=_reply(self.build_help(), "ephemeral"))

        return handler(command)

    def _now_iso(self) -> str:
        dt = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    # ---- handlers ----

    def _cmd_task(self, command: SlashCommand) -> Interpretation:
        data = {
            "text": command.text,
            "user": command.user_id,
            "channel": command.channel_id,
            "timestamp": self._now_iso(),
        }
        return Interpretation(
            reply=_reply(f"✅ Task created: {command.text}"),
            emission=Emission(TASK_CREATED, data),
        )

    def _cmd_reminder(self, command: SlashCommand) -> Interpretation:
        when, text = split_reminder_text(command.text)
        data = {
            "text": text,
            "user": command.user_id,
            "channel": command.channel_id,
            "time": when,
            "timestamp": self._now_iso(),
        }
        return Interpretation(
            reply=_reply(f"⏰ Reminder set for {when}: {text}"),
            emission=Emission(TASK_REMINDER, data),
        )

    def _cmd_complete(self, command: SlashCommand) -> Interpretation:
        data = {
            "text": command.text,
            "user": command.user_id,
            "channel": command.channel_id,
            "timestamp": self._now_iso(),
        }
        return Interpretation(
            reply=_reply(f"✅ Task completed: {command.text}"),
            emission=Emission(TASK_COMPLETED, data),
        )

    def _cmd_list(self, command: SlashCommand) -> Interpretation:
        tasks = self._store.filter_by_user(command.user_id)
        if not tasks:
            return Interpretation(reply=_reply(NO_TASKS_TEXT, "ephemeral"))

        lines = []
        for t in tasks:
            glyph = "✅" if t.status == TaskStatus.COMPLETED else "⏳"
            lines.append(f"{glyph} {t.text} ({_ts_local(t.created_at)})")
        return Interpretation(reply=_reply("Your tasks:\n" + "\n".join(lines), "ephemeral"))
