# src/taskbot/errors.py

"""Exception taxonomy shared by the gateway, the reminder scheduler and connectors."""

from __future__ import annotations


class TaskbotError(Exception):
    """Base exception for taskbot errors."""


class Unauthorized(TaskbotError):
    """Verification token is missing or does not match the configured secret."""


class InvalidCommand(TaskbotError):
    """Inbound slash-command body failed structural validation."""


class SchedulingError(TaskbotError):
    """A reminder could not be scheduled; the reminder is abandoned."""


class InvalidTimeFormat(SchedulingError):
    """Reminder time is not a parseable ISO-8601 instant."""


class ReminderInThePast(SchedulingError):
    """Reminder time is not strictly in the future."""


class MessengerError(TaskbotError):
    """Outbound delivery to the chat provider failed."""
