"""Deferred reminder delivery (task_reminder subscriber + background loop)."""

from .scheduler import ReminderJob, ReminderScheduler, parse_reminder_time

__all__ = ["ReminderJob", "ReminderScheduler", "parse_reminder_time"]
