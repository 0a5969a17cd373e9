# src/taskbot/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the chat provider and the HTTP layer swappable and makes testing easier.
"""

from typing import Any, Awaitable, Callable, Protocol

EventPayload = dict[str, Any]


class OutboundMessenger(Protocol):
    """
    Connector-side port: how services (reminder scheduler) send text to the chat provider.

    Implementations raise MessengerError (or any exception) when delivery fails;
    callers log and drop, they never retry.
    """

    def post_message(self, *, channel: str, text: str) -> Awaitable[None]: ...


class EventEmitter(Protocol):
    """The part of the event bus that request-side code is allowed to see."""

    def emit(self, topic: str, data: EventPayload) -> int: ...


class TaskRepo(Protocol):
    # Creation / completion (event handlers)
    def append(self, *, text: str, user: str, channel: str, created_at: str) -> Any: ...
    def complete_first_pending_match(self, *, text: str, user: str) -> Any | None: ...

    # Reads (/list, diagnostics)
    def filter_by_user(self, user: str) -> list[Any]: ...
    def count(self) -> int: ...


Clock = Callable[[], float]
