# src/taskbot/commands/schemas.py

"""Typed request/reply shapes for the slash-command endpoint."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class SlashCommand(BaseModel):
    """Decoded slash-command webhook body (Slack sends it form-encoded)."""

    model_config = ConfigDict(extra="ignore")

    command: str = Field(min_length=1)
    text: str = ""
    user_id: str = Field(min_length=1)
    channel_id: str = Field(min_length=1)
    response_url: str = ""


class CommandReply(BaseModel):
    response_type: Literal["in_channel", "ephemeral"]
    text: str


class ErrorReply(BaseModel):
    error: str
