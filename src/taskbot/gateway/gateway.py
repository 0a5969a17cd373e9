# src/taskbot/gateway/gateway.py

from __future__ import annotations

"""
Command gateway.

Per request, each step is a hard gate:
1) read the verification token (x-slack-request-token, else x-slack-signature)
2) compare it with the configured secret -> 401 on missing/mismatch, nothing emitted
3) decode the body into a SlashCommand -> 400 with the validation message
4) interpret, hand the emission (if any) to the bus, reply 200 right away

Subscribers run later on the bus; their failures never reach this reply.
Anything raised in step 4 becomes a 500 with the error message.
"""

import hmac
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from ..commands.interpreter import CommandInterpreter
from ..commands.schemas import ErrorReply, SlashCommand
from ..core.ports import EventEmitter
from ..errors import InvalidCommand, Unauthorized

logger = logging.getLogger(__name__)

TOKEN_HEADERS = ("x-slack-request-token", "x-slack-signature")


@dataclass(slots=True, frozen=True)
class GatewayResponse:
    status: int
    body: dict[str, Any]


def _error(status: int, message: str) -> GatewayResponse:
    return GatewayResponse(status=status, body=ErrorReply(error=message).model_dump())


def extract_token(headers: Mapping[str, str]) -> str | None:
    lowered = {str(k).lower(): v for k, v in headers.items()}
    for name in TOKEN_HEADERS:
        value = lowered.get(name)
        if value:
            return str(value)
    return None


def tokens_match(expected: str | None, presented: str | None) -> bool:
    if not expected or not presented:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


def decode_command(body: Mapping[str, Any]) -> SlashCommand:
    try:
        return SlashCommand.model_validate(dict(body))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'body'}: {err['msg']}" for err in e.errors()
        )
        raise InvalidCommand(f"Invalid command payload: {problems}") from e


class CommandGateway:
    def __init__(
            self,
            interpreter: CommandInterpreter,
            emitter: EventEmitter,
            *,
            verification_token: str | None,
    ) -> None:
        self._interpreter = interpreter
        self._emitter = emitter
        self._verification_token = verification_token
        if not verification_token:
            logger.warning("Verification token is not configured; every command will get 401")

    def authenticate(self, headers: Mapping[str, str]) -> None:
        presented = extract_token(headers)
        if not tokens_match(self._verification_token, presented):
            raise Unauthorized("Unauthorized")

    def reject_unauthorized(self, headers: Mapping[str, str]) -> GatewayResponse | None:
        """Return the 401 reply when the token is missing or wrong, None when it checks out."""
        try:
            self.authenticate(headers)
        except Unauthorized:
            logger.error("Missing or invalid verification token")
            return _error(401, "Unauthorized")
        return None

    def handle(self, headers: Mapping[str, str], body: Mapping[str, Any]) -> GatewayResponse:
        rejected = self.reject_unauthorized(headers)
        if rejected is not None:
            return rejected

        try:
            command = decode_command(body)
        except InvalidCommand as e:
            logger.warning("%s", e)
            return _error(400, str(e))

        try:
            logger.info(
                "Received command %s user=%s channel=%s",
                command.command,
                command.user_id,
                command.channel_id,
            )
            result = self._interpreter.interpret(command)
            if result.emission is not None:
                self._emitter.emit(result.emission.topic, result.emission.data)
            return GatewayResponse(status=200, body=result.reply.model_dump())
        except Exception as e:
            logger.exception("Error processing command")
            return _error(500, str(e) or "Internal server error")
