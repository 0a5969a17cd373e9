# src/taskbot/gateway/app.py

"""
HTTP adapter.

Thin FastAPI layer around CommandGateway: it turns the request into (headers, body),
returns the gateway's status/body unchanged, and owns the lifecycle of the background
pieces (bus workers, reminder loop, messenger client).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from ..core.state import AppState

logger = logging.getLogger(__name__)

COMMAND_PATH = "/slack/command"


async def _read_body(request: Request) -> dict[str, Any]:
    """JSON or form body as a flat dict; unreadable bodies become {} and fail decoding later."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        logger.warning("Unreadable form body: %s", getattr(e, "detail", None) or e)
        return {}
    return {k: v for k, v in form.items() if isinstance(v, str)}


def create_app(state: AppState) -> FastAPI:
    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        state.bus.start()
        reminder_loop = asyncio.create_task(state.reminders.run(), name="reminder-scheduler")
        logger.info("%s is ready on %s", state.settings.app_name, COMMAND_PATH)
        try:
            yield
        finally:
            reminder_loop.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reminder_loop
            await state.reminders.aclose()
            try:
                await asyncio.wait_for(state.bus.join(), timeout=5.0)
            except asyncio.TimeoutError:
                logger.warning("Event bus did not drain within 5s; dropping the rest")
            await state.bus.close()
            await state.messenger.aclose()

    app = FastAPI(title=state.settings.app_name, lifespan=lifespan)

    @app.post(COMMAND_PATH)
    async def slack_command(request: Request) -> JSONResponse:
        rejected = state.gateway.reject_unauthorized(request.headers)
        if rejected is not None:
            return JSONResponse(status_code=rejected.status, content=rejected.body)

        body = await _read_body(request)
        result = state.gateway.handle(request.headers, body)
        return JSONResponse(status_code=result.status, content=result.body)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "tasks": state.task_store.count(),
            "pending_reminders": len(state.reminders.pending()),
        }

    return app
