# src/taskbot/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then serves the slash-command endpoint with uvicorn.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..gateway.app import create_app
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="taskbot", description="Slack slash-command task manager")
    parser.add_argument("--host", default=None, help="Bind address (default: TASKBOT_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: TASKBOT_PORT)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logger.info("Starting %s (full log: %s)", settings.app_name, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    app = create_app(state)

    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )
    logger.info("Bye.")


if __name__ == "__main__":
    main()
