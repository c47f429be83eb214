# src/taskboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs the console board until /exit.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotifier, run_console_loop
from ..core.errors import TaskboardError, friendly_error_message
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(state) -> None:
    try:
        if getattr(state.settings, "console_enabled", True):
            await run_console_loop(state)
        else:
            tasks = await state.loader.load_tasks()
            state.store.load(tasks)
            stats = state.store.stats()
            logger.info(
                "Loaded %d tasks (on track=%d, in progress=%d, at risk=%d, blocked=%d).",
                stats.total,
                stats.on_track,
                stats.in_progress,
                stats.at_risk,
                stats.blocked,
            )
    finally:
        await state.client.aclose()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, notifier=ConsoleNotifier())

    try:
        asyncio.run(_run(state))
    except TaskboardError as e:
        logger.error("%s", friendly_error_message(e))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
