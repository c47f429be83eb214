# src/taskboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..board.debounce import Debouncer
from ..board.view import initials, project_board
from ..cli.commands import registry as command_registry
from ..core.ports import NotificationLevel
from ..core.state import AppState
from .console_render import render_board

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


class ConsoleNotifier:
    """Prints transient notifications; setup problems are marked distinctly."""

    def notify(self, message: str, *, level: NotificationLevel = NotificationLevel.INFO) -> None:
        if level == NotificationLevel.CONFIG:
            _print_ts(f"[SETUP] {message}")
        elif level == NotificationLevel.ERROR:
            _print_ts(f"[!] {message}")
        else:
            _print_ts(message)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")

    settings = state.settings
    assignee = str(getattr(settings, "assignee", "") or "")
    wait = float(getattr(settings, "search_debounce_seconds", 0.3))

    if assignee:
        _print_ts(f"[CONSOLE] Board for {assignee} ({initials(assignee)}).")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def render_now() -> None:
        print(render_board(project_board(state.store, state.active_filter, state.search_term)))

    search_render = Debouncer(render_now, wait)
    state.schedule_render = search_render

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    reply = await command_registry.handle(state, "/load", emit=emit)
    if reply:
        print(reply)

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                # Plain text is a search, like typing into the search box.
                user_input = "/search " + user_input

            try:
                reply = await command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."

            if reply:
                print(reply)
    finally:
        search_render.cancel()
        state.schedule_render = None

    logger.info("Console connector finished.")
