# src/taskboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
import mimetypes
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Union, cast

from ..board.models import BOARD_FILTERS, Attachment, TaskStatus
from ..board.view import STATUS_CHOICES, format_date, format_status, project_board, project_task
from ..connectors.console_render import render_board, render_stats, render_status, render_task
from ..core.errors import ConfigurationError, TaskboardError, friendly_error_message
from ..core.ports import NotificationLevel
from ..core.state import AppState

CommandEmitter = Callable[[str], None]
CommandResult = Union[str, Awaitable[str]]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], Union[CommandEmitter, None]], CommandResult]
CommandHandler = Union[CommandHandler2, CommandHandler3]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /load, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _board(state: AppState) -> str:
    return render_board(project_board(state.store, state.active_filter, state.search_term))


def _clamp_progress(raw: str) -> int | None:
    try:
        value = int(raw.rstrip("%"))
    except ValueError:
        return None
    return max(0, min(100, value))


def _known_task(state: AppState, task_id: str) -> bool:
    if state.store.get(task_id) is None:
        state.notifier.notify(f"Unknown task: {task_id}", level=NotificationLevel.ERROR)
        return False
    return True


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_load(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /load -> read the tasks list once and replace the board
    """
    if emit:
        emit("Loading tasks...")
    try:
        tasks = await state.loader.load_tasks()
    except ConfigurationError as e:
        logger.warning("Load failed (configuration): %s", e)
        state.notifier.notify(friendly_error_message(e), level=NotificationLevel.CONFIG)
        return "Board not loaded."
    except TaskboardError as e:
        logger.info("Load failed: %s", e)
        state.notifier.notify(friendly_error_message(e), level=NotificationLevel.ERROR)
        return "Board not loaded. Use /load to retry."

    state.store.load(tasks)
    return _board(state)


def cmd_list(state: AppState, args: list[str]) -> str:
    return _board(state)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """
    /filter             -> show current filter
    /filter <name>      -> all | on-track | not-started | in-progress | at-risk | blocked | completed
    """
    if not args:
        return f"Filter is '{state.active_filter}'. Options: {', '.join(BOARD_FILTERS)}."
    wanted = args[0].lower()
    if wanted not in BOARD_FILTERS:
        return f"Unknown filter '{wanted}'. Options: {', '.join(BOARD_FILTERS)}."
    state.active_filter = wanted
    return _board(state)


def cmd_search(state: AppState, args: list[str]) -> str:
    """
    /search <text>  -> case-insensitive match on title, workstream, id
    /search         -> clear
    """
    state.search_term = " ".join(args)
    if state.schedule_render is not None:
        state.schedule_render()
        return f"Searching for '{state.search_term}'..." if state.search_term else "Search cleared."
    return _board(state)


def cmd_open(state: AppState, args: list[str]) -> str:
    """
    /open <id>  -> expand a task (again to collapse); /open alone collapses all
    """
    if not args:
        state.store.set_expanded(None)
        return _board(state)
    task_id = args[0]
    if not _known_task(state, task_id):
        return ""
    state.store.set_expanded(task_id)
    task = state.store.get(task_id)
    if task is None:
        return ""
    return render_task(project_task(task, state.store.expanded_id))


def cmd_status(state: AppState, args: list[str]) -> str:
    """
    /status <id> <status>
    """
    choices = ", ".join(STATUS_CHOICES)
    if len(args) < 2:
        return f"Usage: /status <id> <status>. Statuses: {choices}."
    task_id, raw = args[0], args[1].lower()
    if raw not in {s.value for s in TaskStatus}:
        return f"Unknown status '{raw}'. Statuses: {choices}."
    if not _known_task(state, task_id):
        return ""
    state.store.set_status(task_id, raw)
    state.notifier.notify("Task updated successfully!")
    task = state.store.get(task_id)
    if task is None:
        return ""
    return f"{task_id}: {format_status(task.status)} ({task.progress}%)"


def cmd_progress(state: AppState, args: list[str]) -> str:
    """
    /progress <id> <0-100>
    """
    if len(args) < 2:
        return "Usage: /progress <id> <0-100>."
    task_id = args[0]
    value = _clamp_progress(args[1])
    if value is None:
        return "Progress must be a whole number between 0 and 100."
    if not _known_task(state, task_id):
        return ""
    state.store.set_progress(task_id, value)
    state.notifier.notify("Task updated successfully!")
    return f"{task_id}: {value}%"


def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note <id> <text...>
    """
    if len(args) < 2:
        return "Usage: /note <id> <text>."
    task_id = args[0]
    if not _known_task(state, task_id):
        return ""
    state.store.append_note(task_id, " ".join(args[1:]))
    state.notifier.notify("Task updated successfully!")
    task = state.store.get(task_id)
    if task is None:
        return ""
    return render_task(project_task(task, task_id))


def cmd_attach(state: AppState, args: list[str]) -> str:
    """
    /attach <id> <path>           -> size/type taken from the file
    /attach <id> <name> <bytes>   -> metadata only
    """
    if len(args) < 2:
        return "Usage: /attach <id> <path> | /attach <id> <name> <bytes>."
    task_id, name = args[0], args[1]
    if not _known_task(state, task_id):
        return ""

    path = Path(name).expanduser()
    if len(args) >= 3:
        try:
            size = int(args[2])
        except ValueError:
            return "Size must be a number of bytes."
    elif path.is_file():
        size = path.stat().st_size
    else:
        return f"File not found: {name}"

    mime, _ = mimetypes.guess_type(path.name)
    meta = Attachment(name=path.name, size=size, type=mime or "")

    reason = state.store.add_attachment(task_id, meta)
    if reason is not None:
        state.notifier.notify(reason, level=NotificationLevel.ERROR)
        return ""
    state.notifier.notify(f'Attached "{meta.name}".')
    return ""


def cmd_detach(state: AppState, args: list[str]) -> str:
    """
    /detach <id> <name>
    """
    if len(args) < 2:
        return "Usage: /detach <id> <name>."
    task_id, name = args[0], " ".join(args[1:])
    if not _known_task(state, task_id):
        return ""
    if not state.store.remove_attachment(task_id, name):
        return f'No attachment "{name}" on {task_id}.'
    return f'Removed "{name}" from {task_id}.'


def cmd_stats(state: AppState, args: list[str]) -> str:
    return render_stats(state.store.stats())


def cmd_diag(state: AppState, args: list[str]) -> str:
    return render_status(state.client.status())


def cmd_proxy(state: AppState, args: list[str]) -> str:
    """
    /proxy <url>  -> route reads through a proxy (when not on the native host)
    /proxy off    -> clear the proxy address
    """
    if not args:
        return render_status(state.client.status())
    url = None if args[0].lower() in ("off", "none", "-") else args[0]
    state.client.set_proxy_url(url)
    return "Proxy URL configured." if url else "Proxy URL cleared."


_CANONICAL_LISTS: tuple[tuple[str, str], ...] = (
    ("Tasks", "tasks_list"),
    ("Sales data", "sales_list"),
    ("Activity log", "activity_list"),
    ("People map", "people_list"),
)


async def cmd_lists(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /lists  -> last-modified time of each configured list (one read per list)
    """
    if emit:
        emit("Checking lists...")
    lines = ["Lists:"]
    for label, attr in _CANONICAL_LISTS:
        list_name = str(getattr(state.settings, attr, "") or "")
        if not list_name:
            lines.append(f"  {label}: (not configured)")
            continue
        try:
            modified = await state.client.get_data_freshness(list_name)
        except TaskboardError as e:
            lines.append(f"  {label} ({list_name}): {friendly_error_message(e)}")
            continue
        lines.append(f"  {label} ({list_name}): updated {format_date(modified, include_time=True)}")
    return "\n".join(lines)


async def cmd_ping(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        emit("Testing connection...")
    report = await state.client.test_connection(getattr(state.settings, "tasks_list", ""))
    if report.ok:
        title = (report.web_info or {}).get("Title", "?")
        count = (report.tasks_list_info or {}).get("ItemCount", "?")
        return f"Connected to {report.site_url} ({title}); tasks list has {count} items."
    return "Connection test failed:\n  " + "\n  ".join(report.errors)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("load", cmd_load, help_text="Load tasks from the site (replaces the board).", aliases=["reload"])
registry.register("list", cmd_list, help_text="Show the board.", aliases=["ls"])
registry.register("filter", cmd_filter, help_text="Filter: /filter all | on-track | in-progress | ...")
registry.register("search", cmd_search, help_text="Search title/workstream/id: /search <text>.")
registry.register("open", cmd_open, help_text="Expand/collapse a task: /open <id>.")
registry.register("status", cmd_status, help_text="Set status: /status <id> <status>.")
registry.register("progress", cmd_progress, help_text="Set progress: /progress <id> <0-100>.")
registry.register("note", cmd_note, help_text="Add a note: /note <id> <text>.")
registry.register("attach", cmd_attach, help_text="Attach a file: /attach <id> <path>.")
registry.register("detach", cmd_detach, help_text="Remove an attachment: /detach <id> <name>.")
registry.register("stats", cmd_stats, help_text="Show board counts.")
registry.register("diag", cmd_diag, help_text="Show data-access diagnostics.")
registry.register("proxy", cmd_proxy, help_text="Configure proxy: /proxy <url> | /proxy off.")
registry.register("ping", cmd_ping, help_text="Test the connection to the site.")
registry.register("lists", cmd_lists, help_text="Show when each configured list was last updated.")
