# src/taskboard/connectors/console_render.py

from __future__ import annotations

from ..board.models import BoardStats
from ..board.view import BoardView, TaskView, format_date
from ..data.context import StatusSnapshot

_BAR_WIDTH = 20


def _bar(progress: int) -> str:
    filled = max(0, min(_BAR_WIDTH, round(progress / 100 * _BAR_WIDTH)))
    return "#" * filled + "-" * (_BAR_WIDTH - filled)


def render_stats(stats: BoardStats) -> str:
    return (
        f"Total: {stats.total} | On track: {stats.on_track} | In progress: {stats.in_progress} "
        f"| At risk: {stats.at_risk} | Blocked: {stats.blocked}"
    )


def render_task(view: TaskView) -> str:
    marker = "v" if view.expanded else ">"
    lines = [
        f"{marker} [{view.id}] {view.title}",
        f"    {view.workstream} | Due {view.due_date_label} | {view.status_label} "
        f"[{_bar(view.progress)}] {view.progress_label}",
    ]
    if not view.expanded:
        return "\n".join(lines)

    for label, value in view.info_rows:
        lines.append(f"      {label}: {value or '-'}")
    if view.recent_notes:
        lines.append("      Recent notes:")
        for note in view.recent_notes:
            lines.append(f"        {format_date(note.date)} - {note.text}")
    if view.attachments:
        lines.append("      Attachments:")
        for a in view.attachments:
            lines.append(f"        {a.name} ({a.size_label})")
    return "\n".join(lines)


def render_board(board: BoardView) -> str:
    header = f"Filter: {board.active_filter}"
    if board.search:
        header += f" | Search: {board.search!r}"
    out = [render_stats(board.stats), header, ""]
    if board.empty_message:
        out.append(board.empty_message)
    else:
        out.extend(render_task(t) for t in board.tasks)
    return "\n".join(out)


def render_status(snapshot: StatusSnapshot) -> str:
    last_fetch = "-"
    if snapshot.last_fetch is not None:
        last_fetch = f"{snapshot.last_fetch.url} at {snapshot.last_fetch.time.isoformat(timespec='seconds')}"
    last_error = "-"
    if snapshot.last_error is not None:
        last_error = f"{snapshot.last_error.error} at {snapshot.last_error.time.isoformat(timespec='seconds')}"
    return (
        "Data access:\n"
        f"  Site URL: {snapshot.web_absolute_url or '(not resolved yet)'}\n"
        f"  Transport: {'proxy' if snapshot.using_proxy else 'direct'}\n"
        f"  Proxy URL: {snapshot.proxy_url or '-'}\n"
        f"  Native host: {'yes' if snapshot.is_native_host else 'no'}\n"
        f"  Last request: {last_fetch}\n"
        f"  Last error: {last_error}"
    )
