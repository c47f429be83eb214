# src/taskboard/board/view.py

"""
View projection: Task + expand state -> display record.

Pure functions only; nothing here mutates the store. The rendering surface
calls project_board() after every store change and draws the result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .models import ALL_FILTER, Attachment, BoardStats, Note, Task, TaskStatus, format_file_size
from .store import TaskStore

STATUS_LABELS: dict[str, str] = {
    TaskStatus.NOT_STARTED: "Not Started",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.ON_TRACK: "On Track",
    TaskStatus.AT_RISK: "At Risk",
    TaskStatus.BLOCKED: "Blocked",
    TaskStatus.COMPLETED: "Completed",
}

# Statuses a user can pick on an expanded task.
STATUS_CHOICES: tuple[str, ...] = (
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
    TaskStatus.BLOCKED,
)

RING_RADIUS = 20
RING_CIRCUMFERENCE = 2 * math.pi * RING_RADIUS

RECENT_NOTES = 3

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True, slots=True)
class RingGeometry:
    dash_array: float
    dash_offset: float


@dataclass(frozen=True, slots=True)
class AttachmentView:
    name: str
    size_label: str


@dataclass(frozen=True, slots=True)
class TaskView:
    id: str
    title: str
    phase: str
    workstream: str
    owner: str
    status: str
    status_label: str
    due_date_label: str
    progress: int
    progress_label: str
    ring: RingGeometry
    recent_notes: tuple[Note, ...]
    attachments: tuple[AttachmentView, ...]
    expanded: bool

    @property
    def info_rows(self) -> tuple[tuple[str, str], ...]:
        return (
            ("Task ID", self.id),
            ("Phase", self.phase),
            ("Workstream", self.workstream),
            ("Due Date", self.due_date_label),
            ("Status", self.status_label),
        )


@dataclass(frozen=True, slots=True)
class BoardView:
    stats: BoardStats
    tasks: tuple[TaskView, ...]
    active_filter: str
    search: str
    empty_message: str | None


def format_status(status: str) -> str:
    """Human label; unmapped statuses pass through unchanged."""
    return STATUS_LABELS.get(status, status)


def _parse_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def format_date(value: Any, *, include_time: bool = False) -> str:
    """'Jan 16, 2026' (optionally ', 03:05 PM'); 'N/A' for missing or unparseable input."""
    d = _parse_date(value)
    if d is None:
        return "N/A"
    text = f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"
    if include_time:
        hour = d.hour % 12 or 12
        text += f", {hour:02d}:{d.minute:02d} {'PM' if d.hour >= 12 else 'AM'}"
    return text


def progress_ring(progress: int) -> RingGeometry:
    return RingGeometry(
        dash_array=RING_CIRCUMFERENCE,
        dash_offset=RING_CIRCUMFERENCE * (1 - progress / 100),
    )


def empty_state_message(active_filter: str) -> str:
    if active_filter == ALL_FILTER:
        return "No tasks assigned to you."
    return "No tasks match the current filter."


def _attachment_view(a: Attachment) -> AttachmentView:
    return AttachmentView(name=a.name, size_label=format_file_size(a.size))


def project_task(task: Task, expanded_id: str | None) -> TaskView:
    return TaskView(
        id=task.id,
        title=task.title,
        phase=task.phase,
        workstream=task.workstream,
        owner=task.owner,
        status=task.status,
        status_label=format_status(task.status),
        due_date_label=format_date(task.due_date),
        progress=task.progress,
        progress_label=f"{task.progress}%",
        ring=progress_ring(task.progress),
        recent_notes=tuple(task.notes[:RECENT_NOTES]),
        attachments=tuple(_attachment_view(a) for a in task.attachments),
        expanded=expanded_id is not None and task.id == expanded_id,
    )


def project_board(store: TaskStore, active_filter: str = ALL_FILTER, search: str = "") -> BoardView:
    expanded_id = store.expanded_id
    tasks = tuple(project_task(t, expanded_id) for t in store.query(active_filter, search))
    return BoardView(
        stats=store.stats(),
        tasks=tasks,
        active_filter=active_filter,
        search=search,
        empty_message=None if tasks else empty_state_message(active_filter),
    )


def initials(name: str) -> str:
    return "".join(part[0] for part in (name or "").split() if part).upper()
