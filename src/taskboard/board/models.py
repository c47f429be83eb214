# src/taskboard/board/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class TaskStatus(StrEnum):
    """
    Stored task status.

    Notes:
    - "on-track" is accepted from the source but the board never sets it; the
      on-track filter is computed from in-progress + progress (see is_computed_on_track).
    - Statuses outside this enum are kept verbatim on the Task and shown as-is.
    """

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    ON_TRACK = "on-track"
    AT_RISK = "at-risk"
    BLOCKED = "blocked"
    COMPLETED = "completed"


DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    "txt", "csv", "png", "jpg", "jpeg", "gif", "zip",
)

ALL_FILTER = "all"
ON_TRACK_FILTER = "on-track"
ON_TRACK_MIN_PROGRESS = 50

BOARD_FILTERS: tuple[str, ...] = (
    ALL_FILTER,
    ON_TRACK_FILTER,
    TaskStatus.NOT_STARTED.value,
    TaskStatus.IN_PROGRESS.value,
    TaskStatus.AT_RISK.value,
    TaskStatus.BLOCKED.value,
    TaskStatus.COMPLETED.value,
)


@dataclass(frozen=True, slots=True)
class Note:
    date: str  # YYYY-MM-DD
    text: str


@dataclass(frozen=True, slots=True)
class Attachment:
    name: str
    size: int
    type: str = ""

    @property
    def extension(self) -> str:
        if "." not in self.name:
            return ""
        return self.name.rsplit(".", 1)[-1].lower()


@dataclass(slots=True)
class Task:
    id: str
    title: str
    phase: str = ""
    workstream: str = ""
    owner: str = ""
    due_date: str | None = None
    status: str = TaskStatus.NOT_STARTED.value
    progress: int = 0

    # newest first
    notes: list[Note] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BoardStats:
    total: int
    on_track: int
    in_progress: int
    at_risk: int
    blocked: int


def is_computed_on_track(task: Task) -> bool:
    """What the on-track filter matches: in progress and at least half done."""
    return task.status == TaskStatus.IN_PROGRESS and task.progress >= ON_TRACK_MIN_PROGRESS


def counts_as_on_track(task: Task) -> bool:
    """What the on-track stat counts: the computed predicate OR a literal on-track status."""
    return task.status == TaskStatus.ON_TRACK or is_computed_on_track(task)


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    i = 0
    while size >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(size / (1024**i), 1)
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {units[i]}"
