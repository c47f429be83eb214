# src/taskboard/board/mapping.py

"""
Boundary between raw list records and Task entities.

Remote payloads are any-shaped JSON objects. RawTaskRecord names the fields
the tasks preset selects; map_record() is the only place that reads them, so
untyped remote values never reach TaskStore.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, TypedDict

from .models import Task, TaskStatus

logger = logging.getLogger(__name__)


class RawTaskRecord(TypedDict, total=False):
    Id: int
    Title: str
    TaskID: str
    Phase: str
    Workstream: str
    Status: str
    PercentComplete: float | int | str
    Priority: str
    DueDate: str
    Owner: str | dict[str, Any]
    Modified: str
    TaskType: str
    Description: str
    IsBlocked: bool
    BlockerReason: str


_STATUS_ALIASES = {
    "notstarted": TaskStatus.NOT_STARTED,
    "inprogress": TaskStatus.IN_PROGRESS,
    "ontrack": TaskStatus.ON_TRACK,
    "atrisk": TaskStatus.AT_RISK,
    "blocked": TaskStatus.BLOCKED,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_status(raw: Any) -> str:
    """'In Progress' / 'in_progress' / 'in-progress' -> 'in-progress'. Unknown values are kept (slugged)."""
    text = _text(raw)
    if not text:
        return TaskStatus.NOT_STARTED.value
    key = "".join(ch for ch in text.lower() if ch.isalnum())
    status = _STATUS_ALIASES.get(key)
    if status is not None:
        return status.value
    return "-".join(text.lower().replace("_", " ").split())


def normalize_progress(raw: Any) -> int:
    """
    PercentComplete is a 0..1 fraction on the list service; JSON sends 100% as
    the integer 1, so any numeric value in 0..1 is scaled. Text ("60%", "60")
    is read as 0..100. Result is clamped to 0..100; unparseable values become 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        value = float(str(raw).strip().rstrip("%"))
    except ValueError:
        return 0
    if isinstance(raw, (int, float)) and 0.0 <= value <= 1.0:
        value *= 100
    return max(0, min(100, int(round(value))))


def _owner_name(raw: Any) -> str:
    if isinstance(raw, Mapping):
        return _text(raw.get("Title") or raw.get("EMail") or raw.get("Name"))
    return _text(raw)


def _due_date(raw: Any) -> str | None:
    text = _text(raw)
    if not text:
        return None
    # "2026-01-16T08:00:00Z" -> "2026-01-16"
    return text.split("T", 1)[0]


def map_record(raw: Mapping[str, Any]) -> Task | None:
    """Map one raw list item to a Task. Returns None for records without any identifier."""
    task_id = _text(raw.get("TaskID")) or _text(raw.get("Id"))
    if not task_id:
        return None

    status = normalize_status(raw.get("Status"))
    if raw.get("IsBlocked") is True and status != TaskStatus.COMPLETED:
        status = TaskStatus.BLOCKED.value

    return Task(
        id=task_id,
        title=_text(raw.get("Title")),
        phase=_text(raw.get("Phase")),
        workstream=_text(raw.get("Workstream")),
        owner=_owner_name(raw.get("Owner")),
        due_date=_due_date(raw.get("DueDate")),
        status=status,
        progress=normalize_progress(raw.get("PercentComplete")),
    )


def map_records(records: Iterable[Mapping[str, Any]]) -> list[Task]:
    out: list[Task] = []
    skipped = 0
    for raw in records:
        task = map_record(raw)
        if task is None:
            skipped += 1
            continue
        out.append(task)
    if skipped:
        logger.warning("Skipped %d list records without an identifier.", skipped)
    return out
