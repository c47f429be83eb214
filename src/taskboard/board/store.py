# src/taskboard/board/store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import date
from typing import Optional

from .models import (
    ALL_FILTER,
    DEFAULT_ALLOWED_EXTENSIONS,
    ON_TRACK_FILTER,
    Attachment,
    BoardStats,
    Note,
    Task,
    TaskStatus,
    counts_as_on_track,
    format_file_size,
    is_computed_on_track,
)

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, Optional[str]], None]

DEFAULT_MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024
DEFAULT_NOTE_HISTORY_CAP = 50


class TaskStore:
    """
    In-memory task board store: the single source of truth for one session.

    - load() replaces the whole collection; tasks are never deleted otherwise.
    - Mutations referencing an unknown task id are silent no-ops.
    - Attachment validation never raises: a rejection reason string is returned.
    - stats() always covers the full collection, independent of any filter.
    - get(), all() and query() return the live Task objects, not copies. Edits
      made on them directly skip attachment validation and change notification;
      go through the store methods instead.

    Thread-safety:
    - every public method runs under one re-entrant lock around the whole store
    """

    def __init__(
        self,
        *,
        max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        note_history_cap: int = DEFAULT_NOTE_HISTORY_CAP,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._tasks: dict[str, Task] = {}
        self._expanded_id: str | None = None
        self._lock = threading.RLock()
        self._listeners: list[ChangeListener] = []

        self.max_attachment_bytes = int(max_attachment_bytes)
        self.allowed_extensions = frozenset(e.lower().lstrip(".") for e in allowed_extensions)
        self.note_history_cap = max(0, int(note_history_cap))
        self._today = today

    # ---- change notification ----

    def subscribe(self, listener: ChangeListener) -> None:
        """listener(kind, task_id) is called after every applied change."""
        self._listeners.append(listener)

    def _emit(self, kind: str, task_id: str | None = None) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind, task_id)
            except Exception:
                logger.exception("Store listener failed kind=%s task_id=%s", kind, task_id)

    # ---- read ----

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        """Live Task reference (not a copy), or None."""
        with self._lock:
            return self._tasks.get(task_id)

    def all(self) -> list[Task]:
        """New list of the live Task references, in load order."""
        with self._lock:
            return list(self._tasks.values())

    # ---- load ----

    def load(self, tasks: Iterable[Task]) -> None:
        """Replace the entire collection (load order is kept as display order)."""
        with self._lock:
            fresh: dict[str, Task] = {}
            for t in tasks:
                if t.id in fresh:
                    logger.warning("Duplicate task id in load: %s (keeping first)", t.id)
                    continue
                fresh[t.id] = t
            self._tasks = fresh
            if self._expanded_id not in self._tasks:
                self._expanded_id = None
            logger.info("TaskStore loaded total=%d", len(self._tasks))
        self._emit("load")

    # ---- mutations ----

    def set_status(self, task_id: str, new_status: str) -> None:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("set_status: unknown task_id=%s", task_id)
                return
            task.status = str(new_status)
            if task.status == TaskStatus.COMPLETED:
                task.progress = 100
        self._emit("status", task_id)

    def set_progress(self, task_id: str, value: int) -> None:
        """
        Store progress as given. Input is expected to be pre-clamped to 0..100
        by the caller (slider-style control); the store does not re-clamp.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("set_progress: unknown task_id=%s", task_id)
                return
            task.progress = int(value)
        self._emit("progress", task_id)

    def append_note(self, task_id: str, text: str) -> None:
        note_text = (text or "").strip()
        if not note_text:
            return
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("append_note: unknown task_id=%s", task_id)
                return
            task.notes.insert(0, Note(date=self._today().isoformat(), text=note_text))
            if self.note_history_cap and len(task.notes) > self.note_history_cap:
                del task.notes[self.note_history_cap :]
        self._emit("note", task_id)

    def validate_attachment(self, task: Task, meta: Attachment) -> str | None:
        """Return a user-facing rejection reason, or None when the attachment is acceptable."""
        if meta.size > self.max_attachment_bytes:
            return f'File "{meta.name}" exceeds {format_file_size(self.max_attachment_bytes)} limit'

        ext = meta.extension
        if ext not in self.allowed_extensions:
            if not ext:
                return f'File "{meta.name}" has no file extension'
            return f'File type ".{ext}" not allowed'

        if any(a.name == meta.name for a in task.attachments):
            return f'File "{meta.name}" already added'

        return None

    def add_attachment(self, task_id: str, meta: Attachment) -> str | None:
        """
        Add attachment metadata to a task.

        Returns None on success (or unknown task id), otherwise the rejection
        reason; a rejected add leaves the attachment set unchanged.
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                logger.debug("add_attachment: unknown task_id=%s", task_id)
                return None
            reason = self.validate_attachment(task, meta)
            if reason is not None:
                logger.info("Attachment rejected task_id=%s: %s", task_id, reason)
                return reason
            task.attachments.append(meta)
        self._emit("attachment", task_id)
        return None

    def remove_attachment(self, task_id: str, name: str) -> bool:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return False
            kept = [a for a in task.attachments if a.name != name]
            if len(kept) == len(task.attachments):
                return False
            task.attachments = kept
        self._emit("attachment", task_id)
        return True

    # ---- views ----

    def query(self, filter: str = ALL_FILTER, search: str = "") -> list[Task]:
        """
        Filtered + searched view, in load order. Items are live Task references.

        - "all" matches everything
        - "on-track" is computed: in-progress AND progress >= 50 (a literal on-track status does not match)
        - anything else matches stored status equality
        - search: case-insensitive substring over title, workstream and id; empty matches all
        """
        needle = (search or "").strip().lower()
        wanted = (filter or ALL_FILTER).strip().lower()

        def matches_filter(t: Task) -> bool:
            if wanted == ALL_FILTER:
                return True
            if wanted == ON_TRACK_FILTER:
                return is_computed_on_track(t)
            return t.status == wanted

        def matches_search(t: Task) -> bool:
            if not needle:
                return True
            return (
                needle in (t.title or "").lower()
                or needle in (t.workstream or "").lower()
                or needle in (t.id or "").lower()
            )

        with self._lock:
            return [t for t in self._tasks.values() if matches_filter(t) and matches_search(t)]

    @property
    def expanded_id(self) -> str | None:
        with self._lock:
            return self._expanded_id

    def is_expanded(self, task_id: str) -> bool:
        with self._lock:
            return self._expanded_id is not None and self._expanded_id == task_id

    def set_expanded(self, task_id: str | None) -> str | None:
        """
        At most one task is expanded. Expanding the already-expanded task collapses it;
        expanding another task collapses the previous one. None collapses everything.
        Unknown ids are ignored. Returns the expanded id after the call.
        """
        with self._lock:
            if task_id is None:
                self._expanded_id = None
            elif task_id not in self._tasks:
                logger.debug("set_expanded: unknown task_id=%s", task_id)
                return self._expanded_id
            elif self._expanded_id == task_id:
                self._expanded_id = None
            else:
                self._expanded_id = task_id
            current = self._expanded_id
        self._emit("expand", current)
        return current

    def stats(self) -> BoardStats:
        with self._lock:
            tasks = list(self._tasks.values())
        return BoardStats(
            total=len(tasks),
            on_track=sum(1 for t in tasks if counts_as_on_track(t)),
            in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            at_risk=sum(1 for t in tasks if t.status == TaskStatus.AT_RISK),
            blocked=sum(1 for t in tasks if t.status == TaskStatus.BLOCKED),
        )
