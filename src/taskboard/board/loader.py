# src/taskboard/board/loader.py

from __future__ import annotations

import logging

from ..data.client import QueryClient
from ..data.presets import get_tasks
from .mapping import map_records
from .models import Attachment, Note, Task, TaskStatus

logger = logging.getLogger(__name__)


class RemoteTaskLoader:
    """
    Reads the tasks list once and maps it into Task entities.

    If an assignee is configured, only tasks owned by that person are kept
    (case-insensitive match on the owner's display name).
    """

    def __init__(self, client: QueryClient, list_name: str, *, assignee: str = "") -> None:
        self._client = client
        self._list_name = list_name
        self._assignee = (assignee or "").strip().lower()

    async def load_tasks(self) -> list[Task]:
        records = await get_tasks(self._client, self._list_name)
        tasks = map_records(records)
        if self._assignee:
            tasks = [t for t in tasks if t.owner.strip().lower() == self._assignee]
        logger.info("Loaded %d tasks from %s (assignee=%s)", len(tasks), self._list_name, self._assignee or "*")
        return tasks


class OfflineTaskLoader:
    """
    Offline deterministic loader used for demos when no site is reachable.

    Returns a fresh copy of a small sample board every time.
    """

    def __init__(self, *, owner: str = "Demo User") -> None:
        self._owner = owner

    async def load_tasks(self) -> list[Task]:
        o = self._owner
        return [
            Task(
                id="T003",
                title="Reporting Standards & Dashboard Automation",
                phase="Phase 1: Stabilization",
                workstream="PMO Foundation",
                owner=o,
                due_date="2025-12-19",
                status=TaskStatus.COMPLETED.value,
                progress=100,
                notes=[
                    Note("2025-12-19", "Dashboard deployed. KPIs updating hourly."),
                    Note("2025-12-15", "Reporting standards document approved."),
                ],
                attachments=[Attachment("Reporting_Standards_v2.pdf", 245_760, "application/pdf")],
            ),
            Task(
                id="T006",
                title="SKU Remediation - Cataloging & Analysis",
                phase="Phase 1: Stabilization",
                workstream="SKU Remediation",
                owner=o,
                due_date="2026-01-16",
                status=TaskStatus.IN_PROGRESS.value,
                progress=45,
                notes=[Note("2026-01-06", "Identified 450 SKUs requiring review.")],
            ),
            Task(
                id="T011",
                title="Training Program Development",
                phase="Phase 2: Foundation",
                workstream="Change Management",
                owner=o,
                due_date="2026-02-06",
                status=TaskStatus.IN_PROGRESS.value,
                progress=30,
            ),
            Task(
                id="T012",
                title="CRM/System Integration Planning",
                phase="Phase 2: Foundation",
                workstream="Systems",
                owner=o,
                due_date="2026-02-06",
                status=TaskStatus.AT_RISK.value,
                progress=20,
                notes=[Note("2026-01-07", "Need IT resource assignment.")],
            ),
            Task(
                id="T015",
                title="Weekly PMO Cadence - First Sync Setup",
                phase="Phase 1: Stabilization",
                workstream="PMO Operations",
                owner=o,
                due_date="2026-01-15",
                status=TaskStatus.IN_PROGRESS.value,
                progress=75,
            ),
            Task(
                id="T020",
                title="Data Governance Charter",
                phase="Phase 2: Foundation",
                workstream="PMO Foundation",
                owner=o,
                due_date="2026-02-20",
                status=TaskStatus.BLOCKED.value,
                progress=10,
            ),
        ]
