# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the hosting environment, the task source and the rendering surface
swappable and makes testing easier.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Protocol

from ..board.models import Task


class HostEnvironment(Protocol):
    """
    What the endpoint resolver may learn from the environment the board runs in.

    - page_context(): host-provided context object (e.g. {"webAbsoluteUrl": ...}) or None
    - location(): address of the current document ("" if unknown)
    - is_embedded(): True when running inside a parent frame
    - parent_context(): the parent frame's context object; MAY raise when access is denied
    """

    def page_context(self) -> Mapping[str, Any] | None: ...
    def location(self) -> str: ...
    def is_embedded(self) -> bool: ...
    def parent_context(self) -> Mapping[str, Any] | None: ...


class TaskLoader(Protocol):
    """Produces already-mapped Task entities for TaskStore.load()."""

    async def load_tasks(self) -> list[Task]: ...


class NotificationLevel(StrEnum):
    INFO = "info"
    ERROR = "error"
    CONFIG = "config"  # setup defect, not transient unavailability


class Notifier(Protocol):
    """Rendering-surface side: how transient notifications reach the user."""

    def notify(self, message: str, *, level: NotificationLevel = NotificationLevel.INFO) -> None: ...
