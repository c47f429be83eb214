# src/taskboard/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..board.models import ALL_FILTER
from ..board.store import TaskStore
from ..data.client import QueryClient
from .ports import Notifier, TaskLoader


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    client: QueryClient
    store: TaskStore
    loader: TaskLoader
    notifier: Notifier

    # Board view state (the expanded task lives in the store).
    active_filter: str = ALL_FILTER
    search_term: str = ""

    # Set by the rendering surface: re-render after the search input goes quiet.
    schedule_render: Callable[[], None] | None = None
