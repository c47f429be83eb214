# src/taskboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the one DataAccessContext and hands it to resolver/selector/client,
- wires the task store and the task loader into AppState.
"""

from __future__ import annotations

import logging

import httpx

from ..board.loader import OfflineTaskLoader, RemoteTaskLoader
from ..board.store import TaskStore
from ..config import get_settings
from ..core.ports import Notifier, TaskLoader
from ..core.state import AppState
from ..data.client import QueryClient
from ..data.context import DataAccessContext, StaticHost
from ..data.resolver import EndpointResolver
from ..data.transport import TransportSelector

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def build_query_client(settings, *, http: httpx.AsyncClient | None = None) -> QueryClient:
    context = DataAccessContext(
        host=StaticHost(page_url=settings.site_page_url),
        proxy_url=settings.proxy_url,
        use_proxy=settings.use_proxy,
        native_host_suffix=settings.native_host_suffix,
    )
    resolver = EndpointResolver(context, settings.fallback_site_url)
    selector = TransportSelector(context)
    return QueryClient(
        context,
        resolver,
        selector,
        api_root=settings.api_root,
        default_top=settings.default_top,
        http=http,
    )


def build_task_store(settings) -> TaskStore:
    return TaskStore(
        max_attachment_bytes=settings.max_attachment_bytes,
        allowed_extensions=settings.allowed_extensions,
        note_history_cap=settings.note_history_cap,
    )


def create_initial_state(*, notifier: Notifier, settings=None, http: httpx.AsyncClient | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    client = build_query_client(settings, http=http)

    loader: TaskLoader
    if settings.offline_mode:
        # Demos / local runs without a reachable site.
        loader = OfflineTaskLoader(owner=settings.assignee or "Demo User")
    else:
        loader = RemoteTaskLoader(client, settings.tasks_list, assignee=settings.assignee)

    return AppState(
        settings=settings,
        client=client,
        store=build_task_store(settings),
        loader=loader,
        notifier=notifier,
    )
