# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from taskboard.board.models import Task
from taskboard.board.store import TaskStore
from taskboard.cli.bootstrap import create_initial_state
from taskboard.core.state import AppState
from taskboard.data.client import QueryClient
from taskboard.data.context import DataAccessContext
from taskboard.data.resolver import EndpointResolver
from taskboard.data.transport import TransportSelector

from .fakes import FakeHost, RecordingNotifier, StaticLoader, make_task

SITE_PAGE = "https://contoso.sharepoint.com/sites/Board/SitePages/MyTasks.aspx"
SITE_URL = "https://contoso.sharepoint.com/sites/Board"
FALLBACK_URL = "https://fallback.sharepoint.com/sites/Default/"
PROXY_URL = "https://proxy.example.net/workflows/read"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the console.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        console_enabled=False,
        offline_mode=True,
        fallback_site_url=FALLBACK_URL,
        site_page_url=SITE_PAGE,
        api_root="_api/web",
        proxy_url=None,
        use_proxy=None,
        native_host_suffix="sharepoint.com",
        tasks_list="Tasks",
        sales_list="Sales",
        activity_list="ActivityLog",
        people_list="PeopleMap",
        default_top=500,
        assignee="Demo User",
        max_attachment_bytes=10 * 1024 * 1024,
        allowed_extensions=["pdf", "docx", "xlsx", "png", "txt", "zip"],
        note_history_cap=50,
        search_debounce_seconds=0.01,
    )


@pytest.fixture()
def store() -> TaskStore:
    return TaskStore(today=lambda: date(2026, 1, 10))


@pytest.fixture()
def six_tasks() -> list[Task]:
    """completed, in-progress x3 (two at >= 50%), at-risk, blocked."""
    return [
        make_task("T1", "completed", 100, title="Reporting standards", workstream="PMO Foundation"),
        make_task("T2", "in-progress", 45, title="SKU remediation", workstream="SKU Remediation"),
        make_task("T3", "in-progress", 50, title="Weekly cadence", workstream="PMO Operations"),
        make_task("T4", "in-progress", 80, title="Training program", workstream="Change Management"),
        make_task("T5", "at-risk", 20, title="CRM integration", workstream="Systems"),
        make_task("T6", "blocked", 10, title="Data governance", workstream="PMO Foundation"),
    ]


@pytest.fixture()
def make_client() -> Callable[..., tuple[QueryClient, DataAccessContext]]:
    """
    Build a QueryClient over httpx.MockTransport.

    Returns (client, context) so tests can inspect diagnostics state.
    """

    def _make(
        handler: Handler,
        *,
        page_url: str = SITE_PAGE,
        proxy_url: str | None = None,
        use_proxy: bool | None = None,
        fallback_url: str = FALLBACK_URL,
    ) -> tuple[QueryClient, DataAccessContext]:
        context = DataAccessContext(
            host=FakeHost(page_url=page_url),
            proxy_url=proxy_url,
            use_proxy=use_proxy,
        )
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = QueryClient(
            context,
            EndpointResolver(context, fallback_url),
            TransportSelector(context),
            http=http,
        )
        return client, context

    return _make


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: RecordingNotifier, six_tasks: list[Task]) -> AppState:
    """
    AppState wired by the real composition root, with a static task loader.
    """
    st = create_initial_state(settings=settings, notifier=notifier)
    st.loader = StaticLoader(six_tasks)
    return st
