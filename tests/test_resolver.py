# tests/test_resolver.py

from __future__ import annotations

import logging

import pytest

from taskboard.core.errors import ConfigurationError
from taskboard.data.context import DataAccessContext
from taskboard.data.resolver import (
    EndpointResolver,
    probe_location_path,
    probe_parent_context,
)

from .fakes import FakeHost

FALLBACK = "https://fallback.sharepoint.com/sites/Default/"


def _resolver(host: FakeHost, fallback: str = FALLBACK) -> tuple[EndpointResolver, DataAccessContext]:
    ctx = DataAccessContext(host=host)
    return EndpointResolver(ctx, fallback), ctx


def test_page_context_wins_over_location() -> None:
    host = FakeHost(
        context={"webAbsoluteUrl": "https://contoso.sharepoint.com/sites/FromContext"},
        page_url="https://contoso.sharepoint.com/sites/FromPath/SitePages/x.aspx",
    )
    resolver, ctx = _resolver(host)

    assert resolver.resolve() == "https://contoso.sharepoint.com/sites/FromContext"
    assert ctx.resolved_url == "https://contoso.sharepoint.com/sites/FromContext"


def test_location_path_probe_extracts_site_prefix() -> None:
    host = FakeHost(page_url="https://contoso.sharepoint.com/sites/Board/SitePages/MyTasks.aspx?x=1")
    assert probe_location_path(host) == "https://contoso.sharepoint.com/sites/Board"

    resolver, _ = _resolver(host)
    assert resolver.resolve() == "https://contoso.sharepoint.com/sites/Board"


def test_location_without_sites_segment_is_not_a_match() -> None:
    assert probe_location_path(FakeHost(page_url="https://example.github.io/board/index.html")) is None
    assert probe_location_path(FakeHost(page_url="")) is None


def test_parent_context_used_only_when_embedded() -> None:
    parent = {"webAbsoluteUrl": "https://contoso.sharepoint.com/sites/Parent"}

    assert probe_parent_context(FakeHost(parent=parent, embedded=False)) is None
    assert probe_parent_context(FakeHost(parent=parent, embedded=True)) == "https://contoso.sharepoint.com/sites/Parent"


def test_parent_access_denied_falls_through_to_fallback(caplog: pytest.LogCaptureFixture) -> None:
    host = FakeHost(embedded=True, parent_error=PermissionError("cross-origin"))
    resolver, _ = _resolver(host)

    with caplog.at_level(logging.DEBUG, logger="taskboard.data.resolver"):
        url = resolver.resolve()

    assert url == "https://fallback.sharepoint.com/sites/Default"


def test_fallback_warns_once_and_strips_trailing_slash(caplog: pytest.LogCaptureFixture) -> None:
    resolver, _ = _resolver(FakeHost())

    with caplog.at_level(logging.DEBUG, logger="taskboard.data.resolver"):
        first = resolver.resolve()
        second = resolver.resolve()

    assert first == second == "https://fallback.sharepoint.com/sites/Default"
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "fallback" in warnings[0].getMessage().lower()


def test_resolution_is_memoized_until_invalidated() -> None:
    host = FakeHost(context={"webAbsoluteUrl": "https://contoso.sharepoint.com/sites/A/"})
    resolver, ctx = _resolver(host)

    assert resolver.resolve() == "https://contoso.sharepoint.com/sites/A"
    resolver.resolve()
    assert host.context_calls == 1

    host.context = {"webAbsoluteUrl": "https://contoso.sharepoint.com/sites/B"}
    resolver.invalidate()
    assert ctx.resolved_url is None
    assert resolver.resolve() == "https://contoso.sharepoint.com/sites/B"
    assert host.context_calls == 2


def test_no_detection_and_no_fallback_is_a_configuration_error() -> None:
    resolver, _ = _resolver(FakeHost(), fallback="")
    with pytest.raises(ConfigurationError):
        resolver.resolve()


def test_build_url_joins_relative_and_passes_absolute() -> None:
    resolver, _ = _resolver(FakeHost(context={"webAbsoluteUrl": "https://contoso.sharepoint.com/sites/A"}))

    assert resolver.build_url("_api/web") == "https://contoso.sharepoint.com/sites/A/_api/web"
    assert resolver.build_url("/_api/web") == "https://contoso.sharepoint.com/sites/A/_api/web"
    assert resolver.build_url("https://other.example/x") == "https://other.example/x"
