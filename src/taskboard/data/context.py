# src/taskboard/data/context.py

"""
Explicit data-access context.

One instance is constructed at startup and passed by reference to the
resolver, the transport selector and the query client. It holds:
- the hosting environment and transport configuration,
- the resolved site address cache,
- the last request / last error records (diagnostics only).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlsplit

from ..core.ports import HostEnvironment


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class FetchRecord:
    url: str
    time: datetime


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    url: str
    error: str
    time: datetime


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Read-only diagnostics view. Never used for control flow."""

    web_absolute_url: str | None
    last_fetch: FetchRecord | None
    last_error: ErrorRecord | None
    using_proxy: bool
    is_native_host: bool
    proxy_url: str | None


@dataclass(slots=True)
class StaticHost:
    """
    HostEnvironment for processes that are not running inside a browser page.

    The "document location" comes from configuration; there is no page or
    parent-frame context unless one is passed in explicitly.
    """

    page_url: str = ""
    context: Mapping[str, Any] | None = None
    parent: Mapping[str, Any] | None = None
    embedded: bool = False

    def page_context(self) -> Mapping[str, Any] | None:
        return self.context

    def location(self) -> str:
        return self.page_url

    def is_embedded(self) -> bool:
        return self.embedded

    def parent_context(self) -> Mapping[str, Any] | None:
        return self.parent


@dataclass(slots=True)
class DataAccessContext:
    host: HostEnvironment
    proxy_url: str | None = None
    use_proxy: bool | None = None  # None = auto-detect
    native_host_suffix: str = "sharepoint.com"

    resolved_url: str | None = None
    last_fetch: FetchRecord | None = None
    last_error: ErrorRecord | None = None

    clock: Any = field(default=_utcnow, repr=False)

    @property
    def hostname(self) -> str:
        try:
            return (urlsplit(self.host.location()).hostname or "").lower()
        except ValueError:
            return ""

    @property
    def is_native_host(self) -> bool:
        suffix = (self.native_host_suffix or "").lower()
        return bool(suffix) and suffix in self.hostname

    def record_fetch(self, url: str) -> None:
        self.last_fetch = FetchRecord(url=url, time=self.clock())

    def record_error(self, url: str, message: str) -> None:
        self.last_error = ErrorRecord(url=url, error=message, time=self.clock())

    def clear_error(self) -> None:
        self.last_error = None
