# src/taskboard/data/resolver.py

"""
Site address resolution.

The base address is found by an ordered list of probes; the first probe that
returns a value wins. If none does, the configured fallback is used and a
warning is logged. The result is cached on the DataAccessContext until
invalidate() is called.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import Optional
from urllib.parse import urlsplit

from ..core.errors import ConfigurationError
from ..core.ports import HostEnvironment
from .context import DataAccessContext

logger = logging.getLogger(__name__)

Probe = Callable[[HostEnvironment], Optional[str]]

_SITE_PATH_RE = re.compile(r"^(/sites/[^/]+)", re.IGNORECASE)
_CONTEXT_URL_KEY = "webAbsoluteUrl"


def _url_from_context(ctx) -> str | None:
    if not ctx:
        return None
    url = ctx.get(_CONTEXT_URL_KEY)
    if isinstance(url, str) and url.strip():
        return url.strip()
    return None


def probe_page_context(host: HostEnvironment) -> str | None:
    return _url_from_context(host.page_context())


def probe_location_path(host: HostEnvironment) -> str | None:
    location = host.location()
    if not location:
        return None
    try:
        parts = urlsplit(location)
    except ValueError:
        return None
    m = _SITE_PATH_RE.match(parts.path or "")
    if not m or not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}{m.group(1)}"


def probe_parent_context(host: HostEnvironment) -> str | None:
    if not host.is_embedded():
        return None
    try:
        return _url_from_context(host.parent_context())
    except Exception:
        # Cross-origin parent: access denied is the expected outcome.
        logger.debug("Parent frame context not accessible.", exc_info=True)
        return None


DEFAULT_PROBES: tuple[tuple[str, Probe], ...] = (
    ("page_context", probe_page_context),
    ("pathname", probe_location_path),
    ("parent_context", probe_parent_context),
)


class EndpointResolver:
    def __init__(
        self,
        context: DataAccessContext,
        fallback_url: str,
        *,
        probes: Sequence[tuple[str, Probe]] = DEFAULT_PROBES,
    ) -> None:
        self._context = context
        self._fallback_url = (fallback_url or "").strip()
        self._probes = tuple(probes)

    def resolve(self) -> str:
        """Return the site base address (computed once, then cached)."""
        cached = self._context.resolved_url
        if cached:
            return cached

        url: str | None = None
        method = "unknown"

        for name, probe in self._probes:
            url = probe(self._context.host)
            if url:
                method = name
                break

        if not url:
            if not self._fallback_url:
                raise ConfigurationError(
                    "Site address could not be detected and no fallback is configured. "
                    "Set TASKBOARD_FALLBACK_SITE_URL."
                )
            url = self._fallback_url
            method = "fallback"
            logger.warning("Using fallback site URL - detection failed")

        url = url.removesuffix("/")

        self._context.resolved_url = url
        logger.info("Site URL detected via %s: %s", method, url)
        return url

    def invalidate(self) -> None:
        self._context.resolved_url = None

    def build_url(self, path: str) -> str:
        """Absolute addresses pass through; relative paths are joined to the site."""
        if path.startswith("http"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.resolve() + path
