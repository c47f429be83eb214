# src/taskboard/data/transport.py

"""
Transport selection and request building.

Two mutually exclusive ways to read a list:
- direct: GET against the site's REST endpoint with an OData query string,
- proxy:  POST a fixed-shape JSON body to a configured proxy address.

Everything here is pure except TransportSelector, which reads the current
configuration from the shared DataAccessContext.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote

from ..core.errors import ConfigurationError
from .context import DataAccessContext

logger = logging.getLogger(__name__)

DEFAULT_TOP = 500

# encodeURIComponent-compatible safe set.
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True, slots=True)
class QueryDescriptor:
    """
    One remote read.

    select/expand are comma-separated field lists, as the list service expects them.
    Unset fields are None and never reach the wire as empty parameters.
    """

    list_name: str
    select: str | None = None
    expand: str | None = None
    filter: str | None = None
    orderby: str | None = None
    top: int = DEFAULT_TOP

    def with_defaults(self, *, select: str | None = None, orderby: str | None = None) -> "QueryDescriptor":
        """Fill select/orderby only where the caller left them unset."""
        return replace(
            self,
            select=self.select or select,
            orderby=self.orderby or orderby,
        )


def encode_component(value: Any) -> str:
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def build_direct_query(descriptor: QueryDescriptor) -> str:
    """OData query string (without the leading '?'). $top is always present."""
    parts: list[str] = []

    if descriptor.select:
        parts.append("$select=" + encode_component(descriptor.select))
    if descriptor.expand:
        parts.append("$expand=" + encode_component(descriptor.expand))
    if descriptor.filter:
        parts.append("$filter=" + encode_component(descriptor.filter))

    parts.append("$top=" + encode_component(descriptor.top or DEFAULT_TOP))

    if descriptor.orderby:
        parts.append("$orderby=" + encode_component(descriptor.orderby))

    return "&".join(parts)


def build_item_query(*, select: str | None = None, expand: str | None = None) -> str:
    parts: list[str] = []
    if select:
        parts.append("$select=" + encode_component(select))
    if expand:
        parts.append("$expand=" + encode_component(expand))
    return "&".join(parts)


def build_list_root(api_root: str, list_name: str) -> str:
    """
    /<api_root>/lists/getbytitle('<name>')

    Single quotes inside the title are doubled (OData string literal) before encoding.
    """
    title = encode_component(list_name.replace("'", "''"))
    return f"/{api_root.strip('/')}/lists/getbytitle('{title}')"


def build_list_path(api_root: str, list_name: str, item_id: int | str | None = None) -> str:
    """Items path of a list, optionally addressing one item: .../items(<id>)"""
    path = build_list_root(api_root, list_name) + "/items"
    if item_id is not None:
        path += f"({encode_component(item_id)})"
    return path


def build_proxy_payload(descriptor: QueryDescriptor) -> dict[str, Any]:
    """Fixed-shape body: every key is present, unset optional fields are null."""
    return {
        "listName": descriptor.list_name,
        "select": descriptor.select or None,
        "filter": descriptor.filter or None,
        "top": descriptor.top or DEFAULT_TOP,
        "orderby": descriptor.orderby or None,
    }


def should_use_proxy(*, override: bool | None, proxy_url: str | None, native_host: bool) -> bool:
    """
    Explicit override wins outright. Otherwise the proxy is used only when the
    board is hosted outside the native site AND a proxy address is configured.
    """
    if override is True:
        return True
    if override is False:
        return False
    return (not native_host) and bool(proxy_url)


class TransportSelector:
    def __init__(self, context: DataAccessContext) -> None:
        self._context = context

    def should_use_proxy(self) -> bool:
        use = should_use_proxy(
            override=self._context.use_proxy,
            proxy_url=self._context.proxy_url,
            native_host=self._context.is_native_host,
        )
        if use and self._context.use_proxy is None:
            logger.debug("External hosting detected - using proxy")
        return use

    def require_proxy_url(self) -> str:
        url = (self._context.proxy_url or "").strip()
        if not url:
            raise ConfigurationError("Proxy URL not configured. Set TASKBOARD_PROXY_URL or call set_proxy_url().")
        return url

    def set_proxy_url(self, url: str | None) -> None:
        self._context.proxy_url = (url or "").strip() or None
        logger.info("Proxy URL %s", "configured" if self._context.proxy_url else "cleared")
