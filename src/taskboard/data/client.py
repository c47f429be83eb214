# src/taskboard/data/client.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

import httpx

from ..core.errors import TaskboardError, TransportError
from .context import DataAccessContext, StatusSnapshot
from .resolver import EndpointResolver
from .transport import (
    DEFAULT_TOP,
    QueryDescriptor,
    TransportSelector,
    build_direct_query,
    build_item_query,
    build_list_root,
    build_list_path,
    build_proxy_payload,
)

logger = logging.getLogger(__name__)

DIRECT_HEADERS = {
    "Accept": "application/json;odata=nometadata",
    "Content-Type": "application/json",
}
PROXY_HEADERS = {"Content-Type": "application/json"}

DIRECT_BODY_LIMIT = 300
PROXY_BODY_LIMIT = 200

# Direct responses put items under "value", the proxy under "items"; each accepts the other.
_DIRECT_ITEM_KEYS = ("value", "items")
_PROXY_ITEM_KEYS = ("items", "value")


def _extract_items(data: Any, keys: tuple[str, ...]) -> list[dict[str, Any]]:
    if not isinstance(data, dict):
        return []
    for key in keys:
        items = data.get(key)
        if items is None:
            continue
        if not isinstance(items, list):
            logger.warning("Response key %r is not a list (%s); treating as empty.", key, type(items).__name__)
            return []
        return [it for it in items if isinstance(it, dict)]
    return []


def _parse_datetime(raw: Any) -> datetime | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError:
        return None


@dataclass(slots=True)
class ConnectionReport:
    site_url: str | None = None
    web_info: dict[str, Any] | None = None
    tasks_list_info: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class QueryClient:
    """
    Read-only access to the list service.

    - One network call per invocation: no retry, no de-duplication, no timeout of its own.
    - Transport (direct vs proxy) is chosen per call by TransportSelector.
    - Every call records the request address/time on the shared context; failures record the error.

    Only GET requests are sent to the site. The single POST goes to the proxy and is itself a read.
    """

    def __init__(
        self,
        context: DataAccessContext,
        resolver: EndpointResolver,
        selector: TransportSelector,
        *,
        api_root: str = "_api/web",
        default_top: int = DEFAULT_TOP,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._context = context
        self._resolver = resolver
        self._selector = selector
        self._api_root = api_root.strip("/")
        self._default_top = default_top
        self._owns_http = http is None
        # timeout=None: callers that need a deadline impose it externally.
        self._http = http if http is not None else httpx.AsyncClient(timeout=None, follow_redirects=True)

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "QueryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ---- low-level ----

    def _fail(self, err: TransportError) -> TransportError:
        self._context.record_error(err.url, str(err))
        logger.error("REST FAIL: %s %s (%s)", err.method, err.url, err)
        return err

    async def sp_get(self, path_or_url: str) -> Any:
        """GET a site-relative path (or absolute URL) and return the parsed JSON body."""
        url = self._resolver.build_url(path_or_url)

        logger.debug("GET %s", url)
        self._context.record_fetch(url)

        try:
            resp = await self._http.get(url, headers=DIRECT_HEADERS)
        except httpx.HTTPError as e:
            raise self._fail(
                TransportError(f"REST GET {url} failed: {e.__class__.__name__}: {e}", method="GET", url=url)
            ) from e

        if not resp.is_success:
            detail = resp.text[:DIRECT_BODY_LIMIT]
            raise self._fail(
                TransportError(
                    f"REST GET {url} -> {resp.status_code} {resp.reason_phrase}: {detail}",
                    method="GET",
                    url=url,
                    status=resp.status_code,
                    body=detail,
                )
            )

        try:
            data = resp.json()
        except ValueError as e:
            detail = resp.text[:DIRECT_BODY_LIMIT]
            raise self._fail(
                TransportError(
                    f"REST GET {url} -> {resp.status_code}: unparseable body: {detail}",
                    method="GET",
                    url=url,
                    status=resp.status_code,
                    body=detail,
                )
            ) from e

        count = len(data["value"]) if isinstance(data, dict) and isinstance(data.get("value"), list) else "N/A"
        logger.info("REST PASS: %s items from %s", count, url)
        self._context.clear_error()
        return data

    async def _call_proxy(self, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        proxy_url = self._selector.require_proxy_url()
        payload = build_proxy_payload(descriptor)

        logger.debug("Calling proxy for %s: %s", descriptor.list_name, payload)
        self._context.record_fetch(proxy_url)

        try:
            resp = await self._http.post(proxy_url, json=payload, headers=PROXY_HEADERS)
        except httpx.HTTPError as e:
            raise self._fail(
                TransportError(
                    f"Proxy POST {proxy_url} failed: {e.__class__.__name__}: {e}", method="POST", url=proxy_url
                )
            ) from e

        if not resp.is_success:
            detail = resp.text[:PROXY_BODY_LIMIT]
            raise self._fail(
                TransportError(
                    f"Proxy error {resp.status_code}: {detail}",
                    method="POST",
                    url=proxy_url,
                    status=resp.status_code,
                    body=detail,
                )
            )

        try:
            data = resp.json()
        except ValueError as e:
            detail = resp.text[:PROXY_BODY_LIMIT]
            raise self._fail(
                TransportError(
                    f"Proxy error {resp.status_code}: unparseable body: {detail}",
                    method="POST",
                    url=proxy_url,
                    status=resp.status_code,
                    body=detail,
                )
            ) from e

        items = _extract_items(data, _PROXY_ITEM_KEYS)
        logger.info("Proxy returned %d items from %s", len(items), descriptor.list_name)
        return items

    # ---- collections / records ----

    async def fetch_collection(self, descriptor: QueryDescriptor) -> list[dict[str, Any]]:
        if not descriptor.top:
            descriptor = replace(descriptor, top=self._default_top)

        if self._selector.should_use_proxy():
            return await self._call_proxy(descriptor)

        path = build_list_path(self._api_root, descriptor.list_name) + "?" + build_direct_query(descriptor)
        logger.info("Fetching list: %s", descriptor.list_name)

        data = await self.sp_get(path)
        items = _extract_items(data, _DIRECT_ITEM_KEYS)
        logger.info("Loaded %d items from %s", len(items), descriptor.list_name)
        return items

    async def fetch_one(
        self,
        list_name: str,
        item_id: int | str,
        *,
        select: str | None = None,
        expand: str | None = None,
    ) -> dict[str, Any]:
        """
        Read one list item by id.

        In proxy mode the proxy contract has no item endpoint, so the read is
        expressed as a collection query filtered on Id with top=1.
        """
        if self._selector.should_use_proxy():
            items = await self._call_proxy(
                QueryDescriptor(list_name=list_name, select=select, filter=f"Id eq {item_id}", top=1)
            )
            if not items:
                url = self._selector.require_proxy_url()
                raise self._fail(
                    TransportError(
                        f"Proxy returned no item {item_id} from {list_name}",
                        method="POST",
                        url=url,
                        status=404,
                    )
                )
            return items[0]

        path = build_list_path(self._api_root, list_name, item_id)
        query = build_item_query(select=select, expand=expand)
        if query:
            path += "?" + query

        data = await self.sp_get(path)
        if not isinstance(data, dict):
            url = self._resolver.build_url(path)
            raise self._fail(
                TransportError(f"REST GET {url}: expected an object body", method="GET", url=url)
            )
        return data

    async def get_list_info(self, list_name: str) -> dict[str, Any]:
        path = build_list_root(self._api_root, list_name) + "?$select=Title,ItemCount,LastItemModifiedDate,Description"
        data = await self.sp_get(path)
        return data if isinstance(data, dict) else {}

    async def get_web_info(self) -> dict[str, Any]:
        data = await self.sp_get(f"/{self._api_root}?$select=Title,Url,Description,Created")
        return data if isinstance(data, dict) else {}

    async def get_data_freshness(self, list_name: str) -> datetime | None:
        info = await self.get_list_info(list_name)
        return _parse_datetime(info.get("LastItemModifiedDate"))

    async def test_connection(self, tasks_list: str) -> ConnectionReport:
        """Resolve the site, read web info and the tasks list info. Errors are collected, not raised."""
        report = ConnectionReport()
        try:
            report.site_url = self._resolver.resolve()
            report.web_info = await self.get_web_info()
            report.tasks_list_info = await self.get_list_info(tasks_list)
        except TaskboardError as e:
            report.errors.append(str(e))
        return report

    # ---- diagnostics ----

    def set_proxy_url(self, url: str | None) -> None:
        self._selector.set_proxy_url(url)

    def status(self) -> StatusSnapshot:
        ctx = self._context
        return StatusSnapshot(
            web_absolute_url=ctx.resolved_url,
            last_fetch=ctx.last_fetch,
            last_error=ctx.last_error,
            using_proxy=self._selector.should_use_proxy(),
            is_native_host=ctx.is_native_host,
            proxy_url=ctx.proxy_url,
        )
