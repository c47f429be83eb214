# tests/test_query_client.py

from __future__ import annotations

import asyncio
import json
from urllib.parse import unquote

import httpx
import pytest

from taskboard.core.errors import ConfigurationError, TransportError
from taskboard.data.presets import SALES_ORDER, TASK_ORDER, get_sales_data, get_tasks
from taskboard.data.transport import QueryDescriptor

from .conftest import PROXY_URL, SITE_URL

EXTERNAL_PAGE = "https://example.github.io/board/index.html"


@pytest.mark.asyncio
async def test_direct_collection_read_is_a_get_with_odata_query(make_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": [{"Id": 1, "Title": "A"}, {"Id": 2, "Title": "B"}]})

    client, ctx = make_client(handler)
    items = await client.fetch_collection(QueryDescriptor(list_name="Tasks", select="Id,Title"))

    assert [it["Id"] for it in items] == [1, 2]
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "GET"
    assert req.headers["accept"] == "application/json;odata=nometadata"
    assert unquote(str(req.url)).startswith(SITE_URL + "/_api/web/lists/getbytitle('Tasks')/items?")
    assert req.url.params["$select"] == "Id,Title"
    assert req.url.params["$top"] == "500"
    assert ctx.last_fetch is not None and ctx.last_fetch.url.startswith(SITE_URL)
    assert ctx.last_error is None


@pytest.mark.asyncio
async def test_direct_read_accepts_items_key_and_missing_key(make_client) -> None:
    bodies = iter([{"items": [{"Id": 9}]}, {"d": {"results": []}}])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=next(bodies))

    client, _ = make_client(handler)

    assert await client.fetch_collection(QueryDescriptor(list_name="Tasks")) == [{"Id": 9}]
    assert await client.fetch_collection(QueryDescriptor(list_name="Tasks")) == []


@pytest.mark.asyncio
async def test_non_success_status_raises_with_status_and_body(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    client, ctx = make_client(handler)

    with pytest.raises(TransportError) as ei:
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))

    assert "500" in str(ei.value)
    assert "boom" in str(ei.value)
    assert ei.value.status == 500
    assert ctx.last_error is not None
    assert "boom" in ctx.last_error.error


@pytest.mark.asyncio
async def test_direct_error_body_is_truncated(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="x" * 1000)

    client, _ = make_client(handler)

    with pytest.raises(TransportError) as ei:
        await client.sp_get("/_api/web")
    assert len(ei.value.body) == 300


@pytest.mark.asyncio
async def test_success_clears_previous_error(make_client) -> None:
    statuses = iter([503, 200])

    def handler(request: httpx.Request) -> httpx.Response:
        code = next(statuses)
        if code != 200:
            return httpx.Response(code, text="unavailable")
        return httpx.Response(200, json={"value": []})

    client, ctx = make_client(handler)

    with pytest.raises(TransportError):
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))
    assert ctx.last_error is not None

    await client.fetch_collection(QueryDescriptor(list_name="Tasks"))
    assert ctx.last_error is None


@pytest.mark.asyncio
async def test_unparseable_body_and_network_failure_raise_transport_error(make_client) -> None:
    def bad_json(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>login</html>")

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client, _ = make_client(bad_json)
    with pytest.raises(TransportError, match="unparseable"):
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))

    client, ctx = make_client(unreachable)
    with pytest.raises(TransportError) as ei:
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))
    assert ei.value.status is None
    assert ctx.last_error is not None


@pytest.mark.asyncio
async def test_fetch_one_direct_addresses_the_item(make_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"Id": 7, "Title": "Seven"})

    client, _ = make_client(handler)
    item = await client.fetch_one("Tasks", 7, select="Id,Title")

    assert item == {"Id": 7, "Title": "Seven"}
    assert "/items(7)" in unquote(seen[0].url.path)
    assert seen[0].url.params["$select"] == "Id,Title"
    assert "$top" not in seen[0].url.params


@pytest.mark.asyncio
async def test_proxy_mode_posts_fixed_shape_body(make_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"items": [{"Id": 1}]})

    client, _ = make_client(handler, page_url=EXTERNAL_PAGE, proxy_url=PROXY_URL)
    items = await client.fetch_collection(QueryDescriptor(list_name="Tasks", select="Id"))

    assert items == [{"Id": 1}]
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == PROXY_URL
    assert json.loads(req.content) == {
        "listName": "Tasks",
        "select": "Id",
        "filter": None,
        "top": 500,
        "orderby": None,
    }


@pytest.mark.asyncio
async def test_proxy_forced_without_url_fails_before_any_request(make_client) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json={})

    client, _ = make_client(handler, use_proxy=True)

    with pytest.raises(ConfigurationError):
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))
    assert calls == 0


@pytest.mark.asyncio
async def test_proxy_error_body_is_truncated_to_200(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="e" * 500)

    client, _ = make_client(handler, use_proxy=True, proxy_url=PROXY_URL)

    with pytest.raises(TransportError) as ei:
        await client.fetch_collection(QueryDescriptor(list_name="Tasks"))
    assert str(ei.value).startswith("Proxy error 502: ")
    assert len(ei.value.body) == 200


@pytest.mark.asyncio
async def test_proxy_fetch_one_filters_on_id(make_client) -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"items": []})

    client, _ = make_client(handler, use_proxy=True, proxy_url=PROXY_URL)

    with pytest.raises(TransportError) as ei:
        await client.fetch_one("Tasks", 42)
    assert ei.value.status == 404
    assert bodies[0]["filter"] == "Id eq 42"
    assert bodies[0]["top"] == 1


@pytest.mark.asyncio
async def test_concurrent_identical_reads_each_hit_the_network(make_client) -> None:
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0)
        return httpx.Response(200, json={"value": []})

    client, _ = make_client(handler)
    d = QueryDescriptor(list_name="Tasks")
    await asyncio.gather(client.fetch_collection(d), client.fetch_collection(d))

    assert calls == 2


@pytest.mark.asyncio
async def test_presets_fill_fields_and_order_but_caller_wins(make_client) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": []})

    client, _ = make_client(handler)
    await get_tasks(client, "Tasks")
    await get_sales_data(client, "Sales", orderby="Title asc", top=10)

    assert seen[0].url.params["$orderby"] == TASK_ORDER
    assert "PercentComplete" in seen[0].url.params["$select"]
    assert seen[1].url.params["$orderby"] == "Title asc"
    assert seen[1].url.params["$orderby"] != SALES_ORDER
    assert seen[1].url.params["$top"] == "10"


@pytest.mark.asyncio
async def test_status_snapshot_and_connection_report(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path)
        if path.endswith("/_api/web"):
            return httpx.Response(200, json={"Title": "Board Site"})
        if "getbytitle('Tasks')" in path:
            return httpx.Response(200, json={"Title": "Tasks", "ItemCount": 6, "LastItemModifiedDate": "2026-01-09T10:00:00Z"})
        return httpx.Response(404, text="not found")

    client, _ = make_client(handler)
    report = await client.test_connection("Tasks")

    assert report.ok
    assert report.site_url == SITE_URL
    assert report.web_info == {"Title": "Board Site"}
    assert report.tasks_list_info["ItemCount"] == 6

    freshness = await client.get_data_freshness("Tasks")
    assert freshness is not None and freshness.year == 2026

    snap = client.status()
    assert snap.web_absolute_url == SITE_URL
    assert snap.using_proxy is False
    assert snap.is_native_host is True
    assert snap.last_fetch is not None

    bad = await client.test_connection("Missing")
    assert not bad.ok
    assert "404" in bad.errors[0]
