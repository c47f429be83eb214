# src/taskboard/data/presets.py

"""
Named read shapes for the canonical lists.

These are field/sort presets layered on QueryClient.fetch_collection and carry
no behaviour of their own: caller-supplied select/orderby always win.
"""

from __future__ import annotations

from typing import Any

from .client import QueryClient
from .transport import DEFAULT_TOP, QueryDescriptor

TASK_FIELDS = (
    "Id,Title,TaskID,Phase,Workstream,Status,PercentComplete,Priority,DueDate,Owner,"
    "Modified,TaskType,Description,IsBlocked,BlockerReason"
)
TASK_ORDER = "DueDate asc"

SALES_FIELDS = (
    "Id,Title,SalesDate,DailySalesActual,DailyBudgetTarget,DailyVariance,DailyVariancePercent,"
    "VolumeLevel,MTDSalesActual,MTDBudgetTarget,YTDSalesActual,YTDBudgetTarget,ImportTimestamp,DataQuality"
)
SALES_ORDER = "SalesDate desc"


def tasks_query(
    list_name: str,
    *,
    select: str | None = None,
    expand: str | None = None,
    filter: str | None = None,
    orderby: str | None = None,
    top: int = DEFAULT_TOP,
) -> QueryDescriptor:
    return QueryDescriptor(
        list_name=list_name, select=select, expand=expand, filter=filter, orderby=orderby, top=top
    ).with_defaults(select=TASK_FIELDS, orderby=TASK_ORDER)


def sales_query(
    list_name: str,
    *,
    select: str | None = None,
    expand: str | None = None,
    filter: str | None = None,
    orderby: str | None = None,
    top: int = DEFAULT_TOP,
) -> QueryDescriptor:
    return QueryDescriptor(
        list_name=list_name, select=select, expand=expand, filter=filter, orderby=orderby, top=top
    ).with_defaults(select=SALES_FIELDS, orderby=SALES_ORDER)


async def get_tasks(client: QueryClient, list_name: str, **options: Any) -> list[dict[str, Any]]:
    return await client.fetch_collection(tasks_query(list_name, **options))


async def get_sales_data(client: QueryClient, list_name: str, **options: Any) -> list[dict[str, Any]]:
    return await client.fetch_collection(sales_query(list_name, **options))
