"""
Small select() helpers shared by the services.
"""
from typing import Optional, List, Tuple, TypeVar
from uuid import UUID
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from sqlalchemy.orm import DeclarativeBase

# Type variable for SQLAlchemy models
ModelType = TypeVar('ModelType', bound=DeclarativeBase)


async def get_paginated_results(
    db: AsyncSession,
    query,
    skip: int = 0,
    limit: int = 100,
    order_by=None,
) -> Tuple[List, int]:
    """Run `query` with offset/limit; returns (rows, total rows before paging)."""
    count_query = select(func.count()).select_from(query.subquery())
    count_result = await db.execute(count_query)
    total = count_result.scalar() or 0

    if order_by is not None:
        if isinstance(order_by, (list, tuple)):
            query = query.order_by(*order_by)
        else:
            query = query.order_by(order_by)

    result = await db.execute(query.offset(skip).limit(limit))
    items = result.scalars().all()

    return list(items), total


def filter_by_status(
    query,
    model: type[ModelType],
    status: any,
    status_column_name: str = "status",
) -> type:
    """Add status filter to a query."""
    status_column = getattr(model, status_column_name)
    return query.where(status_column == status)


def filter_by_datetime_range(
    query,
    model: type[ModelType],
    column_name: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> type:
    """
    Add an inclusive [start, end] filter on a datetime column.

    Either bound may be omitted.
    """
    column = getattr(model, column_name)
    if start is not None:
        query = query.where(column >= start)
    if end is not None:
        query = query.where(column <= end)
    return query


def build_branch_filtered_query(
    model: type[ModelType],
    branch_id: UUID,
    additional_filters: Optional[dict] = None,
) -> type:
    """
    select(model) scoped to one branch. `additional_filters` maps column
    names to values; None values are skipped so optional query params can be
    passed straight through.
    """
    query = select(model).where(model.branch_id == branch_id)

    if additional_filters:
        conditions = []
        for column_name, value in additional_filters.items():
            if value is not None:
                column = getattr(model, column_name)
                conditions.append(column == value)

        if conditions:
            query = query.where(and_(*conditions))

    return query
