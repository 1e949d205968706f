"""Paginated listing for any model.

Chooses between two ways of serving a page:

1. Offset mode: filter, sort, skip and limit run in the database, with a
   separate count query.
2. Hybrid mode (``limit=all`` or a limit above ``max_limit``): the whole
   filtered, sorted result is loaded and sliced in memory. The match count is
   checked against ``memory_threshold`` first, and the request is refused
   rather than loading an unbounded result.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Column, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.config import settings
from tourbook.db.session import Base
from tourbook.exceptions import HybridThresholdExceededError
from tourbook.logging import get_logger
from tourbook.pagination import PageRequest, QueryOptions, SortContext, total_pages
from tourbook.repositories.listing import (
    column_for,
    count_matching,
    filter_conditions,
    list_all,
    list_page,
    order_clauses,
)
from tourbook.schemas.pagination import Paginated

logger = get_logger(__name__)


def _coerce_filters[M: Base](model: type[M], filters: Mapping[str, str]) -> dict[Column[Any], Any]:
    """Resolve filter keys to columns and cast query-string values to the column type."""
    resolved: dict[Column[Any], Any] = {}
    for name, raw in filters.items():
        column = column_for(model, name)
        if column is None:
            logger.warning(
                "filter_dropped", model=model.__name__, fields=[name], reason="no_column"
            )
            continue
        try:
            resolved[column] = column.type.python_type(raw)
        except (NotImplementedError, TypeError, ValueError):
            logger.warning("filter_dropped", model=model.__name__, fields=[name], value=raw)
    return resolved


def _sort_column[M: Base](model: type[M], sort: SortContext) -> Column[Any]:
    column = column_for(model, sort.field)
    if column is not None:
        return column

    logger.warning("sort_field_dropped", model=model.__name__, field=sort.field)
    fallback = column_for(model, settings.pagination.default_sort_by)
    return fallback if fallback is not None else inspect(model).primary_key[0]


async def fetch_paginated[M: Base](
    db: AsyncSession,
    model: type[M],
    page: PageRequest,
    options: QueryOptions | None = None,
    *,
    search_fields: Iterable[str] = (),
    memory_threshold: int | None = None,
) -> Paginated[M]:
    """Return one page of ``model`` rows matching ``options``.

    ``options.sort`` (allow-listed by the route) wins over ``page.sort``.
    Raises HybridThresholdExceededError when a hybrid request matches more
    rows than ``memory_threshold``.
    """
    options = options or QueryOptions()
    pagination = page.pagination
    sort = options.sort or page.sort

    conditions = filter_conditions(
        model, _coerce_filters(model, options.filters), options.search, search_fields
    )
    order_by = order_clauses(model, _sort_column(model, sort), sort.descending)

    total = await count_matching(db, model, conditions)

    if not pagination.use_hybrid:
        limit = int(pagination.limit)
        # A page past the end never reaches OFFSET, which drivers cap at 64 bits
        items = (
            await list_page(db, model, conditions, order_by, pagination.skip, limit)
            if pagination.skip < total
            else []
        )
        return Paginated(
            items=items,
            page=pagination.page,
            limit=limit,
            total=total,
            total_pages=total_pages(total, limit),
        )

    threshold = (
        settings.pagination.memory_threshold if memory_threshold is None else memory_threshold
    )
    if total > threshold:
        logger.warning(
            "hybrid_threshold_exceeded", model=model.__name__, total=total, threshold=threshold
        )
        raise HybridThresholdExceededError(total, threshold)

    rows = await list_all(db, model, conditions, order_by)
    logger.info("hybrid_fetch", model=model.__name__, rows=len(rows), limit=pagination.limit)

    if pagination.is_all:
        return Paginated(items=rows, page=1, limit=len(rows), total=len(rows), total_pages=1)

    limit = int(pagination.limit)
    return Paginated(
        items=rows[pagination.skip : pagination.skip + limit],
        page=pagination.page,
        limit=limit,
        total=len(rows),
        total_pages=total_pages(len(rows), limit),
    )
