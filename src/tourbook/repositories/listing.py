"""Generic list queries shared by every paginated endpoint.

Pure query functions: no business logic, no HTTP concerns.
Each function takes a session (or a model) and returns models, scalars or
SQL expressions.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import Column, ColumnElement, Select, func, inspect, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.db.session import Base

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def column_for[M: Base](model: type[M], field: str) -> Column[Any] | None:
    """Map an API field name (``createdAt``) to the model's column (``created_at``)."""
    key = _CAMEL_BOUNDARY.sub("_", field).lower()
    return inspect(model).columns.get(key)


def filter_conditions[M: Base](
    model: type[M],
    filters: Mapping[Column[Any], Any],
    search: str | None = None,
    search_fields: Iterable[str] = (),
) -> list[ColumnElement[bool]]:
    """Equality filters AND-ed together, plus an OR-ed case-insensitive search."""
    conditions: list[ColumnElement[bool]] = [column == value for column, value in filters.items()]

    if search:
        columns = [
            column for name in search_fields if (column := column_for(model, name)) is not None
        ]
        if columns:
            matches = (column.icontains(search, autoescape=True) for column in columns)
            conditions.append(or_(*matches))

    return conditions


def order_clauses[M: Base](model: type[M], column: Column[Any], descending: bool) -> list[Any]:
    """Order by ``column``, then by primary key in the same direction for stable pages."""
    primary_key = inspect(model).primary_key[0]
    if descending:
        return [column.desc(), primary_key.desc()]
    return [column.asc(), primary_key.asc()]


def _select[M: Base](model: type[M], conditions: Sequence[ColumnElement[bool]]) -> Select[tuple[M]]:
    return select(model).where(*conditions)


async def count_matching[M: Base](
    db: AsyncSession, model: type[M], conditions: Sequence[ColumnElement[bool]]
) -> int:
    """Return how many rows match ``conditions``."""
    stmt = select(func.count()).select_from(model).where(*conditions)
    result = await db.execute(stmt)
    return result.scalar_one()


async def list_page[M: Base](
    db: AsyncSession,
    model: type[M],
    conditions: Sequence[ColumnElement[bool]],
    order_by: Sequence[Any],
    skip: int,
    limit: int,
) -> list[M]:
    """Return one page using store-level offset/limit."""
    stmt = _select(model, conditions).order_by(*order_by).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_all[M: Base](
    db: AsyncSession,
    model: type[M],
    conditions: Sequence[ColumnElement[bool]],
    order_by: Sequence[Any],
) -> list[M]:
    """Return every matching row, sorted."""
    stmt = _select(model, conditions).order_by(*order_by)
    result = await db.execute(stmt)
    return list(result.scalars().all())
