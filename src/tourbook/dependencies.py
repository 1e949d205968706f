"""Shared FastAPI dependencies.

Reusable type aliases and dependency factories that routers import.
Defined here (not in main.py) to avoid circular imports when routers
are registered in main.

Pagination and filter/sort contexts are returned to the endpoint as typed
values rather than attached to the request::

    @router.get("/bookings")
    async def list_bookings(db: DB, page: Pagination, query: BookingQuery): ...
"""

from collections.abc import Callable, Iterable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tourbook.config import settings
from tourbook.db.session import get_db
from tourbook.pagination import PageRequest, QueryOptions, resolve_filter_sort, resolve_pagination

DB = Annotated[AsyncSession, Depends(get_db)]


def pagination(*, required: bool = True) -> Callable[[Request], PageRequest]:
    """Build a dependency that resolves page/limit/sort from the query string.

    With ``required=True`` invalid values raise InvalidPaginationError (400).
    With ``required=False`` they are replaced by the configured defaults.
    """

    def dependency(request: Request) -> PageRequest:
        return resolve_pagination(
            request.query_params, required=required, config=settings.pagination
        )

    return dependency


def filter_sort(
    allowed_filters: Iterable[str], allowed_sort_fields: Iterable[str]
) -> Callable[[Request], QueryOptions]:
    """Build a dependency that keeps only allow-listed filter and sort fields."""
    allowed_filters = tuple(allowed_filters)
    allowed_sort_fields = tuple(allowed_sort_fields)

    def dependency(request: Request) -> QueryOptions:
        return resolve_filter_sort(
            request.query_params, allowed_filters, allowed_sort_fields, config=settings.pagination
        )

    return dependency


Pagination = Annotated[PageRequest, Depends(pagination())]
LenientPagination = Annotated[PageRequest, Depends(pagination(required=False))]
