"""Generic pagination types shared by all list endpoints.

PaginatedResponse[T] — Pydantic envelope for HTTP responses (serializable).
Paginated[T]         — plain dataclass for service-layer returns (not serializable).

Wire shape::

    {"success": true,
     "data": {"items": [...],
              "pagination": {"page": 2, "limit": 10, "total": 25, "totalPages": 3}}}
"""

from dataclasses import dataclass
from typing import Any, Self

from pydantic import BaseModel, Field


@dataclass
class Paginated[T]:
    """One page of results inside the service layer.

    For ``limit=all`` the service returns ``page=1``, ``limit=total`` and
    ``total_pages=1``.
    """

    items: list[T]
    page: int
    limit: int
    total: int
    total_pages: int


class PaginationMeta(BaseModel):
    model_config = {"populate_by_name": True}

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")


class PageData[T](BaseModel):
    items: list[T]
    pagination: PaginationMeta


class PaginatedResponse[T](BaseModel):
    """Success envelope for paginated HTTP responses.

    Parametrize per entity in routers (``PaginatedResponse[BookingResponse]``) and
    build it from the service result with ``from_page``. Item schemas need
    ``from_attributes`` so ORM rows validate directly.
    """

    success: bool = True
    data: PageData[T]

    @classmethod
    def from_page(cls, page: Paginated[Any]) -> Self:
        return cls.model_validate(
            {
                "data": {
                    "items": page.items,
                    "pagination": {
                        "page": page.page,
                        "limit": page.limit,
                        "total": page.total,
                        "total_pages": page.total_pages,
                    },
                }
            }
        )
