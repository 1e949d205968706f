"""Fact endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from tourbook.dependencies import DB, Pagination, filter_sort
from tourbook.models import Fact
from tourbook.pagination import QueryOptions
from tourbook.schemas.fact import FactListResponse
from tourbook.services.listing import fetch_paginated

router = APIRouter()

FactQuery = Annotated[QueryOptions, Depends(filter_sort(["tourId"], ["createdAt", "title"]))]


@router.get("/facts", response_model=FactListResponse, status_code=200)
async def list_facts(db: DB, page: Pagination, query: FactQuery) -> FactListResponse:
    """List facts; ``search`` matches title or description."""
    result = await fetch_paginated(db, Fact, page, query, search_fields=("title", "description"))
    return FactListResponse.from_page(result)
