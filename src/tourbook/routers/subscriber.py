"""Subscriber endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from tourbook.dependencies import DB, LenientPagination, filter_sort
from tourbook.models import Subscriber
from tourbook.pagination import QueryOptions
from tourbook.schemas.subscriber import SubscriberListResponse
from tourbook.services.listing import fetch_paginated

router = APIRouter()

SubscriberQuery = Annotated[QueryOptions, Depends(filter_sort([], ["createdAt"]))]


@router.get("/subscribers", response_model=SubscriberListResponse, status_code=200)
async def list_subscribers(
    db: DB, page: LenientPagination, query: SubscriberQuery
) -> SubscriberListResponse:
    """List newsletter subscribers. Bad paging input falls back to defaults instead of a 400."""
    result = await fetch_paginated(db, Subscriber, page, query, search_fields=("email",))
    return SubscriberListResponse.from_page(result)
