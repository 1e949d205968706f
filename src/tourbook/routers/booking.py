"""Booking endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from tourbook.dependencies import DB, Pagination, filter_sort
from tourbook.models import Booking
from tourbook.pagination import QueryOptions
from tourbook.schemas.booking import BookingListResponse
from tourbook.services.listing import fetch_paginated

router = APIRouter()

BookingQuery = Annotated[
    QueryOptions,
    Depends(
        filter_sort(
            ["status", "paymentStatus", "tourId"],
            ["createdAt", "departureDate", "totalAmount"],
        )
    ),
]


@router.get("/bookings", response_model=BookingListResponse, status_code=200)
async def list_bookings(db: DB, page: Pagination, query: BookingQuery) -> BookingListResponse:
    """List bookings, filterable by status, payment status and tour."""
    result = await fetch_paginated(db, Booking, page, query)
    return BookingListResponse.from_page(result)
