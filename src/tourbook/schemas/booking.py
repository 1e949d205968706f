"""Booking response schemas for GET /bookings."""

from datetime import date, datetime

from pydantic import BaseModel

from tourbook.schemas.pagination import PaginatedResponse


class BookingResponse(BaseModel):
    """Single booking as returned by the list endpoint."""

    model_config = {"from_attributes": True}

    id: int
    tour_id: int
    customer_name: str
    status: str
    payment_status: str
    departure_date: date
    total_amount: float
    created_at: datetime


class BookingListResponse(PaginatedResponse[BookingResponse]):
    """Paginated list of bookings."""
