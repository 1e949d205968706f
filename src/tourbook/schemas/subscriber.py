"""Subscriber response schemas for GET /subscribers."""

from datetime import datetime

from pydantic import BaseModel

from tourbook.schemas.pagination import PaginatedResponse


class SubscriberResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    email: str
    created_at: datetime


class SubscriberListResponse(PaginatedResponse[SubscriberResponse]):
    """Paginated list of subscribers."""
