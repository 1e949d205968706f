"""Fact response schemas for GET /facts."""

from datetime import datetime

from pydantic import BaseModel

from tourbook.schemas.pagination import PaginatedResponse


class FactResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    tour_id: int | None
    title: str
    description: str
    created_at: datetime


class FactListResponse(PaginatedResponse[FactResponse]):
    """Paginated list of facts."""
