"""Error response schemas.

All error responses share one envelope::

    {"success": false, "code": "invalid_pagination", "message": "...",
     "errors": ["Page must be >= 1"], "timestamp": "2026-...", "path": "/bookings"}

Exception handlers in main.py construct these from domain exceptions.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Top-level error envelope returned by all error responses."""

    success: bool = False
    code: str
    message: str
    errors: list[str] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    path: str
