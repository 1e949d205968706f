from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tourbook.db.session import shutdown
from tourbook.dependencies import DB
from tourbook.exceptions import (
    DomainError,
    HybridThresholdExceededError,
    InvalidPaginationError,
)
from tourbook.logging import get_logger
from tourbook.middleware import RequestIDMiddleware
from tourbook.routers import booking, fact, subscriber
from tourbook.schemas.error import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close pooled database connections on shutdown."""
    yield
    await shutdown()


app = FastAPI(lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)
app.include_router(booking.router)
app.include_router(fact.router)
app.include_router(subscriber.router)


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    errors: list[str] | None = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    body = ErrorResponse(code=code, message=message, errors=errors, path=request.url.path)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(InvalidPaginationError)
async def invalid_pagination_handler(request: Request, exc: InvalidPaginationError) -> JSONResponse:
    """Return 400 listing every page/limit problem."""
    logger.info("invalid_pagination", errors=exc.errors)
    return _error_response(request, 400, "invalid_pagination", exc.message, exc.errors)


@app.exception_handler(HybridThresholdExceededError)
async def hybrid_threshold_handler(
    request: Request, exc: HybridThresholdExceededError
) -> JSONResponse:
    """Return 400 when an in-memory page would load too many rows."""
    return _error_response(request, 400, "result_too_large", exc.message)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Return 400 for generic domain-level violations."""
    logger.warning("domain_error", error=exc.message)
    return _error_response(request, 400, "domain_error", exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 in the standard envelope instead of FastAPI's default body."""
    errors = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    ]
    return _error_response(request, 422, "validation_error", "Validation failed", errors)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and return a safe error response.

    - Logs full exception with traceback (includes request_id from context)
    - Returns generic error to client (no stack traces leaked)
    """
    logger.exception("unhandled_exception")
    return _error_response(request, 500, "internal_error", "Internal server error")


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Health check endpoint; 200 only if the database answers a ping query."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
