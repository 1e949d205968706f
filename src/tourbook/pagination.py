"""Pagination, sort and filter resolution for list endpoints.

Turns raw query-string values into typed contexts that routers pass down to
``services.listing.fetch_paginated``::

    ?page=2&limit=25&sort=createdAt&order=asc&status=confirmed

    PageRequest(pagination=PaginationContext(page=2, limit=25, skip=25, use_hybrid=False),
                sort=SortContext(field="createdAt", order="asc"))
    QueryOptions(filters={"status": "confirmed"}, sort=..., search=None)

Everything here is pure and request-scoped. FastAPI wiring lives in
``tourbook.dependencies``.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final, Literal

from tourbook.config import PaginationPolicy, PaginationSettings, settings
from tourbook.exceptions import InvalidPaginationError
from tourbook.logging import get_logger

logger = get_logger(__name__)

ALL: Final = "all"

type Limit = int | Literal["all"]
type SortOrder = Literal["asc", "desc"]

# Query keys with a meaning of their own; never reported as dropped filters
RESERVED_PARAMS: Final = frozenset(
    {"page", "limit", "sort", "sortBy", "order", "sortOrder", "search"}
)


@dataclass(frozen=True)
class PaginationRequest:
    """Parsed but not yet validated pagination input."""

    page: int
    limit: Limit
    sort_by: str | None = None
    sort_order: str | None = None


@dataclass(frozen=True)
class PaginationContext:
    """Resolved pagination for one list request.

    ``skip`` is only meaningful for a numeric ``limit``; it is 0 for ``"all"``.
    ``use_hybrid`` routes the request through the in-memory scan in
    ``services.listing`` instead of store-level offset/limit.
    """

    page: int
    limit: Limit
    skip: int
    use_hybrid: bool

    @property
    def is_all(self) -> bool:
        return self.limit == ALL


@dataclass(frozen=True)
class SortContext:
    field: str
    order: SortOrder

    @property
    def descending(self) -> bool:
        return self.order == "desc"


@dataclass(frozen=True)
class PageRequest:
    """What the pagination dependency hands to a router."""

    pagination: PaginationContext
    sort: SortContext


@dataclass(frozen=True)
class QueryOptions:
    """Allow-listed filters, sort and free-text search for one list request."""

    filters: dict[str, str] = field(default_factory=dict)
    sort: SortContext | None = None
    search: str | None = None


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str]


def _parse_int(raw: str | None) -> int | None:
    """Parse an optionally signed run of ASCII digits, else None.

    ``int()`` alone would also take ``"1_0"`` and non-ASCII digits.
    """
    if raw is None:
        return None
    value = raw.strip()
    digits = value[1:] if value[:1] in ("+", "-") else value
    if not (digits.isascii() and digits.isdecimal()):
        return None
    return int(value)


def _first(query: Mapping[str, str], *names: str) -> str | None:
    """Return the first non-empty value among ``names`` (canonical name first, then aliases)."""
    for name in names:
        value = query.get(name)
        if value:
            return value
    return None


def _normalize_order(raw: str | None, default: str) -> SortOrder:
    value = (raw or default).lower()
    return "asc" if value == "asc" else "desc"


def parse_pagination_params(
    query: Mapping[str, str], config: PaginationSettings | None = None
) -> PaginationRequest:
    """Parse page/limit/sort values from a query string.

    Missing or non-numeric ``page``/``limit`` fall back to the configured
    defaults. Numeric values are kept as given, even when out of range, so that
    ``validate_pagination_params`` can report them.
    """
    config = config or settings.pagination

    page = _parse_int(query.get("page"))

    raw_limit = query.get("limit")
    limit: Limit
    if raw_limit is not None and raw_limit.strip().lower() == ALL:
        limit = ALL
    else:
        parsed_limit = _parse_int(raw_limit)
        limit = config.default_limit if parsed_limit is None else parsed_limit

    return PaginationRequest(
        page=config.default_page if page is None else page,
        limit=limit,
        sort_by=_first(query, "sortBy", "sort"),
        sort_order=_first(query, "sortOrder", "order"),
    )


def validate_pagination_params(
    page: int, limit: Limit, config: PaginationSettings | None = None
) -> ValidationResult:
    """Check page/limit ranges.

    A numeric limit above ``max_limit`` is an error only under
    ``PaginationPolicy.REJECT``. Under ``HYBRID`` it selects in-memory paging.
    """
    config = config or settings.pagination
    errors: list[str] = []

    if page < 1:
        errors.append("Page must be >= 1")

    if isinstance(limit, int):
        if limit < 1:
            errors.append("Limit must be >= 1")
        elif limit > config.max_limit and config.policy is PaginationPolicy.REJECT:
            errors.append(f"Limit must be <= {config.max_limit}")

    return ValidationResult(is_valid=not errors, errors=errors)


def build_pagination_context(
    page: int, limit: Limit, config: PaginationSettings | None = None
) -> PaginationContext:
    config = config or settings.pagination
    if not isinstance(limit, int):
        return PaginationContext(page=page, limit=ALL, skip=0, use_hybrid=True)
    return PaginationContext(
        page=page,
        limit=limit,
        skip=(page - 1) * limit,
        use_hybrid=limit > config.max_limit,
    )


def default_pagination(config: PaginationSettings | None = None) -> PaginationContext:
    config = config or settings.pagination
    return build_pagination_context(config.default_page, config.default_limit, config)


def resolve_sort(
    sort_by: str | None, sort_order: str | None, config: PaginationSettings | None = None
) -> SortContext:
    """Fill in the configured default field/order where the client gave none."""
    config = config or settings.pagination
    return SortContext(
        field=sort_by or config.default_sort_by,
        order=_normalize_order(sort_order, config.default_sort_order),
    )


def resolve_pagination(
    query: Mapping[str, str],
    *,
    required: bool = True,
    config: PaginationSettings | None = None,
) -> PageRequest:
    """Parse, validate and resolve pagination for one request.

    - Invalid input raises ``InvalidPaginationError`` when ``required`` is set,
      otherwise it is replaced by the defaults.
    - Any unexpected failure while parsing falls back to the defaults, so a
      broken query string never turns a list endpoint into a 500.
    """
    config = config or settings.pagination

    try:
        request = parse_pagination_params(query, config)
        result = validate_pagination_params(request.page, request.limit, config)
    except Exception:
        logger.exception("pagination_parse_failed", query=dict(query))
        return PageRequest(
            pagination=default_pagination(config), sort=resolve_sort(None, None, config)
        )

    sort = resolve_sort(request.sort_by, request.sort_order, config)

    if not result.is_valid:
        if required:
            raise InvalidPaginationError(result.errors)
        logger.info("pagination_defaults_applied", errors=result.errors)
        return PageRequest(pagination=default_pagination(config), sort=sort)

    return PageRequest(
        pagination=build_pagination_context(request.page, request.limit, config),
        sort=sort,
    )


def resolve_filter_sort(
    query: Mapping[str, str],
    allowed_filters: Iterable[str],
    allowed_sort_fields: Iterable[str],
    config: PaginationSettings | None = None,
) -> QueryOptions:
    """Keep only allow-listed filter keys and sort fields.

    Unknown keys never reach the query layer. They are dropped without an
    error for the client and logged as warnings.
    """
    config = config or settings.pagination
    allowed_filters = list(allowed_filters)
    allowed_sort_fields = set(allowed_sort_fields)

    filters = {key: value for key in allowed_filters if (value := query.get(key))}

    dropped = sorted(
        key for key in query.keys() if key not in RESERVED_PARAMS and key not in allowed_filters
    )
    if dropped:
        logger.warning("filter_dropped", fields=dropped, allowed=allowed_filters)

    sort_field = _first(query, "sortBy", "sort")
    if sort_field is not None and sort_field not in allowed_sort_fields:
        logger.warning("sort_field_dropped", field=sort_field, allowed=sorted(allowed_sort_fields))
        sort_field = None

    search = (query.get("search") or "").strip()

    return QueryOptions(
        filters=filters,
        sort=resolve_sort(sort_field, _first(query, "sortOrder", "order"), config),
        search=search or None,
    )


def total_pages(total: int, limit: int) -> int:
    """Number of pages for ``total`` items; an empty result still has one page."""
    return max(1, math.ceil(total / limit))
