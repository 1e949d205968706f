"""Unit tests for query-string parsing, validation and context resolution."""

import pytest

from tourbook import pagination
from tourbook.config import PaginationPolicy, PaginationSettings
from tourbook.exceptions import InvalidPaginationError
from tourbook.pagination import (
    ALL,
    PaginationContext,
    PaginationRequest,
    SortContext,
    build_pagination_context,
    parse_pagination_params,
    resolve_filter_sort,
    resolve_pagination,
    resolve_sort,
    total_pages,
    validate_pagination_params,
)

CONFIG = PaginationSettings()
REJECTING = PaginationSettings(policy=PaginationPolicy.REJECT)


# ---------------------------------------------------------------------------
# 1. Parser
# ---------------------------------------------------------------------------
def test_parse_empty_query_uses_defaults() -> None:
    assert parse_pagination_params({}, CONFIG) == PaginationRequest(page=1, limit=10)


@pytest.mark.parametrize("raw", ["all", "ALL", " All "])
def test_parse_limit_all_sentinel(raw: str) -> None:
    assert parse_pagination_params({"limit": raw}, CONFIG).limit == ALL


@pytest.mark.parametrize(
    "query",
    [
        {"page": "abc", "limit": "ten"},
        {"page": "", "limit": ""},
        {"page": "1.5", "limit": "2e3"},
        {"page": "1_0", "limit": "2_0"},
        {"page": "\u0663", "limit": "\uff15"},
        {"page": "-", "limit": "+"},
    ],
    ids=["words", "empty", "not_integers", "underscores", "non_ascii_digits", "bare_sign"],
)
def test_parse_unparsable_values_fall_back_to_defaults(query: dict[str, str]) -> None:
    request = parse_pagination_params(query, CONFIG)
    assert (request.page, request.limit) == (1, 10)


def test_parse_keeps_out_of_range_numbers_for_validation() -> None:
    request = parse_pagination_params({"page": "0", "limit": "-5"}, CONFIG)
    assert (request.page, request.limit) == (0, -5)


def test_parse_sort_params_and_aliases() -> None:
    assert parse_pagination_params({"sortBy": "title", "sortOrder": "asc"}, CONFIG) == (
        PaginationRequest(page=1, limit=10, sort_by="title", sort_order="asc")
    )
    aliased = parse_pagination_params({"sort": "price", "order": "desc"}, CONFIG)
    assert (aliased.sort_by, aliased.sort_order) == ("price", "desc")


def test_parse_prefers_canonical_sort_name_over_alias() -> None:
    request = parse_pagination_params({"sortBy": "title", "sort": "price"}, CONFIG)
    assert request.sort_by == "title"


def test_parse_accepts_signed_and_padded_integers() -> None:
    request = parse_pagination_params({"page": " +3 ", "limit": "-5"}, CONFIG)
    assert (request.page, request.limit) == (3, -5)


def test_huge_page_number_is_kept() -> None:
    request = parse_pagination_params({"page": "99999999999999999999"}, CONFIG)
    assert request.page == 99999999999999999999


# ---------------------------------------------------------------------------
# 2. Validator
# ---------------------------------------------------------------------------
@pytest.mark.parametrize("page", [0, -1, -100])
def test_page_below_one_is_invalid(page: int) -> None:
    result = validate_pagination_params(page, 10, CONFIG)
    assert not result.is_valid
    assert "Page must be >= 1" in result.errors


@pytest.mark.parametrize("limit", [0, -1, -50])
def test_numeric_limit_below_one_is_invalid(limit: int) -> None:
    result = validate_pagination_params(1, limit, CONFIG)
    assert not result.is_valid
    assert result.errors == ["Limit must be >= 1"]


@pytest.mark.parametrize("config", [CONFIG, REJECTING], ids=["hybrid", "reject"])
def test_limit_all_is_always_valid(config: PaginationSettings) -> None:
    assert validate_pagination_params(1, ALL, config).is_valid
    assert validate_pagination_params(0, ALL, config).errors == ["Page must be >= 1"]


def test_reports_every_error() -> None:
    result = validate_pagination_params(0, 0, CONFIG)
    assert result.errors == ["Page must be >= 1", "Limit must be >= 1"]


def test_limit_above_max_depends_on_policy() -> None:
    assert validate_pagination_params(1, 101, CONFIG).is_valid

    result = validate_pagination_params(1, 101, REJECTING)
    assert not result.is_valid
    assert result.errors == ["Limit must be <= 100"]
    assert validate_pagination_params(1, 100, REJECTING).is_valid


# ---------------------------------------------------------------------------
# 3. Context resolution
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(("page", "limit"), [(1, 1), (1, 10), (2, 10), (3, 7), (50, 100)])
def test_skip_is_offset_of_page(page: int, limit: int) -> None:
    assert build_pagination_context(page, limit, CONFIG).skip == (page - 1) * limit


@pytest.mark.parametrize(
    ("limit", "use_hybrid"),
    [(1, False), (100, False), (101, True), (5000, True), (ALL, True)],
)
def test_hybrid_trigger(limit: int | str, use_hybrid: bool) -> None:
    page = resolve_pagination({"limit": str(limit)}, config=CONFIG)
    assert page.pagination.use_hybrid is use_hybrid


def test_limit_all_has_zero_skip() -> None:
    page = resolve_pagination({"page": "3", "limit": "all"}, config=CONFIG)
    assert page.pagination == PaginationContext(page=3, limit=ALL, skip=0, use_hybrid=True)
    assert page.pagination.is_all


def test_resolution_is_idempotent() -> None:
    query = {"page": "4", "limit": "25", "sortBy": "title", "sortOrder": "asc"}
    assert resolve_pagination(query, config=CONFIG) == resolve_pagination(query, config=CONFIG)


def test_resolve_attaches_default_sort() -> None:
    page = resolve_pagination({}, config=CONFIG)
    assert page.pagination == PaginationContext(page=1, limit=10, skip=0, use_hybrid=False)
    assert page.sort == SortContext(field="createdAt", order="desc")


def test_required_pagination_raises_on_invalid_input() -> None:
    with pytest.raises(InvalidPaginationError) as exc_info:
        resolve_pagination({"page": "0", "limit": "0"}, required=True, config=CONFIG)

    assert exc_info.value.message == "Invalid pagination parameters"
    assert exc_info.value.errors == ["Page must be >= 1", "Limit must be >= 1"]


def test_optional_pagination_falls_back_to_defaults() -> None:
    page = resolve_pagination({"page": "0", "sortBy": "title"}, required=False, config=CONFIG)
    assert page.pagination == PaginationContext(page=1, limit=10, skip=0, use_hybrid=False)
    assert page.sort.field == "title"


def test_reject_policy_surfaces_as_invalid_pagination() -> None:
    with pytest.raises(InvalidPaginationError) as exc_info:
        resolve_pagination({"limit": "500"}, config=REJECTING)
    assert exc_info.value.errors == ["Limit must be <= 100"]


def test_parser_failure_fails_open(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_parser(*args: object, **kwargs: object) -> PaginationRequest:
        raise RuntimeError("boom")

    monkeypatch.setattr(pagination, "parse_pagination_params", broken_parser)

    page = resolve_pagination({"page": "2"}, required=True, config=CONFIG)
    assert page.pagination == PaginationContext(page=1, limit=10, skip=0, use_hybrid=False)
    assert page.sort == SortContext(field="createdAt", order="desc")


@pytest.mark.parametrize(
    ("order", "expected"),
    [(None, "desc"), ("asc", "asc"), ("ASC", "asc"), ("desc", "desc"), ("sideways", "desc")],
)
def test_sort_order_is_restricted(order: str | None, expected: str) -> None:
    assert resolve_sort(None, order, CONFIG).order == expected


# ---------------------------------------------------------------------------
# 4. Filter/sort allow-list
# ---------------------------------------------------------------------------
def test_filter_allow_list_drops_unknown_keys() -> None:
    query = {"status": "confirmed", "role": "admin", "$where": "1", "page": "2"}
    options = resolve_filter_sort(query, ["status", "tourId"], ["createdAt"], CONFIG)
    assert options.filters == {"status": "confirmed"}


def test_filter_allow_list_ignores_empty_values() -> None:
    options = resolve_filter_sort({"status": ""}, ["status"], ["createdAt"], CONFIG)
    assert options.filters == {}


def test_unknown_sort_field_falls_back_to_default() -> None:
    options = resolve_filter_sort(
        {"sort": "unknownField", "order": "asc"}, [], ["createdAt"], CONFIG
    )
    assert options.sort == SortContext(field="createdAt", order="asc")


def test_allowed_sort_field_and_alias() -> None:
    options = resolve_filter_sort(
        {"sortBy": "totalAmount", "sortOrder": "asc"}, [], ["createdAt", "totalAmount"], CONFIG
    )
    assert options.sort == SortContext(field="totalAmount", order="asc")


def test_invalid_sort_direction_defaults_to_desc() -> None:
    options = resolve_filter_sort({"sort": "createdAt", "order": "up"}, [], ["createdAt"], CONFIG)
    assert options.sort == SortContext(field="createdAt", order="desc")


def test_allow_list_and_parser_agree_on_sort_aliases() -> None:
    query = {"sortBy": "title", "sort": "createdAt", "sortOrder": "asc", "order": "desc"}
    options = resolve_filter_sort(query, [], ["createdAt", "title"], CONFIG)
    request = parse_pagination_params(query, CONFIG)

    assert options.sort == SortContext(field="title", order="asc")
    assert (request.sort_by, request.sort_order) == ("title", "asc")


def test_search_is_trimmed_and_blank_means_none() -> None:
    assert resolve_filter_sort({"search": "  everest "}, [], [], CONFIG).search == "everest"
    assert resolve_filter_sort({"search": "   "}, [], [], CONFIG).search is None


# ---------------------------------------------------------------------------
# 5. Page count
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    ("total", "limit", "expected"), [(25, 10, 3), (30, 10, 3), (1, 10, 1), (0, 10, 1)]
)
def test_total_pages(total: int, limit: int, expected: int) -> None:
    assert total_pages(total, limit) == expected
