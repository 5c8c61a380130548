from __future__ import annotations

import pytest

from taskcore.core.pagination import (
    MAX_LIMIT,
    PageWindow,
    build_meta,
    parse_positive_int,
    validate_pagination,
)
from taskcore.domain.errors import CoreError, ErrorCode, ErrorKind


def _code(result) -> ErrorCode:
    assert isinstance(result, CoreError)
    return result.code


class TestRejectionOrder:
    def test_negative_limit(self):
        assert _code(validate_pagination(total=5, page=1, limit=-1)) is ErrorCode.INVALID_LIMIT

    def test_limit_too_large(self):
        result = validate_pagination(total=5, page=1, limit=500)
        assert _code(result) is ErrorCode.LIMIT_TOO_LARGE
        assert result.status_code == 400

    def test_page_zero(self):
        assert _code(validate_pagination(total=5, page=0, limit=10)) is ErrorCode.INVALID_PAGE

    def test_page_out_of_range_reports_total_pages(self):
        result = validate_pagination(total=5, page=999, limit=10)
        assert _code(result) is ErrorCode.PAGE_NOT_FOUND
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.status_code == 404
        assert result.details == {"totalPages": 1}

    def test_limit_checked_before_page(self):
        assert _code(validate_pagination(total=5, page=0, limit=0)) is ErrorCode.INVALID_LIMIT
        assert _code(validate_pagination(total=5, page="x", limit=101)) is ErrorCode.LIMIT_TOO_LARGE

    def test_limit_at_maximum_is_accepted(self):
        assert isinstance(validate_pagination(total=5, limit=MAX_LIMIT), PageWindow)


class TestAcceptance:
    def test_absent_limit_disables_pagination_and_ignores_page(self):
        assert validate_pagination(total=5, page="bogus", limit=None) is None

    def test_default_page_is_one(self):
        window = validate_pagination(total=25, limit=10)
        assert window.offset == 0
        assert window.meta.page == 1

    def test_offset_and_metadata(self):
        window = validate_pagination(total=25, page=2, limit=10)
        assert window.offset == 10
        assert window.limit == 10
        assert window.meta.to_wire() == {
            "page": 2,
            "limit": 10,
            "totalPages": 3,
            "hasNext": True,
            "hasPrev": True,
            "isFirstPage": False,
            "isLastPage": False,
        }

    @pytest.mark.parametrize("page", [1, 2, 50])
    def test_empty_result_accepts_any_page(self, page: int):
        window = validate_pagination(total=0, page=page, limit=10)
        assert isinstance(window, PageWindow)
        assert window.meta.total_pages == 0
        assert window.meta.is_last_page is True
        assert window.meta.has_next is False

    def test_string_inputs_from_query_strings(self):
        window = validate_pagination(total=30, page=" 3 ", limit="10")
        assert window.offset == 20
        assert window.meta.is_last_page is True


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        ("7", 7),
        (0, None),
        (-3, None),
        ("-3", None),
        ("2.5", None),
        (2.5, None),
        ("10abc", None),
        ("", None),
        (True, None),
        (None, None),
    ],
)
def test_parse_positive_int(value, expected):
    assert parse_positive_int(value) == expected


def test_last_page_flags():
    meta = build_meta(page=3, limit=10, total=21)
    assert meta.is_last_page is True
    assert meta.has_next is False
    assert meta.has_prev is True
    assert meta.is_first_page is False


def test_single_page_is_first_and_last():
    meta = build_meta(page=1, limit=10, total=10)
    assert meta.is_first_page and meta.is_last_page
    assert meta.total_pages == 1
