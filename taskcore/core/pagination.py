"""
Pagination validator.

Turns raw page/limit inputs (ints, or integer strings straight from a query
string) into an offset/limit window plus response metadata, or a structured
rejection. Checks run in a fixed order so a request with several problems
always reports the same one first:

1. INVALID_LIMIT    limit present but not a positive integer
2. LIMIT_TOO_LARGE  limit above MAX_LIMIT
3. INVALID_PAGE     page present but not a positive integer
4. PAGE_NOT_FOUND   page beyond the last page (only when something matched)
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from taskcore.domain.errors import CoreError, ErrorCode, not_found_error, validation_error

MAX_LIMIT = 100
DEFAULT_PAGE = 1

RawInt = Union[int, str, None]


class PaginationOptions(BaseModel):
    """Raw pagination request; `limit=None` disables pagination."""

    page: Any = None
    limit: Any = None

    model_config = {"frozen": True}

    @property
    def requested(self) -> bool:
        return self.limit is not None


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total_pages: int = Field(..., serialization_alias="totalPages")
    has_next: bool = Field(..., serialization_alias="hasNext")
    has_prev: bool = Field(..., serialization_alias="hasPrev")
    is_first_page: bool = Field(..., serialization_alias="isFirstPage")
    is_last_page: bool = Field(..., serialization_alias="isLastPage")

    model_config = {"frozen": True}

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class PageWindow(BaseModel):
    offset: int
    limit: int
    meta: PaginationMeta

    model_config = {"frozen": True}


def parse_positive_int(value: RawInt) -> Optional[int]:
    """
    Return `value` as a positive int, or None when it is not one.

    Accepts ints and strings of ASCII digits (surrounding whitespace allowed).
    Booleans, floats, signs and partial numbers such as "10abc" are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            number = int(text)
            return number if number > 0 else None
    return None


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total > 0 else 0


def build_meta(page: int, limit: int, total: int) -> PaginationMeta:
    pages = total_pages(total, limit)
    return PaginationMeta(
        page=page,
        limit=limit,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
        is_first_page=page == 1,
        is_last_page=page == pages or pages == 0,
    )


def validate_pagination(total: int, page: RawInt = None, limit: RawInt = None) -> PageWindow | CoreError | None:
    """
    Validate a page request against `total` matching records.

    Returns None when `limit` is absent (pagination disabled, `page` ignored),
    a PageWindow on success, or a CoreError describing the first failed check.
    """
    if limit is None:
        return None

    limit_num = parse_positive_int(limit)
    if limit_num is None:
        return validation_error(ErrorCode.INVALID_LIMIT, "Limit must be a positive number")
    if limit_num > MAX_LIMIT:
        return validation_error(
            ErrorCode.LIMIT_TOO_LARGE, f"Limit cannot exceed {MAX_LIMIT}", maxLimit=MAX_LIMIT
        )

    page_num = DEFAULT_PAGE
    if page is not None:
        parsed_page = parse_positive_int(page)
        if parsed_page is None:
            return validation_error(ErrorCode.INVALID_PAGE, "Page must be a positive number")
        page_num = parsed_page

    pages = total_pages(total, limit_num)
    if total > 0 and page_num > pages:
        return not_found_error(
            ErrorCode.PAGE_NOT_FOUND,
            f"Page {page_num} does not exist. Total pages: {pages}",
            totalPages=pages,
        )

    return PageWindow(
        offset=(page_num - 1) * limit_num,
        limit=limit_num,
        meta=build_meta(page_num, limit_num, total),
    )


__all__ = [
    "MAX_LIMIT",
    "PageWindow",
    "PaginationMeta",
    "PaginationOptions",
    "build_meta",
    "parse_positive_int",
    "total_pages",
    "validate_pagination",
]
