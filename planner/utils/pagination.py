"""
Pagination helpers: normalize raw paging/sorting input and compute metadata.

Everything here is pure. Identifiers that end up in SQL are only ever taken
from an allow-list supplied by the caller; values never are.
"""
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, TypeVar

from planner.models.pagination_models import PaginationMeta, PaginationOptions

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

SORT_ASC = "asc"
SORT_DESC = "desc"


def _positive_int(value: Any) -> Optional[int]:
    """Return value as an int if it is numeric and >= 1, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number >= 1 else None


def normalize_sort_order(sort_order: Any) -> str:
    """'desc' only for the exact string 'desc'; anything else is 'asc'."""
    return SORT_DESC if sort_order == SORT_DESC else SORT_ASC


def normalize_pagination_query(query: Mapping[str, Any]) -> PaginationOptions:
    """
    Turn raw query input into bounded paging/sorting parameters.

    Missing, non-numeric or non-positive page/limit values fall back to the
    defaults; limit is silently capped at MAX_LIMIT. sort_by is passed through
    unresolved because each entity has its own allow-list.
    """
    page = _positive_int(query.get("page")) or DEFAULT_PAGE
    limit = min(_positive_int(query.get("limit")) or DEFAULT_LIMIT, MAX_LIMIT)

    return PaginationOptions(
        page=page,
        limit=limit,
        sort_by=query.get("sort_by"),
        sort_order=normalize_sort_order(query.get("sort_order")),
        max_limit=MAX_LIMIT,
    )


def create_pagination_meta(page: int, limit: int, total: int) -> PaginationMeta:
    """Compute page counts and neighbour pages for a result set."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    has_next_page = page < total_pages
    has_prev_page = page > 1

    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next_page=has_next_page,
        has_prev_page=has_prev_page,
        next_page=page + 1 if has_next_page else None,
        prev_page=page - 1 if has_prev_page else None,
    )


def create_paginated_response(
    items: List[T],
    pagination: PaginationOptions,
    total: int
) -> Dict[str, Any]:
    return {
        "items": items,
        "pagination": create_pagination_meta(pagination.page, pagination.limit, total),
    }


def calculate_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def resolve_sort_field(sort_by: Optional[str], allowed_fields: Sequence[str], fallback: str = "created_at") -> str:
    """Return sort_by if it is allow-listed, otherwise the first allowed field."""
    if allowed_fields and sort_by in allowed_fields:
        return sort_by
    return allowed_fields[0] if allowed_fields else fallback
