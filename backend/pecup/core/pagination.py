"""Pagination — lenient parsing of page/limit/sort/order query parameters.

Invariants:
    - Never raises: bad input falls back to defaults or is clamped
    - page >= 1, 1 <= limit <= max_limit
    - sort is always a member of the caller's allow-list
    - offset = (page - 1) * limit

Design Decisions:
    - Raw strings in, not ints: admin tables send whatever is in the URL and
      a malformed value should degrade to the first page, not a 400
"""

import math
from collections.abc import Collection
from dataclasses import dataclass

from pecup.core.domain_types import SortOrder

DEFAULT_LIMIT = 20


def to_int(value: object) -> int | None:
    """Parse an int from a query/form value; None when not an integer."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    sort: str
    order: SortOrder

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ascending(self) -> bool:
        return self.order == SortOrder.ASC


def parse_page_params(
    page: str | None,
    limit: str | None,
    sort: str | None,
    order: str | None,
    *,
    allowed_sorts: Collection[str],
    default_sort: str,
    default_order: SortOrder,
    max_limit: int = 100,
) -> PageParams:
    raw_page = to_int(page)
    raw_limit = to_int(limit)
    parsed_page = max(1, raw_page) if raw_page is not None else 1
    parsed_limit = (
        min(max_limit, max(1, raw_limit)) if raw_limit is not None else DEFAULT_LIMIT
    )
    parsed_limit = min(parsed_limit, max_limit)
    parsed_sort = sort if sort in allowed_sorts else default_sort
    try:
        parsed_order = SortOrder(order) if order else default_order
    except ValueError:
        parsed_order = default_order
    return PageParams(parsed_page, parsed_limit, parsed_sort, parsed_order)


def build_meta(params: PageParams, count: int) -> dict:
    """Pagination envelope returned alongside admin list data."""
    return {
        "page": params.page,
        "limit": params.limit,
        "count": count,
        "totalPages": math.ceil(count / params.limit) if count else 1,
        "sort": params.sort,
        "order": params.order.value,
    }
