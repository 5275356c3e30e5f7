"""In-memory pagination of ranked and searched candidate lists."""

import math
from collections.abc import Sequence
from typing import TypeVar

from talentmatch.schemas.match import Pagination

T = TypeVar("T")


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], Pagination]:
    """Slice one page out of a fully materialized list.

    Args:
        items: The complete ordered list.
        page: 1-based page number.
        page_size: Items per page.

    Returns:
        Tuple of (items on the page, pagination metadata).

    Raises:
        ValueError: If page or page_size is less than 1.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    total_items = len(items)
    total_pages = math.ceil(total_items / page_size)
    start = (page - 1) * page_size

    return list(items[start:start + page_size]), Pagination(
        current_page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_items=total_items,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
