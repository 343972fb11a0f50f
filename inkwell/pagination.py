"""Pagination of ordered collections.

Key classes:
- PaginationView: Which page numbers a pagination bar shows.
- PageWindow: One page worth of items plus its pagination view.

Key functions:
- paginate: Split items into fixed-size windows.
- pagination_view: Compute the visible page-number range.
- page_url: URL of page ``n`` under a base path.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

VISIBLE_RADIUS = 2
MIN_VISIBLE_PAGES = 5


@dataclass(frozen=True)
class PaginationView:
    current_page: int
    total_pages: int
    visible_start: int
    visible_end: int
    show_first: bool
    show_first_ellipsis: bool
    show_last: bool
    show_last_ellipsis: bool

    @property
    def visible_pages(self) -> list[int]:
        return list(range(self.visible_start, self.visible_end + 1))


@dataclass(frozen=True)
class PageWindow:
    page_number: int
    items: tuple[Any, ...]
    is_first_page: bool
    url: str
    pagination: PaginationView


def page_url(base_path: str, page_number: int) -> str:
    """Return the URL of ``page_number`` under ``base_path``.

    Examples:
        >>> page_url("/", 1)
        '/'

        >>> page_url("/", 3)
        '/page/3/'
    """
    if page_number <= 1:
        return base_path
    return f"{base_path}page/{page_number}/"


def pagination_view(current_page: int, total_pages: int, radius: int = VISIBLE_RADIUS) -> PaginationView:
    """Compute the visible page range around ``current_page``.

    The range spans ``radius`` pages on either side of the current page.
    When that covers fewer than five pages while more than four exist, it is
    widened toward the boundary that is not already reached.

    Examples:
        >>> pagination_view(5, 10).visible_pages
        [3, 4, 5, 6, 7]

        >>> pagination_view(1, 10).visible_pages
        [1, 2, 3, 4, 5]
    """
    start = max(1, current_page - radius)
    end = min(total_pages, current_page + radius)
    span = MIN_VISIBLE_PAGES - 1
    if end - start < span and total_pages > span:
        if start == 1:
            end = min(start + span, total_pages)
        elif end == total_pages:
            start = max(end - span, 1)
    return PaginationView(
        current_page=current_page,
        total_pages=total_pages,
        visible_start=start,
        visible_end=end,
        show_first=start > 1,
        show_first_ellipsis=start > 2,
        show_last=end < total_pages,
        show_last_ellipsis=end < total_pages - 1,
    )


def paginate(items: Sequence[Any], per_page: int, base_path: str = "/") -> list[PageWindow]:
    """Split ``items`` into windows of ``per_page`` items.

    Args:
        items: Ordered items to split.
        per_page: Window size, at least 1.
        base_path: URL of the first page; later pages live under ``page/<n>/``.

    Returns:
        One PageWindow per page; empty when ``items`` is empty.

    Raises:
        ValueError: If ``per_page`` is less than 1.
    """
    if per_page < 1:
        raise ValueError(f"per_page must be at least 1, got {per_page}")
    items = tuple(items)
    total_pages = math.ceil(len(items) / per_page)
    windows = []
    for number in range(1, total_pages + 1):
        start = (number - 1) * per_page
        windows.append(
            PageWindow(
                page_number=number,
                items=items[start : start + per_page],
                is_first_page=number == 1,
                url=page_url(base_path, number),
                pagination=pagination_view(number, total_pages),
            )
        )
    return windows
