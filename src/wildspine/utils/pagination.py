"""Pagination helpers.

Page parameters usually arrive as raw query-string values; anything that does
not parse to a positive integer falls back to a default.

Example:
    >>> from wildspine.utils.pagination import normalize_page, total_pages
    >>> normalize_page(0, -1)
    (1, 10)
    >>> normalize_page("3", "abc")
    (3, 10)
    >>> total_pages(25, 10)
    3
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def normalize_page(
    page: Any,
    page_size: Any,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> tuple[int, int]:
    """Coerce raw page/page_size values into a valid pair."""
    return _positive_int(page, DEFAULT_PAGE), _positive_int(page_size, default_page_size)


def offset_for(page: int, page_size: int) -> int:
    """Row offset of the first item on ``page``.

    Example:
        >>> from wildspine.utils.pagination import offset_for
        >>> offset_for(3, 10)
        20
    """
    return (page - 1) * page_size


def total_pages(total_count: int, page_size: int) -> int:
    """Number of pages needed for ``total_count`` items."""
    return math.ceil(total_count / page_size)


@dataclass
class Page(Generic[T]):
    """One page of results plus the totals needed to render navigation.

    Example:
        >>> from wildspine.utils.pagination import Page
        >>> p = Page(items=["a", "b"], page=1, page_size=2, total_count=5)
        >>> p.total_pages
        3
    """

    items: list[T] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    total_count: int = 0

    @classmethod
    def build(cls, items: list[T], page: int, page_size: int, total_count: int) -> Page[T]:
        """Build a page from one slice of results and the unsliced total."""
        return cls(items=list(items), page=page, page_size=page_size, total_count=total_count)

    @property
    def total_pages(self) -> int:
        return total_pages(self.total_count, self.page_size)

    @property
    def offset(self) -> int:
        return offset_for(self.page, self.page_size)
