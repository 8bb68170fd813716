"""Incremental "load more" pagination over a filtered item list."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from .const import DEFAULT_PAGE_SIZE

T = TypeVar("T")


class Paginator:
    """Tracks how many filtered results are currently visible.

    ``visible_count`` starts at ``page_size`` and grows by ``page_size`` on each
    ``reveal_more``. Slicing clamps to the list length, so no upper bound is
    tracked here.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer")
        self._page_size = page_size
        self._visible_count = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def visible_count(self) -> int:
        return self._visible_count

    def visible_slice(self, items: Sequence[T]) -> list[T]:
        return list(items[: self._visible_count])

    def has_more(self, items: Sequence[T]) -> bool:
        return self._visible_count < len(items)

    def reveal_more(self) -> int:
        self._visible_count += self._page_size
        return self._visible_count

    def reset(self) -> None:
        self._visible_count = self._page_size
