"""Catalog filtering pipeline and filter state.

Filtering is a strict, order-preserving pipeline over the full item list:

1. search: case-insensitive substring match on name, number and Arabic name
2. category: exact match on the category key (``"all"`` passes everything)
3. facet: category-scoped token rules matched against the display name

Each stage narrows the previous stage's output. Stages are also exposed on
their own for callers that want a single dimension.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TypedDict

from .categories import CategoryRegistry
from .const import ALL
from .models import Item, facet_name


class CatalogFilter(TypedDict, total=False):
    """Filter options for browsing the catalog."""

    q: str
    category: str
    facet_key: str | None
    facet_value: str


@dataclass
class FilterState:
    """Ephemeral browse state; never persisted."""

    search: str = ""
    category: str = ALL
    facet_key: str | None = None
    facet_value: str = ALL

    def as_filter(self) -> CatalogFilter:
        return CatalogFilter(
            q=self.search,
            category=self.category,
            facet_key=self.facet_key,
            facet_value=self.facet_value,
        )


def _matches_search(item: Item, needle: str) -> bool:
    if needle in (item.name or "").lower():
        return True
    if needle in (item.number or "").lower():
        return True
    return needle in (item.arabic_name or "").lower()


def search_items(items: Iterable[Item], term: str) -> list[Item]:
    """Keep items whose name, number or Arabic name contains ``term``."""

    if not term:
        return list(items)
    needle = term.lower()
    return [it for it in items if _matches_search(it, needle)]


def filter_by_category(items: Iterable[Item], category: str) -> list[Item]:
    """Keep items in ``category``; the ``"all"`` sentinel keeps everything."""

    if category == ALL:
        return list(items)
    return [it for it in items if it.category == category]


def apply_facet(
    items: Iterable[Item],
    registry: CategoryRegistry,
    *,
    category: str,
    facet_key: str | None,
    facet_value: str,
) -> list[Item]:
    """Apply the category-scoped facet rule for ``facet_value``.

    The facet is a no-op when the value is ``"all"``, no facet is active, or
    the ``(category, facet_key, facet_value)`` triple names no rule.
    """

    if not facet_value or facet_value == ALL or not facet_key:
        return list(items)
    tokens = registry.facet_tokens(category, facet_key, facet_value)
    if tokens is None:
        return list(items)
    needles = [t.lower() for t in tokens]
    return [it for it in items if any(n in facet_name(it).lower() for n in needles)]


def filter_items(
    items: Sequence[Item], registry: CategoryRegistry, flt: CatalogFilter | None = None
) -> list[Item]:
    """Run search, category and facet stages over ``items`` in order.

    - q: empty string disables the search stage
    - category: ``"all"`` disables the category stage
    - facet_key/facet_value: ``"all"`` or a missing key disables the facet stage
    """

    if not flt:
        return list(items)

    result = search_items(items, flt.get("q") or "")
    if not result:
        return result
    category = flt.get("category") or ALL
    result = filter_by_category(result, category)
    if not result:
        return result
    return apply_facet(
        result,
        registry,
        category=category,
        facet_key=flt.get("facet_key"),
        facet_value=flt.get("facet_value") or ALL,
    )
