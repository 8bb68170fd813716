"""Catalog façade owning the item collection and browse state.

``Catalog`` wires one catalog variant together: the ``ItemStore`` backed by a
key-value store, the category registry, the ephemeral filter state, the
paginator and the item editor. UI layers (here: Home Assistant services)
forward user actions into its methods and re-render on change notifications.

The façade is framework-agnostic and designed to be exercised by offline
tests and invoked by the service layer.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from typing import Any

from .categories import CategoryRegistry, get_registry
from .const import ALL, DOMAIN, CatalogVariant
from .editor import ItemEditor, SaveResult
from .exceptions import NotFoundError
from .filters import FilterState, filter_items
from .models import Item, ItemForm, UploadedImage, item_from_dict
from .pagination import Paginator
from .preferences import Preferences
from .storage import ItemStore, KeyValueStore

LOGGER = logging.getLogger(__name__)

OP_DELETE = "delete"
OP_RESET = "reset"

Listener = Callable[[str, str | None], None]


class Catalog:
    """One catalog variant: items, filters, pagination and editing.

    Notes:
        - The in-memory ``items`` list mirrors the persisted collection and is
          replaced wholesale after every mutation.
        - Changing the search term, category or facet resets the visible
          cursor to one page. A language change also clears every filter.
    """

    # -----------------------------
    # Lifecycle
    # -----------------------------

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        storage_key: str,
        registry: CategoryRegistry,
        page_size: int,
        seed_records: Iterable[dict[str, Any]] = (),
        name: str = DOMAIN,
    ) -> None:
        self.name = name
        self._store = ItemStore(kv, storage_key)
        self._registry = registry
        self._seed_records = list(seed_records)
        self._paginator = Paginator(page_size)
        self._state = FilterState()
        self._preferences = Preferences(kv)
        self._items: list[Item] = []
        self._listeners: list[Listener] = []
        self.editor = ItemEditor(self._store, self._paginator, on_change=self._handle_saved)

    @classmethod
    def from_variant(
        cls,
        kv: KeyValueStore,
        variant: CatalogVariant,
        *,
        seed_records: Iterable[dict[str, Any]] = (),
        page_size: int | None = None,
    ) -> Catalog:
        """Create a catalog configured for ``variant``."""

        return cls(
            kv,
            storage_key=variant.storage_key,
            registry=get_registry(variant.registry),
            page_size=page_size or variant.page_size,
            seed_records=seed_records,
            name=variant.key,
        )

    def load(self) -> list[Item]:
        """Load persisted items, installing the seed when none are stored.

        Seeding never overwrites a non-empty collection.
        """

        self._items = self._store.load_all()
        if not self._items:
            self._install_seed()
        LOGGER.debug(
            "Catalog loaded",
            extra={
                "domain": DOMAIN,
                "op": "load_catalog",
                "catalog": self.name,
                "items_count": len(self._items),
            },
        )
        return list(self._items)

    def _install_seed(self) -> None:
        seeded: list[Item] = []
        for index, record in enumerate(self._seed_records):
            try:
                seeded.append(item_from_dict(record))
            except (AttributeError, TypeError, ValueError):
                LOGGER.warning(
                    "Skipping malformed seed record",
                    extra={"domain": DOMAIN, "op": "install_seed", "index": index},
                    exc_info=True,
                )
        self._store.replace_all(seeded)
        self._items = seeded
        LOGGER.info(
            "Installed %s seed items for catalog %s",
            len(seeded),
            self.name,
            extra={"domain": DOMAIN, "op": "install_seed", "catalog": self.name},
        )

    def reset_data(self) -> list[Item]:
        """Drop the persisted collection and reinstall the seed."""

        self._store.clear()
        self._reset_browse()
        items = self.load()
        self._notify(OP_RESET, None)
        return items

    # -----------------------------
    # Accessors
    # -----------------------------

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    @property
    def registry(self) -> CategoryRegistry:
        return self._registry

    @property
    def paginator(self) -> Paginator:
        return self._paginator

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    @property
    def language(self) -> str:
        return self._preferences.language

    # -----------------------------
    # Browsing
    # -----------------------------

    def set_search(self, term: str) -> None:
        self._state.search = term or ""
        self._paginator.reset()

    def set_category(self, category: str) -> None:
        """Select a category and reset its facet to ``"all"``."""

        category = category or ALL
        group = self._registry.facet_group(category)
        self._state.category = category
        self._state.facet_key = group.key if group is not None else None
        self._state.facet_value = ALL
        self._paginator.reset()

    def set_facet(self, value: str) -> None:
        self._state.facet_value = value or ALL
        self._paginator.reset()

    def set_language(self, language: str) -> str:
        """Switch the display language and clear every filter."""

        language = self._preferences.set_language(language)
        self._reset_browse()
        return language

    def toggle_language(self) -> str:
        language = self._preferences.toggle_language()
        self._reset_browse()
        return language

    def _reset_browse(self) -> None:
        self._state = FilterState()
        self._paginator.reset()

    def filtered_items(self) -> list[Item]:
        return filter_items(self._items, self._registry, self._state.as_filter())

    def visible_items(self) -> list[Item]:
        return self._paginator.visible_slice(self.filtered_items())

    def has_more(self) -> bool:
        return self._paginator.has_more(self.filtered_items())

    def reveal_more(self) -> list[Item]:
        self._paginator.reveal_more()
        return self.visible_items()

    def category_counts(self) -> dict[str, int]:
        """Count items per category, plus ``"all"`` for the total."""

        counts: dict[str, int] = {ALL: len(self._items)}
        counts.update(Counter(it.category for it in self._items))
        return counts

    def facet_choices(self, language: str | None = None) -> list[tuple[str, str]]:
        """Return the facet options of the selected category, "all" first."""

        group = self._registry.facet_group(self._state.category)
        if group is None:
            return []
        return group.choices(language or self.language)

    # -----------------------------
    # Admin
    # -----------------------------

    def get_item(self, item_id: str) -> Item:
        for item in self._items:
            if item.id == item_id:
                return item
        raise NotFoundError("item not found")

    async def async_save_item(
        self,
        form: ItemForm,
        upload: UploadedImage | None = None,
        editing_id: str | None = None,
    ) -> SaveResult:
        return await self.editor.async_save(form, upload, editing_id)

    def delete_item(self, item_id: str, *, confirmed: bool) -> bool:
        """Remove an item once the caller confirmed the intent.

        Returns False without touching anything when not confirmed.
        """

        if not confirmed:
            return False
        self.get_item(item_id)
        self._items = [it for it in self._items if it.id != item_id]
        self._store.replace_all(self._items)
        self._paginator.reset()
        LOGGER.debug(
            "Item deleted",
            extra={"domain": DOMAIN, "op": "delete_item", "item_id": item_id},
        )
        self._notify(OP_DELETE, item_id)
        return True

    # -----------------------------
    # Change notifications
    # -----------------------------

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _handle_saved(self, op: str, item: Item, items: list[Item]) -> None:
        self._items = list(items)
        self._notify(op, item.id)

    def _notify(self, op: str, item_id: str | None) -> None:
        for listener in list(self._listeners):
            listener(op, item_id)
