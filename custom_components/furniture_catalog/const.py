"""Constants for the Furniture Catalog integration.

Defines the integration domain, filter sentinels, persistence keys and the
catalog variants. Each variant is one configuration of the same catalog
implementation: its own storage key, seed set and page size.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Integration domain used across all modules and entity unique IDs
DOMAIN: Final[str] = "furniture_catalog"

# Reserved filter value meaning "no restriction on this dimension"
ALL: Final[str] = "all"

# Supported display languages
LANG_AR: Final[str] = "ar"
LANG_EN: Final[str] = "en"
LANGUAGES: Final[tuple[str, ...]] = (LANG_AR, LANG_EN)
DEFAULT_LANGUAGE: Final[str] = LANG_AR

# Preference keys shared by every variant's key-value store
LANGUAGE_KEY: Final[str] = "language"
DARK_MODE_KEY: Final[str] = "darkMode"

# Uploaded images
MAX_IMAGE_BYTES: Final[int] = 5 * 1024 * 1024
IMAGE_CONTENT_TYPE_PREFIX: Final[str] = "image/"

# Pagination
DEFAULT_PAGE_SIZE: Final[int] = 12
PAGE_SIZES: Final[tuple[int, ...]] = (9, 12)

# Config entry data keys
CONF_VARIANT: Final[str] = "variant"
CONF_PAGE_SIZE: Final[str] = "page_size"

# Bus event fired after every catalog mutation
EVENT_CATALOG_UPDATED: Final[str] = f"{DOMAIN}_updated"

# Variant keys
VARIANT_MAIN: Final[str] = "main"
VARIANT_BRANCH_2: Final[str] = "branch_2"
VARIANT_BLANK: Final[str] = "blank"


@dataclass(frozen=True)
class CatalogVariant:
    """One catalog configuration.

    Attributes:
        key: Variant identifier used in config entries and service calls.
        title: Human-readable title for the config entry.
        storage_key: Key under which the item collection is persisted.
        seed_file: File name under ``seeds/`` holding the initial catalog.
        page_size: Number of items revealed per "load more" step.
        registry: Name of the category registry used by this variant.
    """

    key: str
    title: str
    storage_key: str
    seed_file: str
    page_size: int = DEFAULT_PAGE_SIZE
    registry: str = VARIANT_MAIN


VARIANTS: Final[dict[str, CatalogVariant]] = {
    VARIANT_MAIN: CatalogVariant(
        key=VARIANT_MAIN,
        title="Furniture Catalog",
        storage_key="furnitureItems",
        seed_file="main.json",
    ),
    VARIANT_BRANCH_2: CatalogVariant(
        key=VARIANT_BRANCH_2,
        title="Furniture Catalog (Branch 2)",
        storage_key="furnitureItems2",
        seed_file="branch_2.json",
        registry=VARIANT_BRANCH_2,
    ),
    VARIANT_BLANK: CatalogVariant(
        key=VARIANT_BLANK,
        title="Furniture Catalog (Blank)",
        storage_key="furnitureItemss",
        seed_file="blank.json",
        registry=VARIANT_BLANK,
    ),
}
