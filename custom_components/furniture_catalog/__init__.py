"""Furniture Catalog integration bootstrap.

This module initializes the integration, prepares persistent storage for each
configured catalog variant, installs the variant's seed catalog on first run,
and registers the services.
"""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers import config_validation as cv

from . import services as services_mod
from .const import (
    CONF_PAGE_SIZE,
    CONF_VARIANT,
    DOMAIN,
    EVENT_CATALOG_UPDATED,
    VARIANT_MAIN,
    VARIANTS,
)
from .exceptions import StorageError
from .repository import Catalog
from .seeds import load_seed_records
from .storage import CURRENT_SCHEMA_VERSION, DomainStore, async_persist_catalog, storage_key_for

LOGGER = logging.getLogger(__name__)


# This integration is config-entry only; no YAML configuration is accepted.
CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, _config: dict) -> bool:
    """Set up the Furniture Catalog domain at Home Assistant startup.

    Initializes an empty domain bucket in hass.data with no side effects.
    """
    hass.data.setdefault(DOMAIN, {})
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up one catalog variant from a config entry."""
    variant = VARIANTS[entry.data.get(CONF_VARIANT, VARIANT_MAIN)]
    page_size = entry.data.get(CONF_PAGE_SIZE) or variant.page_size

    store = DomainStore(hass, key=storage_key_for(variant.key), version=CURRENT_SCHEMA_VERSION)
    try:
        payload = await store.async_load()
    except StorageError as exc:
        LOGGER.error(
            "Storage validation failed during setup",
            extra={"domain": DOMAIN, "op": "setup_storage", "catalog": variant.key},
            exc_info=True,
        )
        raise ConfigEntryNotReady("storage validation failed") from exc
    _log_storage_health(payload, storage_key=variant.storage_key, catalog=variant.key)

    seed_records = await hass.async_add_executor_job(load_seed_records, variant.seed_file)
    catalog = Catalog.from_variant(store, variant, seed_records=seed_records, page_size=page_size)
    persisted_before = store.get(variant.storage_key)
    catalog.load()
    entry.async_on_unload(catalog.add_listener(_announce_changes(hass, catalog)))

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "catalog": catalog,
        "store": store,
        "variant": variant.key,
    }

    # A freshly installed seed is written back right away
    if store.get(variant.storage_key) != persisted_before:
        await async_persist_catalog(hass, entry.entry_id)

    services_mod.setup(hass)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry.

    Persists the catalog one last time and drops its bucket. Services are
    removed once no catalog remains loaded.
    """

    bucket = hass.data.get(DOMAIN) or {}
    if entry.entry_id in bucket:
        try:
            await async_persist_catalog(hass, entry.entry_id)
        except StorageError:
            LOGGER.warning(
                "Failed to persist during unload",
                extra={"domain": DOMAIN, "op": "unload", "entry_id": entry.entry_id},
                exc_info=True,
            )
        bucket.pop(entry.entry_id, None)

    if not bucket:
        services_mod.unload(hass)
    return True


def _log_storage_health(payload: dict[str, Any], *, storage_key: str, catalog: str) -> None:
    """Log a storage health summary after loading."""

    entries = payload.get("entries")
    entry_count = len(entries) if isinstance(entries, dict) else 0
    has_items = isinstance(entries, dict) and storage_key in entries

    level = logging.DEBUG if has_items else logging.INFO
    LOGGER.log(
        level,
        "Storage health: catalog=%s schema_version=%s entries=%s items_persisted=%s",
        catalog,
        payload.get("schema_version"),
        entry_count,
        has_items,
        extra={
            "domain": DOMAIN,
            "op": "setup_storage_health",
            "catalog": catalog,
            "entries_count": entry_count,
        },
    )


def _announce_changes(hass: HomeAssistant, catalog: Catalog):
    """Build a catalog listener that fires ``furniture_catalog_updated``."""

    @callback
    def _fire(op: str, item_id: str | None) -> None:
        hass.bus.async_fire(
            EVENT_CATALOG_UPDATED,
            {"catalog": catalog.name, "op": op, "item_id": item_id},
        )

    return _fire
