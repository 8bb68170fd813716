"""Offline tests for catalog persistence.

Scenarios:
- ItemStore round-trips the collection as one JSON array (Arabic kept as-is)
- Corrupt or non-list payloads load as an empty collection with a warning
- Malformed records are skipped individually
- DomainStore: initial load is empty, save then load round-trips
- A flat v0 dump is migrated under ``entries`` and written back
- A non-dict payload raises StorageError
- Persisting an entry that was never set up raises StorageError
"""

from __future__ import annotations

import json
import logging

import pytest
from custom_components.furniture_catalog import migrations
from custom_components.furniture_catalog.exceptions import StorageError
from custom_components.furniture_catalog.models import item_to_dict
from custom_components.furniture_catalog.storage import (
    CURRENT_SCHEMA_VERSION,
    STORAGE_VERSION,
    DomainStore,
    ItemStore,
    async_persist_catalog,
    storage_key_for,
)


def test_item_store_roundtrip(kv, make_item) -> None:
    """Save then load returns equal items in the same order."""

    # Arrange
    store = ItemStore(kv, "furnitureItems")
    items = [make_item(arabic_name="كرسي بار"), make_item(category="tables")]

    # Act
    store.replace_all(items)
    loaded = store.load_all()

    # Assert
    assert loaded == items
    assert store.is_persisted()
    assert "كرسي بار" in kv.get("furnitureItems")


def test_item_store_missing_key_is_empty(kv) -> None:
    store = ItemStore(kv, "furnitureItems")

    assert store.load_all() == []
    assert not store.is_persisted()


@pytest.mark.parametrize("raw", ["{not json", '{"items": []}', "42"])
def test_item_store_corrupt_payload_loads_empty(kv, caplog, raw) -> None:
    kv.set("furnitureItems", raw)
    store = ItemStore(kv, "furnitureItems")

    with caplog.at_level(logging.WARNING):
        assert store.load_all() == []

    assert any("starting empty" in rec.getMessage() for rec in caplog.records)


def test_item_store_skips_malformed_records(kv, make_item) -> None:
    good = make_item()
    kv.set(
        "furnitureItems",
        json.dumps(["junk", {"name": "x", "commercialPrice": "lots"}, item_to_dict(good)]),
    )

    assert ItemStore(kv, "furnitureItems").load_all() == [good]


def test_item_store_clear_removes_key(kv, make_item) -> None:
    store = ItemStore(kv, "furnitureItems")
    store.replace_all([make_item()])
    kv.set("language", "en")

    store.clear()

    assert not store.is_persisted()
    assert kv.get("language") == "en"


def test_migrate_0_to_1_moves_flat_dump_under_entries() -> None:
    flat = {"furnitureItems": "[]", "language": "en", "counter": 3}

    migrated = migrations.migrate(flat, from_version=0, to_version=1)

    assert migrated == {
        "schema_version": 1,
        "entries": {"furnitureItems": "[]", "language": "en"},
    }
    # Idempotent
    assert migrations.migrate_0_to_1(migrated) == {"entries": migrated["entries"]}
    # Input untouched
    assert "entries" not in flat


def test_migrate_refuses_downgrade() -> None:
    payload = {"schema_version": 2, "entries": {}}

    assert migrations.migrate(payload, from_version=2, to_version=1) is payload


@pytest.mark.asyncio
async def test_domain_store_initial_load_is_empty(hass) -> None:
    store = DomainStore(hass, key=storage_key_for("main"))

    data = await store.async_load()

    assert data == {"schema_version": CURRENT_SCHEMA_VERSION, "entries": {}}
    assert store.get("furnitureItems") is None


@pytest.mark.asyncio
async def test_domain_store_save_then_load_roundtrip(hass, hass_storage) -> None:
    # Arrange
    key = storage_key_for("main")
    store = DomainStore(hass, key=key)
    store.set("furnitureItems", "[]")
    store.set("language", "en")

    # Act
    await store.async_save()
    reloaded = DomainStore(hass, key=key)
    await reloaded.async_load()

    # Assert
    assert hass_storage[key]["version"] == STORAGE_VERSION
    assert hass_storage[key]["data"]["schema_version"] == CURRENT_SCHEMA_VERSION
    assert reloaded.snapshot() == {"furnitureItems": "[]", "language": "en"}


@pytest.mark.asyncio
async def test_domain_store_migrates_flat_dump(hass, hass_storage) -> None:
    """A browser local storage export (no schema_version) is migrated on load."""

    # Arrange
    key = storage_key_for("branch_2")
    hass_storage[key] = {
        "version": STORAGE_VERSION,
        "key": key,
        "data": {"furnitureItems2": "[]", "darkMode": "true"},
    }
    store = DomainStore(hass, key=key)

    # Act
    payload = await store.async_load()

    # Assert
    assert payload["schema_version"] == CURRENT_SCHEMA_VERSION
    assert store.get("darkMode") == "true"
    assert hass_storage[key]["data"] == {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "entries": {"furnitureItems2": "[]", "darkMode": "true"},
    }


@pytest.mark.asyncio
async def test_domain_store_non_dict_payload_raises(hass, hass_storage) -> None:
    key = storage_key_for("main")
    hass_storage[key] = {"version": STORAGE_VERSION, "key": key, "data": ["not", "a", "dict"]}
    store = DomainStore(hass, key=key)

    with pytest.raises(StorageError):
        await store.async_load()


@pytest.mark.asyncio
async def test_persist_without_setup_raises(hass) -> None:
    with pytest.raises(StorageError):
        await async_persist_catalog(hass, "missing-entry")
