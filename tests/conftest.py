"""Shared fixtures for Furniture Catalog tests.

Home Assistant objects (``hass``, ``hass_storage``, ``MockConfigEntry``) come
from pytest-homeassistant-custom-component. Catalog-core tests run against the
in-memory key-value store and need no Home Assistant instance.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
from custom_components.furniture_catalog.models import Item, UploadedImage, item_from_dict
from custom_components.furniture_catalog.seeds import load_seed_records
from custom_components.furniture_catalog.storage import MemoryKeyValueStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Factory for items with sensible defaults; keyword overrides win."""

    counter = {"n": 0}

    def _make(**overrides: Any) -> Item:
        counter["n"] += 1
        n = counter["n"]
        fields: dict[str, Any] = {
            "id": f"item-{n}",
            "name": f"Item {n}",
            "number": f"{n:04d}",
            "category": "chairs",
            "commercial_price": 100.0,
            "selling_price": 120.0,
            "image": "data:image/png;base64,AAAA",
            "created_at": "2024-01-01T00:00:00Z",
        }
        fields.update(overrides)
        return Item(**fields)

    return _make


@pytest.fixture
def png_upload() -> UploadedImage:
    return UploadedImage.from_bytes("chair.png", "image/png", PNG_BYTES)


@pytest.fixture(scope="session")
def main_seed() -> list[dict[str, Any]]:
    return load_seed_records("main.json")


@pytest.fixture
def main_items(main_seed: list[dict[str, Any]]) -> list[Item]:
    return [item_from_dict(record) for record in main_seed]
