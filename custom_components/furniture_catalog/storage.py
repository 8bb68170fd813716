"""Persistence layer for the Furniture Catalog.

Two levels live here:

- ``KeyValueStore``: the string key-value contract (``get``/``set``/``remove``)
  the catalog core is written against. ``MemoryKeyValueStore`` is a plain
  in-memory implementation; ``DomainStore`` keeps the entries in memory and
  persists them through Home Assistant's Store with schema-aware load/save
  and migrations.
- ``ItemStore``: the ordered item collection serialized as a JSON array
  under a single key.

Data shape persisted by ``DomainStore``:
    {
        "schema_version": int,
        "entries": {key -> str},
    }
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Iterable
from copy import deepcopy
from typing import Any, Final, Protocol

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from . import migrations
from .const import DOMAIN
from .exceptions import StorageError
from .models import Item, item_from_dict, item_to_dict

_LOGGER = logging.getLogger(__name__)

# Current schema version for persisted payloads
CURRENT_SCHEMA_VERSION: Final[int] = 1

# Version of the Home Assistant Store envelope; schema changes use migrations
STORAGE_VERSION: Final[int] = 1


def storage_key_for(variant: str) -> str:
    """Return the Home Assistant storage key for a catalog variant."""

    return f"{DOMAIN}.{variant}"


def _empty_payload() -> dict[str, Any]:
    """Create a new empty payload matching the current schema.

    Returns a fresh dict each time to avoid shared mutation across callers.
    """

    return {"schema_version": CURRENT_SCHEMA_VERSION, "entries": {}}


class KeyValueStore(Protocol):
    """String key-value persistence contract."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-memory key-value store."""

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = str(value)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._entries)


class DomainStore(MemoryKeyValueStore):
    """Key-value store persisted through Home Assistant's Store.

    Reads and writes hit the in-memory entries synchronously. ``async_load``
    fills them from disk and ``async_save`` writes them back. One instance
    is kept per config entry in ``hass.data[DOMAIN][entry_id]["store"]``.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        key: str,
        version: int = CURRENT_SCHEMA_VERSION,
    ) -> None:
        super().__init__()
        self._hass = hass
        self._store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, key)
        self._key = key
        self._schema_version = version

    @property
    def schema_version(self) -> int:
        return self._schema_version

    @property
    def key(self) -> str:
        return self._key

    async def async_load(self) -> dict[str, Any]:
        """Load the persisted entries, applying migrations if needed.

        Replaces the in-memory entries and returns a copy of the payload.
        """

        raw = await self._store.async_load()
        if raw is None:
            payload = _empty_payload()
        else:
            payload = await self.async_migrate_if_needed(raw)

        entries = payload.get("entries")
        if not isinstance(entries, dict):
            raise StorageError("storage payload missing entries mapping")
        self._entries = {k: v for k, v in entries.items() if isinstance(v, str)}
        return deepcopy(payload)

    async def async_save(self) -> None:
        """Persist the in-memory entries with the current schema_version."""

        payload = {"schema_version": self._schema_version, "entries": self.snapshot()}
        await self._store.async_save(payload)

    async def async_migrate_if_needed(self, raw: Any) -> dict[str, Any]:
        """Migrate ``raw`` payload to the current schema iff needed.

        If a migration occurs, persist the migrated payload back to storage.
        Returns the migrated (or original) payload.
        """

        if not isinstance(raw, dict):  # Corrupted or unexpected
            _LOGGER.error(
                "Corrupted storage payload: expected dict, got %s",
                type(raw).__name__,
                extra={
                    "domain": DOMAIN,
                    "op": "migrate",
                    "from_version": None,
                    "to_version": self._schema_version,
                    "storage_key": self.key,
                },
            )
            raise StorageError("corrupted storage payload: not a dict")

        from_version = int(raw.get("schema_version", 0))
        to_version = self._schema_version
        if from_version == to_version:
            normalized = _empty_payload()
            normalized.update(raw)
            return normalized

        try:
            migrated = migrations.migrate(raw, from_version=from_version, to_version=to_version)
        except Exception as exc:
            # Do not overwrite on-disk payload; surface as a typed error
            _LOGGER.error(
                "Storage migration failed",
                extra={
                    "domain": DOMAIN,
                    "op": "migrate",
                    "from_version": from_version,
                    "to_version": to_version,
                    "storage_key": self.key,
                },
                exc_info=True,
            )
            raise StorageError("storage migration failed") from exc
        migrated.setdefault("entries", {})
        migrated["schema_version"] = to_version

        await self._store.async_save(migrated)
        return migrated


class ItemStore:
    """Ordered item collection persisted as one JSON array under ``key``.

    All operations work on full snapshots; there is no indexed access.
    """

    def __init__(self, kv: KeyValueStore, key: str) -> None:
        self._kv = kv
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def is_persisted(self) -> bool:
        return self._kv.get(self._key) is not None

    def load_all(self) -> list[Item]:
        """Deserialize the persisted collection.

        Returns an empty list when nothing is stored or the payload does not
        parse. Individual malformed records are skipped.
        """

        raw = self._kv.get(self._key)
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            _LOGGER.warning(
                "Persisted item collection is not valid JSON; starting empty",
                extra={"domain": DOMAIN, "op": "load_items", "storage_key": self._key},
            )
            return []
        if not isinstance(data, list):
            _LOGGER.warning(
                "Persisted item collection is not a list; starting empty",
                extra={"domain": DOMAIN, "op": "load_items", "storage_key": self._key},
            )
            return []

        items: list[Item] = []
        for index, record in enumerate(data):
            try:
                items.append(item_from_dict(record))
            except (AttributeError, TypeError, ValueError):
                _LOGGER.warning(
                    "Failed to load item from persisted state",
                    extra={
                        "domain": DOMAIN,
                        "op": "load_items",
                        "storage_key": self._key,
                        "index": index,
                    },
                    exc_info=True,
                )
                continue
        return items

    def replace_all(self, items: Iterable[Item]) -> None:
        """Serialize and store the full collection in a single write."""

        payload = json.dumps([item_to_dict(it) for it in items], ensure_ascii=False)
        self._kv.set(self._key, payload)

    def clear(self) -> None:
        self._kv.remove(self._key)


def _get_persist_lock(hass: HomeAssistant, entry_id: str) -> asyncio.Lock:
    """Get or create the persistence lock for one config entry."""

    bucket = hass.data.setdefault(DOMAIN, {}).setdefault(entry_id, {})
    if "persist_lock" not in bucket:
        bucket["persist_lock"] = asyncio.Lock()
    return bucket["persist_lock"]


async def async_persist_catalog(hass: HomeAssistant, entry_id: str) -> None:
    """Persist one catalog's key-value entries with exclusive locking.

    Fails fast with StorageError if the entry was never set up to avoid
    silent data loss.
    """

    lock = _get_persist_lock(hass, entry_id)
    async with lock:
        bucket = hass.data.get(DOMAIN, {}).get(entry_id) or {}
        store: DomainStore | None = bucket.get("store")
        if store is None:
            raise StorageError("storage manager not initialized; run integration setup")

        start_time = time.monotonic()
        try:
            await store.async_save()
        except Exception as exc:
            elapsed = time.monotonic() - start_time
            _LOGGER.error(
                "Failed to persist catalog",
                extra={
                    "domain": DOMAIN,
                    "op": "persist_failed",
                    "entry_id": entry_id,
                    "elapsed_ms": int(elapsed * 1000),
                },
                exc_info=True,
            )
            raise StorageError("failed to persist catalog") from exc
        elapsed = time.monotonic() - start_time
        _LOGGER.debug(
            "Catalog persisted successfully",
            extra={
                "domain": DOMAIN,
                "op": "persist_complete",
                "entry_id": entry_id,
                "elapsed_ms": int(elapsed * 1000),
            },
        )
