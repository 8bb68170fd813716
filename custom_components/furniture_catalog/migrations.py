"""Schema migrations for Furniture Catalog persistent storage.

Forward-only, idempotent migration steps. Each step receives and returns the
entire persisted dict payload. Steps must tolerate being applied more than once
without changing the outcome.
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any


def migrate(payload: dict[str, Any], *, from_version: int, to_version: int) -> dict[str, Any]:
    """Migrate ``payload`` from ``from_version`` to ``to_version``.

    Steps are applied sequentially: vN -> vN+1 -> ... -> vM.
    """

    if from_version > to_version:
        # We do not support downgrades; return the original as-is
        return payload

    data: dict[str, Any] = deepcopy(payload)
    version = int(from_version)
    while version < to_version:
        next_version = version + 1
        step = _STEPS.get(version)
        if step is not None:
            data = step(data)
        # If no step is defined, assume no-op for this transition
        version = next_version

    data["schema_version"] = to_version
    return data


def migrate_0_to_1(payload: dict[str, Any]) -> dict[str, Any]:
    """Move a flat key-value dump under ``entries``.

    A v0 payload is a browser local storage export: top-level string keys
    mapping to string values. Non-string values are dropped since the
    key-value contract only holds strings. Idempotent: a payload that already
    has ``entries`` keeps them.
    """

    data = deepcopy(payload) if isinstance(payload, dict) else {}
    entries = data.get("entries")
    if isinstance(entries, dict):
        return {"entries": {k: v for k, v in entries.items() if isinstance(v, str)}}
    flat = {
        k: v for k, v in data.items() if k != "schema_version" and isinstance(v, str)
    }
    return {"entries": flat}


_STEPS = {0: migrate_0_to_1}
