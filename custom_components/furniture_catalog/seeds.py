"""Seed catalogs installed when a variant's persisted collection is empty."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

SEEDS_DIR = Path(__file__).parent / "seeds"


def load_seed_records(seed_file: str) -> list[dict[str, Any]]:
    """Read a seed file from ``seeds/`` (blocking; run in an executor).

    Records carry no ``id`` or ``createdAt``; both are assigned on install.
    """

    path = SEEDS_DIR / seed_file
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"seed file {seed_file} must hold a JSON array")
    return data
