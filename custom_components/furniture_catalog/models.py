"""Typed models and validation helpers for the Furniture Catalog.

This module defines the persisted shape for catalog items, the input shape
for the admin item form, and the uploaded-image handle. It also provides the
validation helpers that enforce the item invariants (required fields,
pricing rules, unique special numbers, image constraints) and the
conversions between items and their persisted camelCase records.

The intent is to keep these models framework-agnostic and free of I/O. Higher
layers (editor, storage, services) are expected to compose these helpers.
"""

from __future__ import annotations

import base64
import math
import re
import uuid
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, TypedDict

from .const import IMAGE_CONTENT_TYPE_PREFIX, LANG_AR, MAX_IMAGE_BYTES
from .exceptions import (
    DuplicateNumberError,
    ImageTooLargeError,
    InvalidImageTypeError,
    MissingImageError,
    MissingRequiredFieldError,
    NegativePriceError,
    NoPriceProvidedError,
)


@dataclass
class Item:
    """Persisted shape for a catalog item."""

    id: str
    name: str
    number: str
    category: str
    arabic_name: str = ""
    description: str = ""
    commercial_price: float = 0.0
    selling_price: float = 0.0
    image: str | None = None
    created_at: str = field(default_factory=lambda: iso_utc_now())


class ItemForm(TypedDict, total=False):
    """Admin form input for creating or editing an item.

    Prices may arrive as numbers or raw strings; both are parsed leniently.
    """

    name: str
    arabic_name: str
    number: str
    category: str
    description: str
    commercial_price: str | float | int | None
    selling_price: str | float | int | None


@dataclass(frozen=True)
class ItemFields:
    """Trimmed and parsed form values, ready for validation."""

    name: str
    arabic_name: str
    number: str
    category: str
    description: str
    commercial_price: float
    selling_price: float


@dataclass(frozen=True)
class UploadedImage:
    """An uploaded image file whose content is read on demand.

    ``content_type`` and ``size`` describe the raw file and are checked before
    the content is ever read. ``reader`` returns the raw bytes.
    """

    filename: str
    content_type: str
    size: int
    reader: Callable[[], Awaitable[bytes]]

    async def async_read(self) -> bytes:
        return await self.reader()

    @classmethod
    def from_bytes(cls, filename: str, content_type: str, payload: bytes) -> UploadedImage:
        """Wrap an in-memory payload."""

        async def _read() -> bytes:
            return payload

        return cls(filename=filename, content_type=content_type, size=len(payload), reader=_read)


# -----------------------------
# Utility helpers
# -----------------------------


def iso_utc_now() -> str:
    """Return ISO-8601 UTC timestamp string with 'Z'."""

    now = datetime.now(tz=UTC)
    # No microseconds to keep it compact and stable
    return now.replace(microsecond=0).isoformat().replace("+00:00", "Z")


def new_item_id() -> str:
    """Generate an opaque unique item id."""

    return uuid.uuid4().hex


_FLOAT_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_price(value: Any) -> float:
    """Parse a price the way a lenient form does.

    Numbers pass through. Strings use their leading numeric prefix
    (``"12.5 EGP"`` -> 12.5). Missing, unparsable or non-finite values are 0.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        match = _FLOAT_PREFIX_RE.match(str(value))
        if match is None:
            return 0.0
        parsed = float(match.group(0))
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_form(form: ItemForm) -> ItemFields:
    """Trim text fields and parse prices from raw form input."""

    return ItemFields(
        name=_clean(form.get("name")),
        arabic_name=_clean(form.get("arabic_name")),
        number=_clean(form.get("number")),
        category=_clean(form.get("category")),
        description=_clean(form.get("description")),
        commercial_price=parse_price(form.get("commercial_price")),
        selling_price=parse_price(form.get("selling_price")),
    )


def display_name(item: Item, language: str) -> str:
    """Return the name shown in ``language``.

    In Arabic a non-empty ``arabic_name`` overrides ``name``.
    """

    if language == LANG_AR and item.arabic_name:
        return item.arabic_name
    return item.name


def facet_name(item: Item) -> str:
    """Return the name that facet rules match against (Arabic first)."""

    return item.arabic_name or item.name or ""


def calculate_profit(commercial_price: float, selling_price: float) -> tuple[float, float] | None:
    """Return ``(profit, percent)`` when both prices are positive, else None."""

    if commercial_price <= 0 or selling_price <= 0:
        return None
    profit = selling_price - commercial_price
    return profit, profit / commercial_price * 100


def encode_data_url(content_type: str, payload: bytes) -> str:
    """Encode raw bytes as a base64 ``data:`` URL."""

    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


# -----------------------------
# Validation helpers
# -----------------------------


def validate_upload(upload: UploadedImage | None, *, is_new: bool) -> None:
    """Validate an uploaded image against type and size limits.

    A new item must carry an image; edits may omit it to keep the old one.
    """

    if upload is not None:
        if not (upload.content_type or "").startswith(IMAGE_CONTENT_TYPE_PREFIX):
            raise InvalidImageTypeError("Please select a valid image file")
        if upload.size > MAX_IMAGE_BYTES:
            raise ImageTooLargeError("Image file size must be less than 5MB")
        return
    if is_new:
        raise MissingImageError("Please select an image file")


def validate_item_fields(fields: ItemFields) -> None:
    """Enforce required fields and pricing rules, first failure wins."""

    if not fields.name or not fields.number or not fields.category:
        raise MissingRequiredFieldError("Please fill in all required fields")
    if fields.commercial_price < 0 or fields.selling_price < 0:
        raise NegativePriceError("Prices cannot be negative")
    if fields.commercial_price == 0 and fields.selling_price == 0:
        raise NoPriceProvidedError("Please enter at least one price")


def ensure_unique_number(items: Iterable[Item], number: str, *, exclude_id: str | None) -> None:
    """Reject ``number`` if another item (not ``exclude_id``) already uses it."""

    for item in items:
        if item.number == number and item.id != exclude_id:
            raise DuplicateNumberError("An item with this special number already exists")


# -----------------------------
# Creation and update helpers
# -----------------------------


def create_item_from_fields(fields: ItemFields, *, image: str) -> Item:
    """Create a new Item with a fresh id and creation timestamp."""

    return Item(
        id=new_item_id(),
        name=fields.name,
        number=fields.number,
        category=fields.category,
        arabic_name=fields.arabic_name,
        description=fields.description,
        commercial_price=fields.commercial_price,
        selling_price=fields.selling_price,
        image=image,
        created_at=iso_utc_now(),
    )


def apply_item_fields(item: Item, fields: ItemFields, *, image: str | None = None) -> Item:
    """Merge validated fields over ``item`` and return a new instance.

    ``id`` and ``created_at`` are kept. The prior image is kept unless a new
    one is given.
    """

    return replace(
        item,
        name=fields.name,
        number=fields.number,
        category=fields.category,
        arabic_name=fields.arabic_name,
        description=fields.description,
        commercial_price=fields.commercial_price,
        selling_price=fields.selling_price,
        image=image if image is not None else item.image,
    )


# -----------------------------
# Persisted record conversion
# -----------------------------


def item_to_dict(item: Item) -> dict[str, Any]:
    """Serialize an item to its persisted camelCase record."""

    return {
        "id": item.id,
        "name": item.name,
        "arabicName": item.arabic_name,
        "number": item.number,
        "category": item.category,
        "image": item.image,
        "description": item.description,
        "commercialPrice": item.commercial_price,
        "sellingPrice": item.selling_price,
        "createdAt": item.created_at,
    }


def item_from_dict(data: dict[str, Any], *, id_factory: Callable[[], str] = new_item_id) -> Item:
    """Build an item from a persisted or seed record.

    Records without ``id`` or ``createdAt`` (seed data) get fresh values.
    Raises TypeError/ValueError/AttributeError on malformed records.
    """

    if not isinstance(data, dict):
        raise TypeError("item record must be an object")
    return Item(
        id=str(data.get("id") or id_factory()),
        name=str(data.get("name") or ""),
        number=str(data.get("number") or ""),
        category=str(data.get("category") or ""),
        arabic_name=str(data.get("arabicName") or ""),
        description=str(data.get("description") or ""),
        commercial_price=float(data.get("commercialPrice") or 0),
        selling_price=float(data.get("sellingPrice") or 0),
        image=data.get("image"),
        created_at=str(data.get("createdAt") or iso_utc_now()),
    )
