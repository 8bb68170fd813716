"""Service registration and handlers for the Furniture Catalog.

Exposes Home Assistant services under the ``furniture_catalog`` domain that
stand in for the storefront and admin UI: browsing with search, category and
facet filters, "load more" pagination, the item create/update/delete
actions and the display preferences. Input is validated with voluptuous
and operations are delegated to the loaded ``Catalog``.

Item form validation failures are returned in the service response with a
stable error code. Unknown items or catalogs raise ``ServiceValidationError``.
"""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import ServiceValidationError

from .const import ALL, DOMAIN, LANGUAGES, VARIANTS
from .editor import SaveResult
from .exceptions import CatalogError, NotFoundError, ValidationError
from .models import (
    Item,
    ItemForm,
    UploadedImage,
    calculate_profit,
    display_name,
    item_to_dict,
)
from .repository import Catalog
from .storage import async_persist_catalog

LOGGER = logging.getLogger(__name__)

SERVICE_ITEM_CREATE = "item_create"
SERVICE_ITEM_UPDATE = "item_update"
SERVICE_ITEM_DELETE = "item_delete"
SERVICE_RESET_DATA = "reset_data"
SERVICE_BROWSE = "browse"
SERVICE_SET_LANGUAGE = "set_language"
SERVICE_SET_THEME = "set_theme"


# -----------------------------
# Validation schemas
# -----------------------------

_PRICE = vol.Any(str, int, float, None)
_CATALOG = vol.In(list(VARIANTS))

_FORM_FIELDS = {
    vol.Optional("arabic_name"): vol.Any(str, None),
    vol.Optional("description"): vol.Any(str, None),
    vol.Optional("commercial_price"): _PRICE,
    vol.Optional("selling_price"): _PRICE,
    vol.Optional("image_path"): str,
    vol.Optional("catalog"): _CATALOG,
}

# Required fields are checked by the editor so callers get its error codes
SCHEMA_ITEM_CREATE = vol.Schema(
    {
        vol.Optional("name", default=""): vol.Any(str, None),
        vol.Optional("number", default=""): vol.Any(str, int, None),
        vol.Optional("category", default=""): vol.Any(str, None),
        **_FORM_FIELDS,
    }
)

SCHEMA_ITEM_UPDATE = vol.Schema(
    {
        vol.Required("item_id"): str,
        vol.Optional("name"): vol.Any(str, None),
        vol.Optional("number"): vol.Any(str, int, None),
        vol.Optional("category"): vol.Any(str, None),
        **_FORM_FIELDS,
    }
)

SCHEMA_ITEM_DELETE = vol.Schema(
    {
        vol.Required("item_id"): str,
        vol.Optional("confirm", default=False): bool,
        vol.Optional("catalog"): _CATALOG,
    }
)

SCHEMA_RESET_DATA = vol.Schema(
    {
        vol.Optional("confirm", default=False): bool,
        vol.Optional("catalog"): _CATALOG,
    }
)

SCHEMA_BROWSE = vol.Schema(
    {
        vol.Optional("search"): vol.Any(str, None),
        vol.Optional("category"): str,
        vol.Optional("facet"): str,
        vol.Optional("language"): vol.In(LANGUAGES),
        vol.Optional("load_more", default=0): vol.All(int, vol.Range(min=0)),
        vol.Optional("catalog"): _CATALOG,
    }
)

SCHEMA_SET_LANGUAGE = vol.Schema(
    {
        vol.Required("language"): vol.In(LANGUAGES),
        vol.Optional("catalog"): _CATALOG,
    }
)

# Omitting dark_mode falls back to the system theme
SCHEMA_SET_THEME = vol.Schema(
    {
        vol.Optional("dark_mode", default=None): vol.Any(bool, None),
        vol.Optional("catalog"): _CATALOG,
    }
)


# -----------------------------
# Internal helpers
# -----------------------------


def _resolve_entry(hass: HomeAssistant, catalog: str | None) -> tuple[str, Catalog]:
    """Return ``(entry_id, catalog)`` for the requested variant.

    Without an explicit variant the single loaded catalog is used.
    """

    loaded = [
        (entry_id, bucket)
        for entry_id, bucket in (hass.data.get(DOMAIN) or {}).items()
        if isinstance(bucket, dict) and "catalog" in bucket
    ]
    if catalog is not None:
        loaded = [(eid, b) for eid, b in loaded if b.get("variant") == catalog]
    if not loaded:
        raise ServiceValidationError(
            f"catalog {catalog} is not loaded" if catalog else "no catalog is loaded"
        )
    if len(loaded) > 1:
        raise ServiceValidationError("several catalogs are loaded; pass the catalog field")
    entry_id, bucket = loaded[0]
    return entry_id, bucket["catalog"]


def _log_domain_error(op: str, context: dict[str, Any], exc: Exception) -> None:
    LOGGER.warning(str(exc), extra={"domain": DOMAIN, "op": op, **context})


async def _async_open_image(hass: HomeAssistant, image_path: str) -> UploadedImage:
    """Describe an image file on the host without reading its content."""

    if not hass.config.is_allowed_path(image_path):
        raise ServiceValidationError(f"image path {image_path} is not in an allowed directory")

    path = Path(image_path)

    def _describe() -> tuple[str, int] | None:
        if not path.is_file():
            return None
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return content_type, path.stat().st_size

    described = await hass.async_add_executor_job(_describe)
    if described is None:
        raise ServiceValidationError(f"image file {image_path} does not exist")
    content_type, size = described

    async def _read() -> bytes:
        return await hass.async_add_executor_job(path.read_bytes)

    return UploadedImage(filename=path.name, content_type=content_type, size=size, reader=_read)


def _form_from_payload(payload: dict[str, Any], base: Item | None = None) -> ItemForm:
    """Build an editor form, taking omitted fields from ``base``."""

    form: ItemForm = {}
    if base is not None:
        form = ItemForm(
            name=base.name,
            arabic_name=base.arabic_name,
            number=base.number,
            category=base.category,
            description=base.description,
            commercial_price=base.commercial_price,
            selling_price=base.selling_price,
        )
    for key in (
        "name",
        "arabic_name",
        "number",
        "category",
        "description",
        "commercial_price",
        "selling_price",
    ):
        if key in payload:
            value = payload[key]
            if key == "number" and value is not None:
                value = str(value)
            form[key] = value  # type: ignore[literal-required]
    return form


def _save_response(result: SaveResult) -> dict[str, Any]:
    return {
        "ok": result.ok,
        "error": result.error,
        "message": result.message,
        "item": item_to_dict(result.item) if result.ok and result.item is not None else None,
    }


def _browse_item(catalog: Catalog, item: Item, language: str) -> dict[str, Any]:
    data = item_to_dict(item)
    data["displayName"] = display_name(item, language)
    data["categoryName"] = catalog.registry.display_name(item.category, language)
    profit = calculate_profit(item.commercial_price, item.selling_price)
    data["profit"] = None if profit is None else {"amount": profit[0], "percent": profit[1]}
    return data


# -----------------------------
# Service handlers (exported for tests)
# -----------------------------


async def service_item_create(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    op = SERVICE_ITEM_CREATE
    payload = SCHEMA_ITEM_CREATE(data)
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    upload = None
    if payload.get("image_path"):
        upload = await _async_open_image(hass, payload["image_path"])

    result = await catalog.async_save_item(_form_from_payload(payload), upload)
    if result.ok and result.item is not None:
        LOGGER.debug(
            "Service item_create created item",
            extra={"domain": DOMAIN, "op": op, "item_id": result.item.id},
        )
        await async_persist_catalog(hass, entry_id)
    return _save_response(result)


async def service_item_update(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    op = SERVICE_ITEM_UPDATE
    payload = SCHEMA_ITEM_UPDATE(data)
    item_id = payload["item_id"]
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    try:
        current = catalog.get_item(item_id)
    except NotFoundError as exc:
        _log_domain_error(op, {"item_id": item_id}, exc)
        raise ServiceValidationError(f"item {item_id} not found") from exc
    upload = None
    if payload.get("image_path"):
        upload = await _async_open_image(hass, payload["image_path"])

    result = await catalog.async_save_item(_form_from_payload(payload, current), upload, item_id)
    if result.ok:
        await async_persist_catalog(hass, entry_id)
    return _save_response(result)


async def service_item_delete(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    op = SERVICE_ITEM_DELETE
    payload = SCHEMA_ITEM_DELETE(data)
    item_id = payload["item_id"]
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    try:
        deleted = catalog.delete_item(item_id, confirmed=payload["confirm"])
    except NotFoundError as exc:
        _log_domain_error(op, {"item_id": item_id}, exc)
        raise ServiceValidationError(f"item {item_id} not found") from exc
    if deleted:
        await async_persist_catalog(hass, entry_id)
    else:
        LOGGER.debug(
            "Delete not confirmed; nothing removed",
            extra={"domain": DOMAIN, "op": op, "item_id": item_id},
        )
    return {"deleted": deleted}


async def service_reset_data(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    payload = SCHEMA_RESET_DATA(data)
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    if not payload["confirm"]:
        return {"reset": False, "items_count": len(catalog.items)}
    items = catalog.reset_data()
    await async_persist_catalog(hass, entry_id)
    return {"reset": True, "items_count": len(items)}


async def service_browse(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    op = SERVICE_BROWSE
    payload = SCHEMA_BROWSE(data)
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))

    if "language" in payload:
        catalog.set_language(payload["language"])
        await async_persist_catalog(hass, entry_id)
    if "search" in payload:
        catalog.set_search(payload["search"] or "")
    if "category" in payload:
        catalog.set_category(payload["category"])
    if "facet" in payload:
        catalog.set_facet(payload["facet"])
    for _ in range(payload["load_more"]):
        catalog.reveal_more()

    language = catalog.language
    filtered = catalog.filtered_items()
    visible = catalog.paginator.visible_slice(filtered)
    state = catalog.state
    LOGGER.debug(
        "Browse",
        extra={
            "domain": DOMAIN,
            "op": op,
            "catalog": catalog.name,
            "matched": len(filtered),
            "visible": len(visible),
        },
    )
    return {
        "language": language,
        "search": state.search,
        "category": state.category,
        "category_name": (
            catalog.registry.display_name(state.category, language)
            if state.category != ALL
            else None
        ),
        "facet": state.facet_value,
        "facets": [
            {"value": value, "label": label} for value, label in catalog.facet_choices(language)
        ],
        "counts": catalog.category_counts(),
        "total": len(filtered),
        "has_more": catalog.paginator.has_more(filtered),
        "items": [_browse_item(catalog, it, language) for it in visible],
    }


async def service_set_language(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    payload = SCHEMA_SET_LANGUAGE(data)
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    try:
        language = catalog.set_language(payload["language"])
    except ValidationError as exc:
        _log_domain_error(SERVICE_SET_LANGUAGE, {"language": payload["language"]}, exc)
        raise ServiceValidationError(str(exc)) from exc
    await async_persist_catalog(hass, entry_id)
    return {"language": language}


async def service_set_theme(hass: HomeAssistant, data: dict) -> dict[str, Any]:
    payload = SCHEMA_SET_THEME(data)
    entry_id, catalog = _resolve_entry(hass, payload.get("catalog"))
    preferences = catalog.preferences
    if payload["dark_mode"] is None:
        preferences.reset_dark_mode()
    else:
        preferences.set_dark_mode(payload["dark_mode"])
    LOGGER.debug(
        "Theme preference saved",
        extra={"domain": DOMAIN, "op": SERVICE_SET_THEME, "dark_mode": payload["dark_mode"]},
    )
    await async_persist_catalog(hass, entry_id)
    return {"dark_mode": preferences.dark_mode}


# -----------------------------
# Registration
# -----------------------------

_SERVICES = (
    (SERVICE_ITEM_CREATE, service_item_create, SCHEMA_ITEM_CREATE, SupportsResponse.OPTIONAL),
    (SERVICE_ITEM_UPDATE, service_item_update, SCHEMA_ITEM_UPDATE, SupportsResponse.OPTIONAL),
    (SERVICE_ITEM_DELETE, service_item_delete, SCHEMA_ITEM_DELETE, SupportsResponse.OPTIONAL),
    (SERVICE_RESET_DATA, service_reset_data, SCHEMA_RESET_DATA, SupportsResponse.OPTIONAL),
    (SERVICE_BROWSE, service_browse, SCHEMA_BROWSE, SupportsResponse.ONLY),
    (SERVICE_SET_LANGUAGE, service_set_language, SCHEMA_SET_LANGUAGE, SupportsResponse.OPTIONAL),
    (SERVICE_SET_THEME, service_set_theme, SCHEMA_SET_THEME, SupportsResponse.OPTIONAL),
)


def setup(hass: HomeAssistant) -> None:
    """Register furniture_catalog.* services on Home Assistant."""

    # Idempotent: several config entries share one set of services
    if hass.services.has_service(DOMAIN, SERVICE_BROWSE):
        return

    for name, handler, schema, supports_response in _SERVICES:

        async def _handle(call: ServiceCall, _handler=handler) -> ServiceResponse:
            try:
                return await _handler(hass, dict(call.data))
            except CatalogError as exc:
                _log_domain_error(call.service, {}, exc)
                raise

        # Home Assistant validates inputs against these schemas before
        # invoking the handler.
        hass.services.async_register(
            DOMAIN, name, _handle, schema=schema, supports_response=supports_response
        )


def unload(hass: HomeAssistant) -> None:
    """Remove every furniture_catalog.* service."""

    for name, *_ in _SERVICES:
        hass.services.async_remove(DOMAIN, name)
