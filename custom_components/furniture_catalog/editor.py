"""Create and update flow for catalog items.

The editor validates admin form input against the current collection and
commits it through ``ItemStore``. Validation failures never escape: they are
returned as a failed ``SaveResult`` with a stable error code, and neither the
in-memory nor the persisted collection changes.

Validation order (first failure wins):

1. uploaded image type, then size
2. missing image for a new item
3. required name, number and category
4. non-negative prices
5. at least one positive price
6. unique special number

The uploaded file is only read and encoded to a data URL once every check
has passed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .const import DOMAIN
from .exceptions import MissingImageError, NotFoundError, ValidationError
from .models import (
    Item,
    ItemForm,
    UploadedImage,
    apply_item_fields,
    create_item_from_fields,
    encode_data_url,
    ensure_unique_number,
    normalize_form,
    validate_item_fields,
    validate_upload,
)
from .pagination import Paginator
from .storage import ItemStore

LOGGER = logging.getLogger(__name__)

OP_CREATE = "create"
OP_UPDATE = "update"

ChangeCallback = Callable[[str, Item, list[Item]], None]


@dataclass(frozen=True)
class SaveResult:
    """Tagged outcome of a create/update attempt."""

    ok: bool
    item: Item | None = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def success(cls, item: Item) -> SaveResult:
        return cls(ok=True, item=item)

    @classmethod
    def failure(cls, exc: ValidationError) -> SaveResult:
        return cls(ok=False, error=exc.code, message=str(exc))


class ItemEditor:
    """Validates and commits item create/update operations."""

    def __init__(
        self,
        store: ItemStore,
        paginator: Paginator,
        *,
        on_change: ChangeCallback | None = None,
    ) -> None:
        self._store = store
        self._paginator = paginator
        self._on_change = on_change

    async def async_stage(
        self,
        form: ItemForm,
        upload: UploadedImage | None = None,
        editing_id: str | None = None,
    ) -> SaveResult:
        """Validate ``form`` and build the item it would produce.

        Nothing is persisted. Raises NotFoundError when ``editing_id`` does
        not name an existing item.
        """

        items = self._store.load_all()
        current: Item | None = None
        if editing_id is not None:
            current = next((it for it in items if it.id == editing_id), None)
            if current is None:
                raise NotFoundError("item not found")

        try:
            validate_upload(upload, is_new=current is None)
            fields = normalize_form(form)
            validate_item_fields(fields)
            ensure_unique_number(items, fields.number, exclude_id=editing_id)
        except ValidationError as exc:
            LOGGER.warning(
                str(exc),
                extra={
                    "domain": DOMAIN,
                    "op": "stage_item",
                    "error": exc.code,
                    "item_id": editing_id,
                },
            )
            return SaveResult.failure(exc)

        if upload is None:
            if current is None:
                return SaveResult.failure(MissingImageError("Please select an image file"))
            staged = apply_item_fields(current, fields, image=None)
            return SaveResult.success(staged)

        image = encode_data_url(upload.content_type, await upload.async_read())
        if current is None:
            staged = create_item_from_fields(fields, image=image)
        else:
            staged = apply_item_fields(current, fields, image=image)
        return SaveResult.success(staged)

    async def async_save(
        self,
        form: ItemForm,
        upload: UploadedImage | None = None,
        editing_id: str | None = None,
    ) -> SaveResult:
        """Validate and commit a create (no ``editing_id``) or an update."""

        result = await self.async_stage(form, upload, editing_id)
        if not result.ok or result.item is None:
            return result
        staged = result.item

        # Re-read after the image read suspended us; the number must still be free
        items = self._store.load_all()
        try:
            ensure_unique_number(items, staged.number, exclude_id=editing_id)
        except ValidationError as exc:
            return SaveResult.failure(exc)

        if editing_id is None:
            items.append(staged)
            op = OP_CREATE
        else:
            index = next((i for i, it in enumerate(items) if it.id == editing_id), None)
            if index is None:
                raise NotFoundError("item not found")
            items[index] = staged
            op = OP_UPDATE

        self._store.replace_all(items)
        self._paginator.reset()
        LOGGER.debug(
            "Item saved",
            extra={"domain": DOMAIN, "op": f"{op}_item", "item_id": staged.id},
        )
        if self._on_change is not None:
            self._on_change(op, staged, items)
        return result
