"""Offline tests for the item editor.

Scenarios:
- Create with a valid image appends an item encoded as a data URL
- Each validation failure returns its error code and leaves the store as-is
- The uploaded file is never read when validation fails
- Update keeps id, created_at and the old image unless a new one is given
- Duplicate special numbers are rejected; keeping one's own number is fine
- Unknown edit targets raise NotFoundError
- A successful save resets pagination and reports the change
"""

from __future__ import annotations

import pytest
from custom_components.furniture_catalog.const import MAX_IMAGE_BYTES
from custom_components.furniture_catalog.editor import OP_CREATE, OP_UPDATE, ItemEditor
from custom_components.furniture_catalog.exceptions import NotFoundError
from custom_components.furniture_catalog.models import UploadedImage
from custom_components.furniture_catalog.pagination import Paginator
from custom_components.furniture_catalog.storage import ItemStore

STORAGE_KEY = "furnitureItems"


def _form(**overrides):
    form = {
        "name": "Bar chair",
        "arabic_name": "كرسي بار",
        "number": "9001",
        "category": "chairs",
        "description": "",
        "commercial_price": "480",
        "selling_price": "500",
    }
    form.update(overrides)
    return form


class _CountingUpload:
    """Upload whose reader records how often it was called."""

    def __init__(self, content_type: str = "image/png", size: int = 8) -> None:
        self.reads = 0

        async def _read() -> bytes:
            self.reads += 1
            return b"\x89PNG...."

        self.upload = UploadedImage(
            filename="chair.png", content_type=content_type, size=size, reader=_read
        )


@pytest.fixture
def store(kv, make_item) -> ItemStore:
    store = ItemStore(kv, STORAGE_KEY)
    store.replace_all(
        [
            make_item(id="a", number="0001", image="data:image/png;base64,OLD"),
            make_item(id="b", number="0002"),
        ]
    )
    return store


@pytest.fixture
def paginator() -> Paginator:
    return Paginator(12)


@pytest.mark.asyncio
async def test_create_appends_item_with_data_url(store, paginator) -> None:
    # Arrange
    changes = []
    editor = ItemEditor(store, paginator, on_change=lambda op, item, items: changes.append(op))
    upload = UploadedImage.from_bytes("chair.png", "image/png", b"abc")

    # Act
    result = await editor.async_save(_form(), upload)

    # Assert
    assert result.ok and result.error is None
    items = store.load_all()
    assert [it.number for it in items] == ["0001", "0002", "9001"]
    created = items[-1]
    assert created.id == result.item.id
    assert created.image == "data:image/png;base64,YWJj"
    assert created.commercial_price == 480.0
    assert created.arabic_name == "كرسي بار"
    assert changes == [OP_CREATE]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("form_overrides", "content_type", "size", "code"),
    [
        ({}, "application/pdf", 8, "invalid_image_type"),
        ({}, "image/png", MAX_IMAGE_BYTES + 1, "image_too_large"),
        ({"name": "  "}, "image/png", 8, "missing_required_field"),
        ({"category": ""}, "image/png", 8, "missing_required_field"),
        ({"selling_price": "-1"}, "image/png", 8, "negative_price"),
        ({"commercial_price": "", "selling_price": "abc"}, "image/png", 8, "no_price_provided"),
        ({"number": "0002"}, "image/png", 8, "duplicate_number"),
    ],
)
async def test_create_validation_failures(
    store, paginator, form_overrides, content_type, size, code
) -> None:
    """Failures return a tagged result, store nothing and never read the file."""

    # Arrange
    before = store.load_all()
    counting = _CountingUpload(content_type=content_type, size=size)
    editor = ItemEditor(store, paginator)

    # Act
    result = await editor.async_save(_form(**form_overrides), counting.upload)

    # Assert
    assert not result.ok
    assert result.error == code
    assert result.message
    assert result.item is None
    assert store.load_all() == before
    assert counting.reads == 0


@pytest.mark.asyncio
async def test_create_without_image_is_rejected(store, paginator) -> None:
    result = await ItemEditor(store, paginator).async_save(_form())

    assert result.error == "missing_image"


@pytest.mark.asyncio
async def test_stage_without_image_branches_on_target(store, paginator) -> None:
    editor = ItemEditor(store, paginator)

    created = await editor.async_stage(_form(number="9002"))
    updated = await editor.async_stage(_form(number="0001", name="Renamed"), None, "a")

    assert (created.ok, created.error) == (False, "missing_image")
    assert updated.ok
    assert updated.item.image == "data:image/png;base64,OLD"
    assert len(store.load_all()) == 2


@pytest.mark.asyncio
async def test_type_is_checked_before_missing_fields(store, paginator) -> None:
    counting = _CountingUpload(content_type="text/plain")

    result = await ItemEditor(store, paginator).async_save(_form(name=""), counting.upload)

    assert result.error == "invalid_image_type"


@pytest.mark.asyncio
async def test_update_keeps_identity_and_image(store, paginator) -> None:
    # Arrange
    original = store.load_all()[0]
    editor = ItemEditor(store, paginator)

    # Act
    result = await editor.async_save(_form(number="0001", name="Renamed"), None, "a")

    # Assert
    assert result.ok
    updated = store.load_all()[0]
    assert updated.id == "a"
    assert updated.created_at == original.created_at
    assert updated.image == "data:image/png;base64,OLD"
    assert updated.name == "Renamed"
    assert len(store.load_all()) == 2


@pytest.mark.asyncio
async def test_update_replaces_image_when_given(store, paginator) -> None:
    changes = []
    editor = ItemEditor(store, paginator, on_change=lambda op, item, items: changes.append(op))
    upload = UploadedImage.from_bytes("new.jpg", "image/jpeg", b"abc")

    result = await editor.async_save(_form(number="0001"), upload, "a")

    assert result.ok
    assert store.load_all()[0].image == "data:image/jpeg;base64,YWJj"
    assert changes == [OP_UPDATE]


@pytest.mark.asyncio
async def test_update_to_another_items_number_is_rejected(store, paginator) -> None:
    before = store.load_all()

    result = await ItemEditor(store, paginator).async_save(_form(number="0002"), None, "a")

    assert result.error == "duplicate_number"
    assert store.load_all() == before


@pytest.mark.asyncio
async def test_update_unknown_item_raises(store, paginator) -> None:
    with pytest.raises(NotFoundError):
        await ItemEditor(store, paginator).async_save(_form(), None, "missing")


@pytest.mark.asyncio
async def test_stage_does_not_persist(store, paginator) -> None:
    before = store.load_all()
    upload = UploadedImage.from_bytes("chair.png", "image/png", b"abc")

    result = await ItemEditor(store, paginator).async_stage(_form(), upload)

    assert result.ok
    assert result.item.number == "9001"
    assert store.load_all() == before


@pytest.mark.asyncio
async def test_save_resets_pagination(store, paginator, png_upload) -> None:
    paginator.reveal_more()
    assert paginator.visible_count == 24

    result = await ItemEditor(store, paginator).async_save(_form(), png_upload)

    assert result.ok
    assert paginator.visible_count == 12
