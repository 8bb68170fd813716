"""Offline tests for the exception taxonomy.

Scenarios:
- Every catalog error is a HomeAssistantError and keeps its message
- Validation errors carry stable snake_case codes
"""

from __future__ import annotations

import pytest
from custom_components.furniture_catalog.exceptions import (
    CatalogError,
    DuplicateNumberError,
    ImageTooLargeError,
    InvalidImageTypeError,
    MissingImageError,
    MissingRequiredFieldError,
    NegativePriceError,
    NoPriceProvidedError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from homeassistant.exceptions import HomeAssistantError


@pytest.mark.parametrize("exc_type", [ValidationError, NotFoundError, StorageError])
def test_hierarchy_and_message(exc_type) -> None:
    exc = exc_type("something went wrong")

    assert isinstance(exc, CatalogError)
    assert isinstance(exc, HomeAssistantError)
    assert str(exc) == "something went wrong"


@pytest.mark.parametrize(
    ("exc_type", "code"),
    [
        (ValidationError, "validation_error"),
        (InvalidImageTypeError, "invalid_image_type"),
        (ImageTooLargeError, "image_too_large"),
        (MissingImageError, "missing_image"),
        (MissingRequiredFieldError, "missing_required_field"),
        (NegativePriceError, "negative_price"),
        (NoPriceProvidedError, "no_price_provided"),
        (DuplicateNumberError, "duplicate_number"),
    ],
)
def test_validation_codes(exc_type, code) -> None:
    exc = exc_type("bad input")

    assert isinstance(exc, ValidationError)
    assert exc.code == code
