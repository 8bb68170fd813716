"""Exception taxonomy for the Furniture Catalog integration.

Defines a small hierarchy of exceptions used across the catalog core and
the service layer. These extend Home Assistant's HomeAssistantError to
ensure consistent behavior when surfaced through the platform.

Item validation failures each carry a stable ``code``. The editor turns
them into tagged results instead of letting them escape to callers.

All exceptions accept a human-readable message. ``str(exception)`` returns the
message unchanged.
"""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class CatalogError(HomeAssistantError):
    """Base exception for catalog-related errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(CatalogError):
    """Raised when an item form fails validation or violates invariants."""

    code: str = "validation_error"


class InvalidImageTypeError(ValidationError):
    """Uploaded file is not an image."""

    code = "invalid_image_type"


class ImageTooLargeError(ValidationError):
    """Uploaded image exceeds the size limit."""

    code = "image_too_large"


class MissingImageError(ValidationError):
    """A new item was submitted without an image."""

    code = "missing_image"


class MissingRequiredFieldError(ValidationError):
    """Name, number or category is blank."""

    code = "missing_required_field"


class NegativePriceError(ValidationError):
    """A price is below zero."""

    code = "negative_price"


class NoPriceProvidedError(ValidationError):
    """Both prices are zero."""

    code = "no_price_provided"


class DuplicateNumberError(ValidationError):
    """Another item already uses the special number."""

    code = "duplicate_number"


class NotFoundError(CatalogError):
    """Raised when a requested item or catalog does not exist."""


class StorageError(CatalogError):
    """Raised when storage operations fail or data is corrupted."""
