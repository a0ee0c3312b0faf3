"""Exception types raised by the item store, gateway and controller."""

from __future__ import annotations


class CestaError(Exception):
    """Base class for all cesta errors."""


class ItemParseError(CestaError):
    """The AI service returned malformed output for a text list."""


class ImageAnalysisError(CestaError):
    """The AI service could not analyse a photo."""


class RecipeSuggestionError(CestaError):
    """Recipe generation failed; ``message`` is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SearchError(CestaError):
    """Grounded product search failed."""


class RequestValidationError(CestaError):
    """A local precondition was not met; no request was sent."""


class ItemNotFoundError(CestaError, KeyError):
    """No item with the given id exists."""


class StorageCorruptError(CestaError):
    """The stored item collection could not be parsed."""


class InvalidPriceError(CestaError, ValueError):
    """A price was negative, NaN, infinite or not a number."""
