"""AI gateway base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..models import ExtractedItem, Recipe, SearchResult

if TYPE_CHECKING:
    from ..config import CestaConfig


class AIGateway(ABC):
    """The five request/response contracts with the generative AI service.

    Each call is a single round trip with no retry. Failures surface as the
    matching :mod:`cesta.errors` type, except :meth:`recipe_image`, which
    degrades to an empty string.
    """

    @abstractmethod
    async def text_to_items(self, text: str) -> list[ExtractedItem]:
        """Turn a free-text shopping list into items.

        Raises:
            ItemParseError: On transport errors or malformed output.
        """
        ...

    @abstractmethod
    async def image_to_items(
        self, image: bytes, mime_type: str
    ) -> list[ExtractedItem]:
        """Recognise products in a photo.

        Raises:
            ImageAnalysisError: If the image could not be analysed.
        """
        ...

    @abstractmethod
    async def suggest_recipes(self, ingredients: str) -> list[Recipe]:
        """Suggest recipes (normally three) for the given ingredients.

        Raises:
            RecipeSuggestionError: With a message fit for the user.
        """
        ...

    @abstractmethod
    async def recipe_image(self, title: str) -> str:
        """Return a data URI picturing the dish, or "" if none is available."""
        ...

    @abstractmethod
    async def grounded_search(self, query: str) -> SearchResult:
        """Answer a product question with web citations.

        Raises:
            SearchError: If the search failed.
        """
        ...


def create_gateway(config: CestaConfig) -> AIGateway:
    """Create an AI gateway based on configuration."""
    backend_name = config.ai.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiGateway

            gemini = config.ai.gemini
            return GeminiGateway(
                api_key=gemini.api_key,
                text_model=gemini.text_model,
                vision_model=gemini.vision_model,
                image_model=gemini.image_model,
                search_model=gemini.search_model,
            )
        case _:
            raise ValueError(
                f"Unknown AI backend: {backend_name!r} (supported: gemini)"
            )
