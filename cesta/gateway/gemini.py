"""Gemini API backend for the AI gateway."""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Iterable

from google import genai
from google.genai import types

from .. import categories
from ..errors import (
    ImageAnalysisError,
    ItemParseError,
    RecipeSuggestionError,
    SearchError,
)
from ..models import ExtractedItem, Recipe, SearchResult, Source
from . import AIGateway
from .schemas import RecipePayload, items_from_json, recipes_from_json

logger = logging.getLogger(__name__)

NO_RESULTS_TEXT = "No se encontró información."

# Whole reply wrapped in a markdown code block, optionally tagged (```json).
_FENCED = re.compile(r"^\s*```[\w-]*[ \t]*\n(.*?)\n?[ \t]*```\s*$", re.DOTALL)

_TEXT_PROMPT = """\
Convierte este texto de una lista de la compra en una lista JSON de productos.
Texto: "{text}"

Cada producto tiene 'name' (nombre corto en español) y 'category'.
Categorías permitidas: {categories}.
Usa la categoría más específica posible.
"""

_IMAGE_PROMPT = """\
Identifica los productos de supermercado que aparecen en esta imagen.
Devuelve una lista JSON de objetos con 'name' (nombre corto en español) y 'category'.
Categorías permitidas: {categories}.
Usa la categoría más específica posible; si dudas, usa '{other}'.
"""

_RECIPES_PROMPT = """\
Tengo estos ingredientes: "{ingredients}".
Sugiere 3 recetas creativas. Da prioridad a las que aprovechen el mayor número
de mis ingredientes para comprar lo mínimo; puedes suponer que tengo básicos
de despensa (sal, aceite, especias).

Cada receta tiene:
- title: nombre del plato.
- description: una frase apetecible que mencione los ingredientes clave.
- ingredients: lista completa de ingredientes con cantidades aproximadas.
- instructions: pasos de preparación.
"""

_IMAGE_GEN_PROMPT = (
    "A professional, delicious food photography shot of {title}. "
    "High resolution, appetizing."
)


def _item_list_schema() -> types.Schema:
    return types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(
            type=types.Type.OBJECT,
            properties={
                "name": types.Schema(type=types.Type.STRING),
                "category": types.Schema(
                    type=types.Type.STRING,
                    enum=list(categories.CATEGORIES),
                ),
            },
            required=["name", "category"],
        ),
    )


class GeminiGateway(AIGateway):
    """Talk to Google Gemini through the google-genai async client."""

    def __init__(
        self,
        api_key: str = "",
        text_model: str = "gemini-2.5-flash",
        vision_model: str = "gemini-3-pro-preview",
        image_model: str = "gemini-3-pro-image-preview",
        search_model: str = "gemini-2.5-flash",
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._text_model = text_model
        self._vision_model = vision_model
        self._image_model = image_model
        self._search_model = search_model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ValueError(
                    "Gemini API key is not set. "
                    "Check the config file or the GEMINI_API_KEY environment variable."
                )
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def _generate(
        self, model: str, contents: Any, config: types.GenerateContentConfig
    ) -> types.GenerateContentResponse:
        client = self._get_client()
        return await client.aio.models.generate_content(
            model=model, contents=contents, config=config
        )

    async def text_to_items(self, text: str) -> list[ExtractedItem]:
        prompt = _TEXT_PROMPT.format(text=text, categories=categories.prompt_list())
        cfg = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=_item_list_schema(),
        )
        try:
            response = await self._generate(self._text_model, prompt, cfg)
            return _parse_items(response.text)
        except Exception as e:
            logger.error("Gemini text parsing failed: %s", e)
            raise ItemParseError("No se pudo interpretar la lista.") from e

    async def image_to_items(
        self, image: bytes, mime_type: str
    ) -> list[ExtractedItem]:
        prompt = _IMAGE_PROMPT.format(
            categories=categories.prompt_list(), other=categories.OTHER
        )
        contents = [
            types.Part.from_bytes(data=image, mime_type=mime_type),
            types.Part.from_text(text=prompt),
        ]
        cfg = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=_item_list_schema(),
        )
        try:
            response = await self._generate(self._vision_model, contents, cfg)
            return _parse_items(response.text)
        except Exception as e:
            logger.error("Gemini image analysis failed: %s", e)
            raise ImageAnalysisError(
                "No se pudo analizar la imagen. Inténtalo de nuevo."
            ) from e

    async def suggest_recipes(self, ingredients: str) -> list[Recipe]:
        cfg = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=list[RecipePayload],
        )
        try:
            response = await self._generate(
                self._text_model, _RECIPES_PROMPT.format(ingredients=ingredients), cfg
            )
            return _parse_recipes(response.text)
        except Exception as e:
            logger.error("Gemini recipe suggestion failed: %s", e)
            raise RecipeSuggestionError(
                "No pude generar recetas. Intenta con otros ingredientes."
            ) from e

    async def recipe_image(self, title: str) -> str:
        cfg = types.GenerateContentConfig(
            image_config=types.ImageConfig(aspect_ratio="1:1", image_size="1K"),
        )
        try:
            response = await self._generate(
                self._image_model, _IMAGE_GEN_PROMPT.format(title=title), cfg
            )
            return _first_inline_image(response)
        except Exception as e:
            # Soft failure: the caller shows a placeholder instead.
            logger.warning("Gemini recipe image failed for %r: %s", title, e)
            return ""

    async def grounded_search(self, query: str) -> SearchResult:
        cfg = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        try:
            response = await self._generate(self._search_model, query, cfg)
            text = response.text or NO_RESULTS_TEXT
            sources = filter_sources(_grounding_webs(response))
        except Exception as e:
            logger.error("Gemini grounded search failed: %s", e)
            raise SearchError("Error al buscar información.") from e
        return SearchResult(text=text, sources=sources)


def _unwrap_json(text: str) -> str:
    """Return the JSON body of a reply, dropping a surrounding ``` block."""
    m = _FENCED.match(text)
    return m.group(1) if m else text.strip()


def _parse_items(text: str | None) -> list[ExtractedItem]:
    """Parse the JSON item array from Gemini's response."""
    if not text:
        return []
    return items_from_json(json.loads(_unwrap_json(text)))


def _parse_recipes(text: str | None) -> list[Recipe]:
    if not text:
        return []
    return recipes_from_json(json.loads(_unwrap_json(text)))


def _first_inline_image(response) -> str:
    """Return the first inline image part as a data URI, or ""."""
    for candidate in (response.candidates or [])[:1]:
        content = candidate.content
        for part in (content.parts if content else None) or []:
            blob = part.inline_data
            if blob is not None and blob.data:
                data = blob.data
                if isinstance(data, bytes):
                    data = base64.b64encode(data).decode("ascii")
                mime = blob.mime_type or "image/png"
                return f"data:{mime};base64,{data}"
    return ""


def _grounding_webs(response) -> list:
    candidates = response.candidates or []
    if not candidates:
        return []
    metadata = candidates[0].grounding_metadata
    if metadata is None:
        return []
    return [chunk.web for chunk in metadata.grounding_chunks or []]


def filter_sources(webs: Iterable) -> list[Source]:
    """Keep only citations that carry both a URI and a title, in order."""
    sources: list[Source] = []
    for web in webs:
        if web is None:
            continue
        uri = getattr(web, "uri", None)
        title = getattr(web, "title", None)
        if uri and title:
            sources.append(Source(uri=uri, title=title))
    return sources
