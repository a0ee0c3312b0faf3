"""Application controller: the single owner of UI state and actions."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .config import CestaConfig
from .db import ItemStore
from .errors import (
    ImageAnalysisError,
    InvalidPriceError,
    ItemParseError,
    RecipeSuggestionError,
    RequestValidationError,
    SearchError,
)
from .gateway import AIGateway, create_gateway
from .models import ItemStatus, Recipe, SearchResult, ShoppingItem
from .viewmodels import (
    IngredientSelection,
    ListView,
    combine_ingredients,
    extracted_to_items,
    list_view,
    recipe_to_items,
)

logger = logging.getLogger(__name__)

MSG_TEXT_FAILED = "No entendí bien. Intenta escribirlo más simple."
MSG_IMAGE_FAILED = "Error al analizar la imagen."
MSG_NO_INGREDIENTS = "Por favor, selecciona ingredientes o escribe algo."
MSG_SEARCH_FAILED = "No pudimos completar la búsqueda."


class Tab(str, Enum):
    LIST = "LIST"
    ADD = "ADD"
    INSPIRE = "INSPIRE"
    SEARCH = "SEARCH"


@dataclass
class AppState:
    tab: Tab = Tab.LIST
    list_status: ItemStatus = ItemStatus.TO_BUY
    loading: bool = False
    error: str | None = None
    notice: str | None = None
    ingredients_input: str = ""
    selection: IngredientSelection = field(default_factory=IngredientSelection)
    recipes: list[Recipe] = field(default_factory=list)
    selected_recipe: Recipe | None = None
    search_result: SearchResult | None = None


class RecipeImageLoader:
    """Fetches dish pictures for one recipe view.

    Each title gets its own task. Once the view is closed, pending tasks are
    cancelled and late results are dropped.
    """

    def __init__(self, gateway: AIGateway) -> None:
        self._gateway = gateway
        self._tasks: dict[str, asyncio.Task] = {}
        self._images: dict[str, str] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def request(self, title: str) -> asyncio.Task | None:
        """Start fetching the image for ``title`` (must run inside a loop)."""
        if self._closed:
            return None
        task = self._tasks.get(title)
        if task is None:
            task = asyncio.create_task(self._fetch(title))
            self._tasks[title] = task
        return task

    async def _fetch(self, title: str) -> None:
        url = await self._gateway.recipe_image(title)
        if self._closed or not url:
            return
        self._images[title] = url

    def get(self, title: str) -> str | None:
        return self._images.get(title)

    async def wait(self) -> None:
        """Wait for outstanding fetches; cancelled ones are ignored."""
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    def close(self) -> None:
        self._closed = True
        for task in self._tasks.values():
            task.cancel()
        self._tasks.clear()


class ShoppingApp:
    """Action handlers over the item store and the AI gateway.

    AI failures never propagate out of a handler; they end up as a
    user-visible message in ``state.error``.
    """

    def __init__(
        self,
        store: ItemStore,
        gateway: AIGateway,
        state: AppState | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.state = state or AppState()
        self.images: RecipeImageLoader | None = None

    @classmethod
    def from_config(cls, config: CestaConfig) -> ShoppingApp:
        setup_logging(config.logging.level)
        store = ItemStore(config.storage.db_path, config.storage.key)
        store.load()
        return cls(store, create_gateway(config))

    @property
    def items(self) -> list[ShoppingItem]:
        return self.store.items

    @property
    def pantry(self) -> list[ShoppingItem]:
        return self.store.by_status(ItemStatus.IN_PANTRY)

    def list_view(self) -> ListView:
        return list_view(self.store.items, self.state.list_status)

    # Navigation

    def change_tab(self, tab: Tab) -> None:
        tab = Tab(tab)
        if self.state.tab is Tab.INSPIRE and tab is not Tab.INSPIRE:
            self._close_images()
        self.state.tab = tab
        self.state.error = None

    def set_list_status(self, status: ItemStatus) -> None:
        self.state.list_status = ItemStatus(status)

    # List actions

    def toggle_status(self, item_id: str) -> ShoppingItem | None:
        return self.store.toggle_status(item_id)

    def update_item(self, item_id: str, **fields) -> ShoppingItem | None:
        """Edit an item from the list; a bad price or status leaves it as is."""
        try:
            return self.store.update(item_id, **fields)
        except InvalidPriceError as e:
            logger.info("Ignoring invalid price for %s: %s", item_id, e)
            return None
        except ValueError as e:
            logger.info("Ignoring invalid update for %s: %s", item_id, e)
            return None

    def set_price(self, item_id: str, raw: str) -> ShoppingItem | None:
        try:
            return self.store.set_price(item_id, raw)
        except InvalidPriceError as e:
            logger.info("Ignoring invalid price for %s: %s", item_id, e)
            return None

    def delete_item(self, item_id: str) -> None:
        self.store.remove(item_id)

    # Adding items

    async def add_from_text(self, text: str) -> list[ShoppingItem]:
        if not text.strip():
            return []
        self.state.loading = True
        self.state.error = None
        try:
            extracted = await self.gateway.text_to_items(text)
        except ItemParseError:
            self.state.error = MSG_TEXT_FAILED
            return []
        finally:
            self.state.loading = False
        return self._add_and_show(extracted_to_items(extracted))

    async def add_from_image(
        self, image: bytes, mime_type: str
    ) -> list[ShoppingItem]:
        self.state.loading = True
        self.state.error = None
        try:
            extracted = await self.gateway.image_to_items(image, mime_type)
        except ImageAnalysisError:
            self.state.error = MSG_IMAGE_FAILED
            return []
        finally:
            self.state.loading = False
        return self._add_and_show(extracted_to_items(extracted))

    async def add_from_image_file(self, path: str | Path) -> list[ShoppingItem]:
        data = Path(path).read_bytes()
        mime_type = mimetypes.guess_type(str(path))[0] or "image/jpeg"
        return await self.add_from_image(data, mime_type)

    def _add_and_show(self, items: list[ShoppingItem]) -> list[ShoppingItem]:
        self.store.add(items)
        self.change_tab(Tab.LIST)
        return items

    # Recipes

    def toggle_pantry_selection(self, item_id: str) -> bool:
        """Select or deselect a pantry item as an ingredient."""
        item = self.store.get(item_id)
        if item is None or item.status is not ItemStatus.IN_PANTRY:
            return False
        return self.state.selection.toggle(item_id)

    def combined_ingredients(self) -> str:
        """Build the suggestion request text.

        Raises:
            RequestValidationError: If there is nothing to ask about.
        """
        names = self.state.selection.selected_names(self.pantry)
        combined = combine_ingredients(self.state.ingredients_input, names)
        if not combined.strip():
            raise RequestValidationError(MSG_NO_INGREDIENTS)
        return combined

    async def suggest_recipes(self) -> list[Recipe]:
        try:
            combined = self.combined_ingredients()
        except RequestValidationError as e:
            self.state.error = str(e)
            return []

        self.state.loading = True
        self.state.error = None
        self.state.recipes = []
        self.state.selected_recipe = None
        self._close_images()
        try:
            recipes = await self.gateway.suggest_recipes(combined)
        except RecipeSuggestionError as e:
            self.state.error = e.message
            return []
        finally:
            self.state.loading = False

        self.state.recipes = recipes
        self.images = RecipeImageLoader(self.gateway)
        for recipe in recipes:
            self.images.request(recipe.title)
        return recipes

    def select_recipe(self, recipe: Recipe | None) -> None:
        self.state.selected_recipe = recipe

    def add_recipe_ingredients(self) -> list[ShoppingItem]:
        recipe = self.state.selected_recipe
        if recipe is None:
            return []
        items = self._add_and_show(recipe_to_items(recipe))
        self.state.notice = f"{len(items)} ingredientes añadidos a la lista."
        return items

    def _close_images(self) -> None:
        if self.images is not None:
            self.images.close()
            self.images = None

    # Search

    async def search(self, query: str) -> SearchResult | None:
        if not query.strip():
            return None
        self.state.loading = True
        self.state.error = None
        self.state.search_result = None
        try:
            result = await self.gateway.grounded_search(query)
        except SearchError:
            self.state.error = MSG_SEARCH_FAILED
            return None
        finally:
            self.state.loading = False
        self.state.search_result = result
        return result

    def close(self) -> None:
        self._close_images()
        self.store.close()


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once."""
    root = logging.getLogger()
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.setLevel(level.upper())
    root.addHandler(handler)
