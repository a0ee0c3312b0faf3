"""Shopping list and pantry client with Gemini-assisted item entry."""

from .app import AppState, RecipeImageLoader, ShoppingApp, Tab, setup_logging
from .categories import CATEGORIES, OTHER, group_by_category, normalize
from .config import CestaConfig, load_config
from .db import ItemStore
from .gateway import AIGateway, create_gateway
from .models import (
    ExtractedItem,
    ItemStatus,
    Recipe,
    SearchResult,
    ShoppingItem,
    Source,
)

__all__ = [
    "ShoppingApp",
    "AppState",
    "Tab",
    "RecipeImageLoader",
    "setup_logging",
    "ItemStore",
    "AIGateway",
    "create_gateway",
    "ShoppingItem",
    "ItemStatus",
    "ExtractedItem",
    "Recipe",
    "SearchResult",
    "Source",
    "CATEGORIES",
    "OTHER",
    "normalize",
    "group_by_category",
    "CestaConfig",
    "load_config",
]
