"""Structured-output schemas shared by the gateway backends."""

from __future__ import annotations

from pydantic import BaseModel, TypeAdapter

from ..models import ExtractedItem, Recipe


class ItemPayload(BaseModel):
    name: str
    # Constrained at request time; any string is accepted when parsing.
    category: str


class RecipePayload(BaseModel):
    title: str
    description: str
    ingredients: list[str]
    instructions: list[str]


_ITEMS = TypeAdapter(list[ItemPayload])
_RECIPES = TypeAdapter(list[RecipePayload])


def items_from_json(data) -> list[ExtractedItem]:
    """Validate decoded JSON as a list of items, keeping order.

    Raises:
        pydantic.ValidationError: If the data does not match the schema.
    """
    return [
        ExtractedItem(name=p.name, category=p.category)
        for p in _ITEMS.validate_python(data)
    ]


def recipes_from_json(data) -> list[Recipe]:
    return [
        Recipe(
            title=p.title,
            description=p.description,
            ingredients=list(p.ingredients),
            instructions=list(p.instructions),
        )
        for p in _RECIPES.validate_python(data)
    ]
