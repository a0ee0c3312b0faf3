"""Data models for shopping items, recipes and search results."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum


class ItemStatus(str, Enum):
    """Which view an item belongs to: the to-buy list or the pantry."""

    TO_BUY = "TO_BUY"
    IN_PANTRY = "IN_PANTRY"

    def toggled(self) -> ItemStatus:
        if self is ItemStatus.TO_BUY:
            return ItemStatus.IN_PANTRY
        return ItemStatus.TO_BUY


def coerce_price(value) -> float:
    """Return a storable price: finite, non-negative, else 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(price) or math.isinf(price) or price < 0:
        return 0.0
    return price


@dataclass
class ShoppingItem:
    """A single entry of the shopping list or pantry."""

    id: str
    name: str
    category: str | None = None  # raw label, normalized only for display
    status: ItemStatus = ItemStatus.TO_BUY
    price: float = 0.0
    notes: str | None = None

    @classmethod
    def create(
        cls,
        name: str,
        category: str | None = None,
        price: float = 0.0,
        notes: str | None = None,
    ) -> ShoppingItem:
        """Create a new to-buy item with a fresh id."""
        return cls(
            id=uuid.uuid4().hex,
            name=name,
            category=category,
            status=ItemStatus.TO_BUY,
            price=coerce_price(price),
            notes=notes,
        )

    def to_record(self) -> dict:
        record: dict = {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "price": self.price,
        }
        if self.category is not None:
            record["category"] = self.category
        if self.notes is not None:
            record["notes"] = self.notes
        return record

    @classmethod
    def from_record(cls, record: dict) -> ShoppingItem:
        """Build an item from an already-migrated stored record.

        Raises:
            KeyError: If ``id`` or ``name`` is missing.
            ValueError: If ``status`` is not a known value.
        """
        category = record.get("category")
        notes = record.get("notes")
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            category=str(category) if category is not None else None,
            status=ItemStatus(record.get("status", ItemStatus.TO_BUY.value)),
            price=coerce_price(record.get("price", 0)),
            notes=str(notes) if notes is not None else None,
        )


@dataclass
class ExtractedItem:
    """An item recognised by the AI service in free text or a photo."""

    name: str
    category: str


@dataclass
class Recipe:
    title: str
    description: str
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)


@dataclass
class Source:
    """A web citation attached to a grounded search answer."""

    uri: str
    title: str


@dataclass
class SearchResult:
    text: str
    sources: list[Source] = field(default_factory=list)
