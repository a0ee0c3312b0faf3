"""Derived state for the list, recipe and search views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .categories import OTHER, group_by_category
from .models import ExtractedItem, ItemStatus, Recipe, ShoppingItem


class IngredientSelection:
    """Pantry item ids picked as recipe ingredients."""

    def __init__(self) -> None:
        self._ids: set[str] = set()

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def toggle(self, item_id: str) -> bool:
        """Add the id if absent, remove it if present.

        Returns:
            True if the id is selected afterwards.
        """
        if item_id in self._ids:
            self._ids.discard(item_id)
            return False
        self._ids.add(item_id)
        return True

    def clear(self) -> None:
        self._ids.clear()

    def selected_names(self, pantry: Iterable[ShoppingItem]) -> list[str]:
        """Names of selected items, in pantry order.

        Ids that are no longer in the pantry are skipped.
        """
        return [
            item.name
            for item in pantry
            if item.id in self._ids and item.status is ItemStatus.IN_PANTRY
        ]


def combine_ingredients(free_text: str, names: Iterable[str]) -> str:
    """Join free text and item names with ", ", dropping empty entries."""
    parts = [free_text, *names]
    return ", ".join(p for p in parts if p and p.strip())


def filter_by_status(
    items: Iterable[ShoppingItem], status: ItemStatus
) -> list[ShoppingItem]:
    return [i for i in items if i.status is status]


def spend_estimate(items: Iterable[ShoppingItem]) -> float:
    """Sum of prices of everything still to buy."""
    return sum(
        (i.price or 0.0 for i in items if i.status is ItemStatus.TO_BUY), 0.0
    )


def show_estimate(total: float) -> bool:
    return total > 0


def status_counts(items: Iterable[ShoppingItem]) -> dict[ItemStatus, int]:
    counts = {status: 0 for status in ItemStatus}
    for item in items:
        counts[item.status] += 1
    return counts


def recipe_to_items(recipe: Recipe) -> list[ShoppingItem]:
    """One new to-buy item per ingredient, filed under "Otros"."""
    return [ShoppingItem.create(name=ing, category=OTHER) for ing in recipe.ingredients]


def extracted_to_items(extracted: Iterable[ExtractedItem]) -> list[ShoppingItem]:
    return [ShoppingItem.create(name=e.name, category=e.category) for e in extracted]


@dataclass
class ListView:
    """What the list screen shows for one status."""

    status: ItemStatus
    groups: list[tuple[str, list[ShoppingItem]]] = field(default_factory=list)
    counts: dict[ItemStatus, int] = field(default_factory=dict)
    estimate: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def show_estimate(self) -> bool:
        return self.status is ItemStatus.TO_BUY and show_estimate(self.estimate)


def list_view(items: Iterable[ShoppingItem], status: ItemStatus) -> ListView:
    items = list(items)
    return ListView(
        status=status,
        groups=group_by_category(filter_by_status(items, status)),
        counts=status_counts(items),
        estimate=spend_estimate(items),
    )
