"""Closed set of supermarket categories and grouping helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from .models import ShoppingItem

OTHER = "Otros"

# Declared order is also the display order of the grouped list.
CATEGORIES: tuple[str, ...] = (
    "Frutas",
    "Verduras y Hortalizas",
    "Carne y Aves",
    "Pescado y Marisco",
    "Charcutería y Quesos",
    "Lácteos y Huevos",
    "Panadería y Pastelería",
    "Pasta, Arroz y Legumbres",
    "Aceites, Salsas y Especias",
    "Conservas y Caldos",
    "Desayuno y Dulces",
    "Agua, Refrescos y Zumos",
    "Vinos y Licores",
    "Congelados",
    "Limpieza y Hogar",
    "Cuidado Personal",
    "Bebé",
    "Mascotas",
    OTHER,
)

_KNOWN = frozenset(CATEGORIES)


def is_known(label: str | None) -> bool:
    return label in _KNOWN


def normalize(raw: str | None) -> str:
    """Return ``raw`` if it is a known category, else ``"Otros"``."""
    if raw is not None and raw in _KNOWN:
        return raw
    return OTHER


def group_by_category(
    items: Iterable[ShoppingItem],
) -> list[tuple[str, list[ShoppingItem]]]:
    """Group items by normalized category in declared order.

    Empty groups are omitted; items keep their relative order.
    """
    grouped: dict[str, list[ShoppingItem]] = {c: [] for c in CATEGORIES}
    for item in items:
        grouped[normalize(item.category)].append(item)
    return [(c, grouped[c]) for c in CATEGORIES if grouped[c]]


def prompt_list() -> str:
    """Comma-joined category list for embedding in prompts."""
    return ", ".join(CATEGORIES)
