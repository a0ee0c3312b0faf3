"""Tests for category normalization and grouping."""

import pytest

from cesta.categories import (
    CATEGORIES,
    OTHER,
    group_by_category,
    is_known,
    normalize,
    prompt_list,
)
from cesta.models import ShoppingItem


def _item(name, category=None):
    return ShoppingItem.create(name=name, category=category)


class TestCategories:
    def test_closed_set(self):
        assert len(CATEGORIES) == 19
        assert len(set(CATEGORIES)) == 19
        assert CATEGORIES[-1] == OTHER == "Otros"

    def test_prompt_list(self):
        text = prompt_list()
        assert text.startswith("Frutas, Verduras y Hortalizas")
        assert text.endswith("Mascotas, Otros")

    def test_is_known(self):
        assert is_known("Congelados")
        assert not is_known("congelados")
        assert not is_known(None)


class TestNormalize:
    @pytest.mark.parametrize("label", CATEGORIES)
    def test_known_unchanged(self, label):
        assert normalize(label) == label

    @pytest.mark.parametrize("raw", [None, "", "Fruta", "FRUTAS", " Frutas", "Dairy"])
    def test_unknown_becomes_other(self, raw):
        assert normalize(raw) == OTHER

    @pytest.mark.parametrize("raw", [None, "Bebé", "Lácteos", "Otros", "xyz"])
    def test_idempotent(self, raw):
        assert normalize(normalize(raw)) == normalize(raw)


class TestGroupByCategory:
    def test_declared_order_and_empty_groups_omitted(self):
        items = [
            _item("Detergente", "Limpieza y Hogar"),
            _item("Manzanas", "Frutas"),
            _item("Cosa rara", "Desconocida"),
            _item("Peras", "Frutas"),
        ]
        groups = group_by_category(items)

        assert [c for c, _ in groups] == ["Frutas", "Limpieza y Hogar", OTHER]
        assert [i.name for i in groups[0][1]] == ["Manzanas", "Peras"]
        assert [i.name for i in groups[2][1]] == ["Cosa rara"]

    def test_unknown_category_preserved_on_item(self):
        item = _item("Cosa rara", "Desconocida")
        group_by_category([item])
        assert item.category == "Desconocida"

    def test_missing_category_grouped_with_other(self):
        groups = group_by_category([_item("Sin categoría"), _item("Varios", OTHER)])
        assert len(groups) == 1
        assert groups[0][0] == OTHER
        assert len(groups[0][1]) == 2

    def test_empty(self):
        assert group_by_category([]) == []
