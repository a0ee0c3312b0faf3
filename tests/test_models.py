"""Tests for item, recipe and search data models."""

import math

import pytest

from cesta.models import ItemStatus, ShoppingItem, coerce_price


class TestItemStatus:
    def test_toggle_is_involution(self):
        for status in ItemStatus:
            assert status.toggled() is not status
            assert status.toggled().toggled() is status

    def test_values(self):
        assert {s.value for s in ItemStatus} == {"TO_BUY", "IN_PANTRY"}


class TestCoercePrice:
    @pytest.mark.parametrize(
        "raw,expected",
        [(1.5, 1.5), ("2", 2.0), (0, 0.0), (None, 0.0), ("abc", 0.0),
         (-3, 0.0), (math.nan, 0.0), (math.inf, 0.0), (True, 0.0)],
    )
    def test_coerce(self, raw, expected):
        assert coerce_price(raw) == expected


class TestShoppingItem:
    def test_create_defaults(self):
        item = ShoppingItem.create(name="Leche", category="Lácteos y Huevos")
        assert item.status is ItemStatus.TO_BUY
        assert item.price == 0.0
        assert item.notes is None
        assert len(item.id) == 32

    def test_create_unique_ids(self):
        ids = {ShoppingItem.create(name="x").id for _ in range(50)}
        assert len(ids) == 50

    def test_record_round_trip_keeps_unknown_category(self):
        item = ShoppingItem.create(name="Cosa", category="Inventada", price=2.5)
        item.notes = "marca blanca"
        record = item.to_record()
        assert record["category"] == "Inventada"
        assert ShoppingItem.from_record(record) == item

    def test_to_record_omits_unset_fields(self):
        record = ShoppingItem.create(name="Pan").to_record()
        assert "category" not in record
        assert "notes" not in record
        assert record["status"] == "TO_BUY"

    def test_from_record_bad_price(self):
        item = ShoppingItem.from_record(
            {"id": "1", "name": "Pan", "status": "TO_BUY", "price": "gratis"}
        )
        assert item.price == 0.0

    def test_from_record_requires_id_and_name(self):
        with pytest.raises(KeyError):
            ShoppingItem.from_record({"name": "Pan"})

    def test_from_record_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            ShoppingItem.from_record({"id": "1", "name": "Pan", "status": "DONE"})
