"""Tests for legacy record migration."""

import pytest

from cesta.db.migrations import RECORD_VERSION, migrate_record, record_version


def test_completed_true_goes_to_pantry():
    migrated = migrate_record({"id": "1", "name": "Arroz", "completed": True})
    assert migrated["status"] == "IN_PANTRY"
    assert migrated["price"] == 0
    assert "completed" not in migrated
    assert migrated["v"] == RECORD_VERSION


@pytest.mark.parametrize(
    "record",
    [
        {"id": "1", "name": "Arroz", "completed": False},
        {"id": "1", "name": "Arroz"},
    ],
)
def test_completed_false_or_absent_goes_to_buy(record):
    assert migrate_record(record)["status"] == "TO_BUY"


def test_existing_status_kept():
    migrated = migrate_record(
        {"id": "1", "name": "Arroz", "status": "TO_BUY", "completed": True}
    )
    assert migrated["status"] == "TO_BUY"


def test_existing_price_kept_and_bad_price_zeroed():
    assert migrate_record({"id": "1", "name": "a", "price": 3.2})["price"] == 3.2
    assert migrate_record({"id": "1", "name": "a", "price": "x"})["price"] == 0
    assert migrate_record({"id": "1", "name": "a", "price": None})["price"] == 0


def test_input_not_mutated():
    record = {"id": "1", "name": "Arroz", "completed": True}
    migrate_record(record)
    assert record == {"id": "1", "name": "Arroz", "completed": True}


def test_current_records_never_remigrated():
    record = {
        "id": "1",
        "name": "Arroz",
        "status": "IN_PANTRY",
        "price": 0,
        "completed": False,
        "v": RECORD_VERSION,
    }
    assert migrate_record(record) is record


def test_migration_is_stable():
    once = migrate_record({"id": "1", "name": "Arroz", "completed": True})
    assert migrate_record(once) == once


def test_record_version():
    assert record_version({}) == 1
    assert record_version({"v": 2}) == 2
    assert record_version({"v": "2"}) == 1
