"""Versioned normalization of stored item records.

Version 1 records come from the first release of the list, which tracked a
boolean ``completed`` flag instead of a status and had no price. Version 2
records carry ``status`` and ``price`` and are left alone.
"""

from __future__ import annotations

from ..models import ItemStatus, coerce_price

RECORD_VERSION = 2


def record_version(record: dict) -> int:
    version = record.get("v", 1)
    if isinstance(version, int) and not isinstance(version, bool):
        return version
    return 1


def migrate_record(record: dict) -> dict:
    """Bring a stored record up to the current version.

    Returns a new dict; the input is not modified. Records already at the
    current version are returned as-is.
    """
    if record_version(record) >= RECORD_VERSION:
        return record

    migrated = dict(record)
    completed = migrated.pop("completed", False)
    if not migrated.get("status"):
        migrated["status"] = (
            ItemStatus.IN_PANTRY.value if completed else ItemStatus.TO_BUY.value
        )
    migrated["price"] = coerce_price(migrated.get("price") or 0)
    migrated["v"] = RECORD_VERSION
    return migrated
