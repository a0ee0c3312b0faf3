"""Shopping item store with a durable SQLite mirror."""

from __future__ import annotations

import json
import logging
import math
import re
import sqlite3
from pathlib import Path
from typing import Iterable

from ..errors import InvalidPriceError, ItemNotFoundError, StorageCorruptError
from ..models import ItemStatus, ShoppingItem
from .migrations import RECORD_VERSION, migrate_record
from .schema import open_database, quarantine, read_value, write_value

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "category", "status", "price", "notes"})

# Leading number as typed in the price box, e.g. "2.5", "3€", ".75".
_PRICE_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_price(value) -> float:
    """Validate a price before it touches the store.

    Raises:
        InvalidPriceError: If the value is not a finite, non-negative number.
    """
    if isinstance(value, bool):
        raise InvalidPriceError(f"not a price: {value!r}")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise InvalidPriceError(f"not a price: {value!r}") from None
    if math.isnan(price) or math.isinf(price):
        raise InvalidPriceError(f"not a finite price: {value!r}")
    if price < 0:
        raise InvalidPriceError(f"negative price: {value!r}")
    return price


def parse_price_text(raw: str) -> float | None:
    """Read the leading number from user-typed price text, or None."""
    m = _PRICE_PREFIX.match(raw or "")
    if m is None:
        return None
    return float(m.group(0))


class ItemStore:
    """In-memory item collection, rewritten to SQLite after every change.

    The whole collection lives as one JSON document under ``storage_key``.
    """

    def __init__(
        self,
        db_path: str | Path = "~/.config/cesta/cesta.db",
        storage_key: str = "shopping-cart-items",
    ) -> None:
        self._db_path = db_path
        self._key = storage_key
        self._conn: sqlite3.Connection | None = None
        self._items: list[ShoppingItem] = []

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = open_database(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    @property
    def items(self) -> list[ShoppingItem]:
        return list(self._items)

    def load(self) -> list[ShoppingItem]:
        """Read the stored collection, migrating legacy records.

        Unparseable data yields an empty collection. A file that SQLite
        cannot read is moved aside and a fresh database is started.
        """
        try:
            raw = read_value(self._get_conn(), self._key)
        except sqlite3.DatabaseError as e:
            logger.warning("Item database is unreadable, starting empty: %s", e)
            self.close()
            quarantine(self._db_path)
            raw = None
        if raw is None:
            self._items = []
            return self.items

        try:
            records = _decode(raw)
        except StorageCorruptError as e:
            logger.warning("Stored items are unreadable, starting empty: %s", e)
            self._items = []
            return self.items

        items: list[ShoppingItem] = []
        seen: set[str] = set()
        for record in records:
            try:
                item = ShoppingItem.from_record(migrate_record(record))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("Skipping malformed stored item %r: %s", record, e)
                continue
            if item.id in seen:
                logger.warning("Skipping duplicate stored item id %s", item.id)
                continue
            seen.add(item.id)
            items.append(item)

        self._items = items
        logger.debug("Loaded %d items", len(items))
        return self.items

    def persist(self, items: Iterable[ShoppingItem] | None = None) -> None:
        """Overwrite the stored collection with ``items`` (default: current)."""
        if items is not None:
            self._items = list(items)
        payload = [
            {**item.to_record(), "v": RECORD_VERSION} for item in self._items
        ]
        write_value(
            self._get_conn(), self._key, json.dumps(payload, ensure_ascii=False)
        )

    def get(self, item_id: str) -> ShoppingItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def require(self, item_id: str) -> ShoppingItem:
        """Like get(), but raises ItemNotFoundError for an unknown id."""
        item = self.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def by_status(self, status: ItemStatus) -> list[ShoppingItem]:
        return [i for i in self._items if i.status is status]

    def count(self, status: ItemStatus) -> int:
        return sum(1 for i in self._items if i.status is status)

    def add(self, items: Iterable[ShoppingItem]) -> list[ShoppingItem]:
        """Append new items in order.

        Raises:
            ValueError: If an id is already present.
        """
        new_items = list(items)
        ids = {i.id for i in self._items}
        for item in new_items:
            if item.id in ids:
                raise ValueError(f"duplicate item id: {item.id}")
            ids.add(item.id)
        self._items.extend(new_items)
        self.persist()
        return new_items

    def update(self, item_id: str, **fields) -> ShoppingItem | None:
        """Apply partial changes to one item.

        An unknown id is ignored and returns None. A bad price raises
        InvalidPriceError and leaves the item untouched.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"cannot update field(s): {', '.join(sorted(unknown))}")

        if "price" in fields:
            fields["price"] = parse_price(fields["price"])
        if "status" in fields:
            fields["status"] = ItemStatus(fields["status"])

        item = self.get(item_id)
        if item is None:
            return None

        for name, value in fields.items():
            setattr(item, name, value)
        self.persist()
        return item

    def set_price(self, item_id: str, raw: str) -> ShoppingItem | None:
        """Set a price from typed text; unusable text is ignored."""
        price = parse_price_text(raw)
        if price is None or not math.isfinite(price) or price < 0:
            return None
        return self.update(item_id, price=price)

    def toggle_status(self, item_id: str) -> ShoppingItem | None:
        item = self.get(item_id)
        if item is None:
            return None
        item.status = item.status.toggled()
        self.persist()
        return item

    def remove(self, item_id: str) -> None:
        """Delete an item; unknown ids are ignored."""
        self._items = [i for i in self._items if i.id != item_id]
        self.persist()


def _decode(raw: str) -> list[dict]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageCorruptError(str(e)) from e
    if not isinstance(data, list):
        raise StorageCorruptError(f"expected a list, got {type(data).__name__}")
    return [r for r in data if isinstance(r, dict)]
