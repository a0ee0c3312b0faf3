"""SQLite-backed persistence for the shopping item collection."""

from .migrations import RECORD_VERSION, migrate_record
from .schema import open_database, quarantine
from .store import ItemStore, parse_price, parse_price_text

__all__ = [
    "ItemStore",
    "RECORD_VERSION",
    "open_database",
    "quarantine",
    "migrate_record",
    "parse_price",
    "parse_price_text",
]
