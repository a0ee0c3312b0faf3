"""Tests for opening the database and the key-value helpers."""

import sqlite3

import pytest

from cesta.db.schema import (
    SCHEMA_VERSION,
    open_database,
    quarantine,
    read_value,
    write_value,
)


def test_open_database_creates_kv_table(tmp_path):
    conn = open_database(tmp_path / "test.db")

    tables = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    ).fetchall()

    assert [row["name"] for row in tables] == ["kv_store"]
    conn.close()


def test_open_database_creates_parent_dirs(tmp_path):
    """Parent directories are created if they don't exist."""
    db_path = tmp_path / "sub" / "dir" / "test.db"
    conn = open_database(db_path)
    assert db_path.exists()
    conn.close()


def test_open_database_sets_user_version(tmp_path):
    conn = open_database(tmp_path / "test.db")
    (version,) = conn.execute("PRAGMA user_version").fetchone()
    assert version == SCHEMA_VERSION
    conn.close()


def test_open_database_keeps_existing_data(tmp_path):
    db_path = tmp_path / "test.db"
    conn = open_database(db_path)
    write_value(conn, "k", "[1]")
    conn.close()

    conn = open_database(db_path)
    assert read_value(conn, "k") == "[1]"
    conn.close()


def test_open_database_rejects_non_database_file(tmp_path):
    db_path = tmp_path / "test.db"
    db_path.write_bytes(b"this is not sqlite at all" * 100)

    with pytest.raises(sqlite3.DatabaseError):
        open_database(db_path)


def test_quarantine_moves_file_aside(tmp_path):
    db_path = tmp_path / "test.db"
    db_path.write_bytes(b"garbage")
    (tmp_path / "test.db.corrupt").write_bytes(b"older garbage")

    moved = quarantine(db_path)

    assert moved == tmp_path / "test.db.corrupt1"
    assert moved.read_bytes() == b"garbage"
    assert not db_path.exists()


def test_quarantine_missing_file(tmp_path):
    assert quarantine(tmp_path / "missing.db") is None


def test_read_missing_key(tmp_path):
    conn = open_database(tmp_path / "test.db")
    assert read_value(conn, "nothing") is None
    conn.close()


def test_write_replaces_whole_value(tmp_path):
    conn = open_database(tmp_path / "test.db")
    write_value(conn, "k", "[1, 2, 3]")
    write_value(conn, "k", "[]")

    assert read_value(conn, "k") == "[]"
    count = conn.execute("SELECT COUNT(*) AS n FROM kv_store").fetchone()["n"]
    assert count == 1
    conn.close()
