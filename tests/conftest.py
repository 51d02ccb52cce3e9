"""Shared fixtures for plyra-restore tests."""

from __future__ import annotations

import sqlite3
from collections.abc import Generator

import pytest

from plyra_restore import RestorableDatabase, SQLiteStore


@pytest.fixture
def conn(tmp_path) -> Generator[sqlite3.Connection, None, None]:
    """
    Create a real SQLite database with two tables.

    ``items`` aliases the row id through ``id INTEGER PRIMARY KEY``;
    ``notes`` has no alias and is keyed on the implicit ROWID.
    """
    conn = sqlite3.connect(str(tmp_path / "test.db"))
    conn.execute("""
        CREATE TABLE items (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            qty INTEGER DEFAULT 0
        )
    """)
    conn.execute("""
        CREATE TABLE notes (
            body TEXT,
            code TEXT UNIQUE
        )
    """)
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture
def store(conn) -> SQLiteStore:
    """SQLite store over the shared connection."""
    return SQLiteStore(conn)


@pytest.fixture
def db(store) -> RestorableDatabase:
    """Journaling database with default configuration."""
    return RestorableDatabase(store)


@pytest.fixture
def seeded(conn) -> sqlite3.Connection:
    """Populate ``items`` and ``notes`` with a few rows."""
    conn.executemany(
        "INSERT INTO items (id, title, qty) VALUES (?, ?, ?)",
        [(1, "a", 5), (2, "b", 1), (3, "c", 9)],
    )
    conn.executemany(
        "INSERT INTO notes (body, code) VALUES (?, ?)",
        [("first", "k1"), ("second", "k2")],
    )
    conn.commit()
    return conn


@pytest.fixture
def item_rows(conn):
    """Return a reader for the current ``items`` rows, ordered by id."""

    def read() -> list[tuple]:
        return conn.execute("SELECT id, title, qty FROM items ORDER BY id").fetchall()

    return read


@pytest.fixture
def note_rows(conn):
    """Return a reader for the current ``notes`` rows, ordered by rowid."""

    def read() -> list[tuple]:
        return conn.execute("SELECT rowid, body, code FROM notes ORDER BY rowid").fetchall()

    return read
