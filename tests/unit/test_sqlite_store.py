"""Tests for the SQLite store primitives."""

import sqlite3

import pytest

from plyra_restore import ConflictPolicy
from plyra_restore.core.steps import quote_identifier
from plyra_restore.exceptions import ConstraintViolationError, StoreError


class TestQuoteIdentifier:
    def test_plain(self):
        assert quote_identifier("items") == '"items"'

    def test_dotted(self):
        assert quote_identifier("main.items") == '"main"."items"'

    def test_embedded_quote(self):
        assert quote_identifier('odd"name') == '"odd""name"'

    @pytest.mark.parametrize("name", ["rowid", "ROWID", "oid", "_rowid_"])
    def test_row_id_names_left_bare(self, name):
        assert quote_identifier(name) == name


class TestSQLiteStore:
    def test_table_columns_in_schema_order(self, store):
        columns = store.table_columns("items")
        assert [c.name for c in columns] == ["id", "title", "qty"]
        assert columns[0].declared_type == "INTEGER"
        assert columns[0].primary_key == 1

    def test_table_columns_with_schema_prefix(self, store):
        assert [c.name for c in store.table_columns("main.notes")] == ["body", "code"]

    def test_insert_returns_row_id(self, store, item_rows):
        assert store.insert("items", {"title": "x"}) == 1
        assert item_rows() == [(1, "x", 0)]

    def test_ignored_insert_returns_minus_one(self, store, seeded):
        assert store.insert("items", {"id": 1, "title": "x"}, ConflictPolicy.IGNORE) == -1

    def test_constraint_violation(self, store, seeded):
        with pytest.raises(ConstraintViolationError) as exc_info:
            store.insert("items", {"id": 1, "title": "x"})
        assert "INSERT INTO" in exc_info.value.statement

    def test_update_and_delete_counts(self, store, seeded):
        assert store.update("items", {"qty": 0}, "qty > ?", [2]) == 2
        assert store.delete("items", "qty = ?", [0]) == 2

    def test_update_without_values(self, store, seeded):
        with pytest.raises(StoreError):
            store.update("items", {}, None)

    def test_query(self, store, seeded):
        rows = store.query("items", ["title", "id"], "id < ?", [3])
        assert rows == [("a", 1), ("b", 2)]

    def test_execute_select(self, store, seeded):
        result = store.execute("SELECT id, title FROM items WHERE id = ?", [2])
        assert result.columns == ["id", "title"]
        assert result.rows == [(2, "b")]

    def test_execute_error(self, store):
        with pytest.raises(StoreError):
            store.execute("SELECT * FROM nowhere")

    def test_writes_are_committed(self, store, tmp_path):
        store.insert("items", {"title": "durable"})
        other = sqlite3.connect(str(tmp_path / "test.db"))
        try:
            assert other.execute("SELECT title FROM items").fetchall() == [("durable",)]
        finally:
            other.close()


class TestSchemaIntrospection:
    def test_unique_keys(self, store):
        assert store.unique_keys("notes") == [("code",)]

    def test_integer_primary_key_is_not_an_index(self, store):
        assert store.unique_keys("items") == []

    def test_composite_and_partial_unique_indexes(self, conn, store):
        conn.execute("CREATE TABLE pairs (a TEXT, b TEXT, c TEXT)")
        conn.execute("CREATE UNIQUE INDEX pairs_ab ON pairs (a, b)")
        conn.execute("CREATE UNIQUE INDEX pairs_c ON pairs (c) WHERE c IS NOT NULL")
        conn.execute("CREATE INDEX pairs_b ON pairs (b)")
        assert store.unique_keys("pairs") == [("a", "b")]

    def test_has_row_id(self, conn, store):
        conn.execute("CREATE TABLE codes (code TEXT PRIMARY KEY, label TEXT) WITHOUT ROWID")
        assert store.has_row_id("items") is True
        assert store.has_row_id("notes") is True
        assert store.has_row_id("codes") is False
        assert store.has_row_id("main.codes") is False
