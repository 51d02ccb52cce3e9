"""Tests for the sqlglot-backed statement classifier."""

import pytest

from plyra_restore.exceptions import StatementParseError
from plyra_restore.journal.classifier import UNKNOWN, SqlglotClassifier, StatementKind


@pytest.fixture
def classifier() -> SqlglotClassifier:
    return SqlglotClassifier()


class TestClassify:
    def test_update_with_predicate(self, classifier):
        result = classifier.classify("UPDATE items SET title = ? WHERE id = ?")
        assert result.kind is StatementKind.UPDATE
        assert result.table == "items"
        assert result.predicate == "id = ?"
        assert result.predicate_parameters == 1

    def test_delete_with_compound_predicate(self, classifier):
        result = classifier.classify("DELETE FROM items WHERE qty > ? AND title = ?")
        assert result.kind is StatementKind.DELETE
        assert result.table == "items"
        assert result.predicate_parameters == 2

    def test_delete_without_predicate(self, classifier):
        result = classifier.classify("DELETE FROM items")
        assert result.kind is StatementKind.DELETE
        assert result.predicate is None
        assert result.predicate_parameters == 0

    def test_insert(self, classifier):
        result = classifier.classify("INSERT INTO items (title) VALUES ('x')")
        assert result.kind is StatementKind.INSERT
        assert result.table == "items"
        assert result.predicate is None

    def test_insert_without_column_list(self, classifier):
        result = classifier.classify("INSERT INTO notes VALUES ('a', 'b')")
        assert result.kind is StatementKind.INSERT
        assert result.table == "notes"

    def test_schema_qualified_table(self, classifier):
        result = classifier.classify("DELETE FROM main.items WHERE id = 1")
        assert result.table == "main.items"

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM items",
            "CREATE TABLE extra (a TEXT)",
            "DROP TABLE items",
        ],
    )
    def test_other_statements(self, classifier, sql):
        result = classifier.classify(sql)
        assert result.kind is StatementKind.OTHER
        assert result.table is None

    @pytest.mark.parametrize("sql", ["", "   "])
    def test_empty_statement(self, classifier, sql):
        with pytest.raises(StatementParseError):
            classifier.classify(sql)

    def test_unterminated_string(self, classifier):
        with pytest.raises(StatementParseError) as exc_info:
            classifier.classify("DELETE FROM items WHERE title = 'a")
        assert exc_info.value.sql == "DELETE FROM items WHERE title = 'a"


class TestSqliteVariants:
    def test_replace_into_is_a_replacing_insert(self, classifier):
        result = classifier.classify("REPLACE INTO items (id, title) VALUES (?, ?)")
        assert result.kind is StatementKind.INSERT
        assert result.table == "items"
        assert result.replaces is True
        assert result.overwrites is True
        assert result.columns == ("id", "title")

    def test_insert_or_replace(self, classifier):
        result = classifier.classify("INSERT OR REPLACE INTO items (id, title) VALUES (1, 'x')")
        assert result.replaces is True

    @pytest.mark.parametrize("policy", ["ROLLBACK", "ABORT", "FAIL", "IGNORE", "REPLACE"])
    def test_update_with_conflict_policy(self, classifier, policy):
        result = classifier.classify(f"UPDATE OR {policy} items SET title = ? WHERE id = ?")
        assert result.kind is StatementKind.UPDATE
        assert result.table == "items"
        assert result.predicate == "id = ?"
        assert result.predicate_parameters == 1

    def test_upsert_do_update(self, classifier):
        result = classifier.classify(
            "INSERT INTO items (id, title) VALUES (?, ?) "
            "ON CONFLICT(id) DO UPDATE SET title = excluded.title"
        )
        assert result.upsert_keys == ("id",)
        assert result.replaces is False
        assert result.overwrites is True

    def test_upsert_do_nothing_does_not_overwrite(self, classifier):
        result = classifier.classify(
            "INSERT INTO items (id, title) VALUES (1, 'x') ON CONFLICT DO NOTHING"
        )
        assert result.upsert_keys is None
        assert result.overwrites is False

    def test_plain_and_ignoring_inserts_do_not_overwrite(self, classifier):
        assert classifier.classify("INSERT INTO items (title) VALUES ('x')").overwrites is False
        assert (
            classifier.classify("INSERT OR IGNORE INTO items (title) VALUES ('x')").overwrites
            is False
        )


class TestBindRow:
    def test_parameters_and_literals(self, classifier):
        result = classifier.classify(
            "INSERT INTO items (id, title, qty) VALUES (?, 'lit', ?)"
        )
        assert result.bind_row([7, 3]) == {"id": 7, "title": "lit", "qty": 3}

    def test_null_and_numbers(self, classifier):
        result = classifier.classify("INSERT INTO items (id, title, qty) VALUES (4, NULL, 2.5)")
        assert result.bind_row(()) == {"id": 4, "title": None, "qty": 2.5}

    def test_schema_columns_used_without_column_list(self, classifier):
        result = classifier.classify("REPLACE INTO notes VALUES (?, 'k9')")
        assert result.bind_row(["b"], ["body", "code"]) == {"body": "b", "code": "k9"}

    def test_width_mismatch(self, classifier):
        result = classifier.classify("REPLACE INTO notes VALUES (?)")
        assert result.bind_row(["b"], ["body", "code"]) is None

    def test_multi_row_values_not_bound(self, classifier):
        result = classifier.classify(
            "INSERT OR REPLACE INTO items (id, title) VALUES (1, 'x'), (2, 'y')"
        )
        assert result.row is None
        assert result.bind_row(()) is None

    def test_computed_value_is_unknown(self, classifier):
        result = classifier.classify("INSERT INTO items (id, title) VALUES (abs(?), ?)")
        assert result.bind_row([-1, "t"]) == {"id": UNKNOWN, "title": "t"}
