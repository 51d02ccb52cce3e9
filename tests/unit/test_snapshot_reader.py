"""Tests for the row snapshot reader."""

import pytest

from plyra_restore.exceptions import StoreError, UnsupportedTableError
from plyra_restore.journal.snapshot_reader import RowSnapshotReader


class TestResolveIdentity:
    def test_rowid_resolves_to_integer_primary_key(self, store):
        identity, columns = RowSnapshotReader(store).resolve_identity("items", "ROWID")
        assert identity == "id"
        assert columns == ["id", "title", "qty"]

    def test_rowid_prepended_without_alias(self, store):
        identity, columns = RowSnapshotReader(store).resolve_identity("notes", "rowid")
        assert identity == "rowid"
        assert columns == ["rowid", "body", "code"]

    def test_alias_matched_case_insensitively(self, store):
        identity, _ = RowSnapshotReader(store).resolve_identity("notes", "CODE")
        assert identity == "code"

    def test_unknown_identity_column(self, store):
        with pytest.raises(UnsupportedTableError):
            RowSnapshotReader(store).resolve_identity("items", "uuid")

    def test_unknown_table(self, store):
        with pytest.raises(StoreError):
            RowSnapshotReader(store).resolve_identity("nope", "ROWID")

    def test_composite_key_has_no_alias(self, conn, store):
        conn.execute("CREATE TABLE pairs (a INTEGER, b INTEGER, PRIMARY KEY (a, b))")
        identity, columns = RowSnapshotReader(store).resolve_identity("pairs", "ROWID")
        assert identity == "ROWID"
        assert columns == ["ROWID", "a", "b"]


class TestSnapshot:
    def test_captures_matching_rows_in_schema_order(self, store, seeded):
        images = RowSnapshotReader(store).snapshot("items", "qty > ?", [2])
        assert [img.values for img in images] == [
            {"id": 1, "title": "a", "qty": 5},
            {"id": 3, "title": "c", "qty": 9},
        ]
        assert all(img.identity_column == "id" for img in images)
        assert images[1].identity == 3

    def test_no_match_returns_empty(self, store, seeded):
        assert RowSnapshotReader(store).snapshot("items", "id = ?", [99]) == []

    def test_rowid_values_captured(self, store, seeded):
        images = RowSnapshotReader(store).snapshot("notes", None)
        assert [img.identity for img in images] == [1, 2]
        assert images[0].columns == ["ROWID", "body", "code"]

    def test_named_arguments(self, store, seeded):
        images = RowSnapshotReader(store).snapshot("items", "title = :t", {"t": "b"})
        assert [img.identity for img in images] == [2]

    def test_snapshot_has_no_side_effects(self, store, seeded, item_rows):
        before = item_rows()
        RowSnapshotReader(store).snapshot("items", None)
        assert item_rows() == before


class TestSnapshotIdentity:
    def test_existing_row(self, store, seeded):
        identity, image = RowSnapshotReader(store).snapshot_identity(
            "items", {"id": 2, "title": "z"}
        )
        assert identity == "id"
        assert image.values == {"id": 2, "title": "b", "qty": 1}

    def test_missing_row(self, store, seeded):
        _, image = RowSnapshotReader(store).snapshot_identity("items", {"id": 50})
        assert image is None

    def test_values_without_identity(self, store, seeded):
        _, image = RowSnapshotReader(store).snapshot_identity("items", {"title": "z"})
        assert image is None

    def test_alias_column(self, store, seeded):
        identity, image = RowSnapshotReader(store).snapshot_identity(
            "notes", {"code": "k2", "body": "new"}, identity_column="code"
        )
        assert identity == "code"
        assert image.values == {"body": "second", "code": "k2"}


class TestWithoutRowidTables:
    @pytest.fixture
    def codes(self, conn):
        conn.execute("CREATE TABLE codes (code TEXT PRIMARY KEY, label TEXT) WITHOUT ROWID")
        conn.execute("INSERT INTO codes VALUES ('x', 'one')")
        conn.commit()

    @pytest.mark.parametrize("name", ["ROWID", "oid", "_rowid_"])
    def test_row_id_name_unsupported(self, store, codes, name):
        with pytest.raises(UnsupportedTableError):
            RowSnapshotReader(store).resolve_identity("codes", name)

    def test_named_identity_still_resolves(self, store, codes):
        identity, columns = RowSnapshotReader(store).resolve_identity("codes", "code")
        assert identity == "code"
        assert columns == ["code", "label"]


class TestSnapshotConflicts:
    def test_row_matched_on_unique_column(self, store, seeded):
        images = RowSnapshotReader(store).snapshot_conflicts(
            "notes", {"body": "new", "code": "k2"}, [("ROWID",), ("code",)]
        )
        assert [image.values for image in images] == [
            {"ROWID": 2, "body": "second", "code": "k2"}
        ]

    def test_unset_and_null_keys_skipped(self, store, seeded):
        reader = RowSnapshotReader(store)
        assert reader.snapshot_conflicts("notes", {"body": "a"}, [("code",)]) == []
        assert reader.snapshot_conflicts("notes", {"code": None}, [("code",)]) == []

    def test_same_row_reported_once(self, store, seeded):
        images = RowSnapshotReader(store).snapshot_conflicts(
            "notes", {"rowid": 1, "code": "k1"}, [("ROWID",), ("code",)]
        )
        assert [image.identity for image in images] == [1]

    def test_rows_from_different_keys(self, store, seeded):
        images = RowSnapshotReader(store).snapshot_conflicts(
            "notes", {"rowid": 1, "code": "k2"}, [("ROWID",), ("code",)]
        )
        assert [image.identity for image in images] == [1, 2]
