"""
Row Snapshot Reader
~~~~~~~~~~~~~~~~~~~

Reads the full column state of rows before a destructive or
overwriting write runs, so the write can later be inverted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from plyra_restore.core.steps import RowImage, is_row_id_name, quote_identifier
from plyra_restore.exceptions import UnsupportedTableError
from plyra_restore.store.base import Args, BaseStore, ColumnInfo

__all__ = ["RowSnapshotReader"]

logger = logging.getLogger(__name__)


def _row_id_alias(columns: list[ColumnInfo]) -> str | None:
    """Return the INTEGER PRIMARY KEY column aliasing the row id, if any."""
    key = [c for c in columns if c.primary_key]
    if len(key) == 1 and key[0].declared_type == "INTEGER":
        return key[0].name
    return None


class RowSnapshotReader:
    """
    Captures ``RowImage``s through the store's query primitive.

    Column order follows the store's reported schema order, which is
    also the parameter order of every inverse step built from an image.
    """

    def __init__(self, store: BaseStore) -> None:
        self._store = store

    def resolve_identity(self, table: str, identity_column: str) -> tuple[str, list[str]]:
        """
        Resolve the identity column and the full column list to capture.

        A reserved row-id name resolves to the table's INTEGER PRIMARY KEY
        alias when one exists, and is rejected for a table without row ids.
        Any other name is matched case-insensitively against the schema.

        Returns:
            ``(identity, columns)`` where ``identity`` is always in ``columns``.
        """
        schema = self._store.table_columns(table)
        names = [c.name for c in schema]

        if is_row_id_name(identity_column):
            if not self._store.has_row_id(table):
                raise UnsupportedTableError(
                    f"Table {table} is declared WITHOUT ROWID; name an identity column"
                )
            alias = _row_id_alias(schema)
            if alias is not None:
                return alias, names
            if not any(n.lower() == identity_column.lower() for n in names):
                return identity_column, [identity_column, *names]

        for name in names:
            if name.lower() == identity_column.lower():
                return name, names

        raise UnsupportedTableError(
            f"Table {table} has no stable row identity column {identity_column!r}"
        )

    def row_id_column(self, table: str) -> str:
        """Return the column that holds ``table``'s row id: its alias, or ``ROWID``."""
        return self.resolve_identity(table, "ROWID")[0]

    def snapshot(
        self,
        table: str,
        predicate: str | None,
        args: Args = (),
        identity_column: str = "ROWID",
    ) -> list[RowImage]:
        """
        Read every row of ``table`` matching ``predicate``.

        Args:
            table: Table to read.
            predicate: SQL boolean expression; None captures every row.
            args: Values bound to the predicate's placeholders.
            identity_column: Row identity column (or a reserved row-id name).

        Returns:
            One image per matching row, in the order the store returned
            them. Empty if nothing matched.
        """
        identity, columns = self.resolve_identity(table, identity_column)
        rows = self._store.query(table, columns, predicate, args)
        images = [
            RowImage(table=table, identity_column=identity, values=dict(zip(columns, row)))
            for row in rows
        ]
        logger.debug("Captured %d row(s) of %s", len(images), table)
        return images

    def snapshot_identity(
        self,
        table: str,
        values: Mapping[str, Any],
        identity_column: str = "ROWID",
    ) -> tuple[str, RowImage | None]:
        """
        Capture the row an upsert of ``values`` would overwrite.

        The identity value is taken from ``values``. When ``values`` carries
        no identity the upsert can only create a new row, so no image is
        returned.

        Returns:
            ``(identity, image)`` with ``image`` None if no row holds the identity.
        """
        identity, _ = self.resolve_identity(table, identity_column)
        wanted = {identity.lower(), identity_column.lower()}
        key = next((k for k in values if k.lower() in wanted), None)
        if key is None or values[key] is None:
            return identity, None
        images = self.snapshot(table, f"{quote_identifier(identity)} = ?", [values[key]], identity)
        return identity, images[0] if images else None

    def snapshot_conflicts(
        self,
        table: str,
        values: Mapping[str, Any],
        keys: Iterable[Sequence[str]],
        identity_column: str = "ROWID",
    ) -> list[RowImage]:
        """
        Capture the rows an insert of ``values`` would collide with.

        Each key is a column set that must be unique. A key is skipped
        when ``values`` leaves one of its columns unset or NULL, since
        such a row cannot collide on it.

        Returns:
            Distinct images of the colliding rows, in key order.
        """
        lookup = {name.lower(): value for name, value in values.items()}
        images: dict[Any, RowImage] = {}
        for key in keys:
            bound = [lookup.get(column.lower()) for column in key]
            if any(value is None for value in bound):
                continue
            predicate = " AND ".join(f"{quote_identifier(column)} = ?" for column in key)
            for image in self.snapshot(table, predicate, bound, identity_column):
                images.setdefault(image.identity, image)
        return list(images.values())
