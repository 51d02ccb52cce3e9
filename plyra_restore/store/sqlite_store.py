"""
SQLite Store
~~~~~~~~~~~~

Store primitives implemented over the standard library ``sqlite3``
driver. Every write is committed on its own when ``autocommit`` is set,
so forward and inverse statements are independent of each other.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Mapping, Sequence
from typing import Any

from plyra_restore.core.steps import ConflictPolicy, quote_identifier
from plyra_restore.exceptions import ConstraintViolationError, StoreError
from plyra_restore.store.base import Args, BaseStore, ColumnInfo, StatementResult

__all__ = ["SQLiteStore"]

logger = logging.getLogger(__name__)

_WITHOUT_ROWID = re.compile(r"\bWITHOUT\s+ROWID\b", re.IGNORECASE)


def _where(predicate: str | None) -> str:
    return f" WHERE {predicate}" if predicate else ""


def _bind(values: Sequence[Any], args: Args) -> Sequence[Any] | Mapping[str, Any]:
    """Combine SET values with predicate arguments."""
    if isinstance(args, Mapping):
        if values:
            raise StoreError(
                "Named predicate arguments cannot be combined with positional values"
            )
        return args
    return [*values, *args]


class SQLiteStore(BaseStore):
    """
    Store backed by a ``sqlite3.Connection``.

    ``sqlite3.IntegrityError`` surfaces as ``ConstraintViolationError``;
    any other ``sqlite3.Error`` surfaces as ``StoreError``.
    """

    def __init__(self, connection: sqlite3.Connection, autocommit: bool = True) -> None:
        self._conn = connection
        self._autocommit = autocommit

    @classmethod
    def connect(
        cls,
        path: str = ":memory:",
        timeout: float = 5.0,
        autocommit: bool = True,
    ) -> SQLiteStore:
        """Open a new connection to the database at ``path``."""
        try:
            conn = sqlite3.connect(path, timeout=timeout, check_same_thread=False)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open SQLite database {path!r}: {exc}") from exc
        logger.debug("Opened SQLite database %s", path)
        return cls(conn, autocommit=autocommit)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def _run(self, sql: str, params: Args = ()) -> sqlite3.Cursor:
        try:
            cursor = self._conn.execute(sql, params)
            if self._autocommit and self._conn.in_transaction:
                self._conn.commit()
            return cursor
        except sqlite3.IntegrityError as exc:
            self._rollback_pending()
            raise ConstraintViolationError(str(exc), statement=sql) from exc
        except sqlite3.Error as exc:
            self._rollback_pending()
            raise StoreError(str(exc), statement=sql) from exc

    def _rollback_pending(self) -> None:
        if self._autocommit and self._conn.in_transaction:
            self._conn.rollback()

    def table_columns(self, table: str) -> list[ColumnInfo]:
        schema, _, name = table.rpartition(".")
        prefix = f"{quote_identifier(schema)}." if schema else ""
        cursor = self._run(f"PRAGMA {prefix}table_info({quote_identifier(name)})")
        columns = [
            ColumnInfo(name=row[1], declared_type=(row[2] or "").upper(), primary_key=row[5])
            for row in cursor.fetchall()
        ]
        if not columns:
            raise StoreError(f"No such table: {table}")
        return columns

    def unique_keys(self, table: str) -> list[tuple[str, ...]]:
        schema, _, name = table.rpartition(".")
        prefix = f"{quote_identifier(schema)}." if schema else ""
        indexes = self._run(f"PRAGMA {prefix}index_list({quote_identifier(name)})").fetchall()
        keys = []
        # seq, name, unique, origin, partial
        for row in indexes:
            if not row[2] or (len(row) > 4 and row[4]):
                continue
            info = self._run(f"PRAGMA {prefix}index_info({quote_identifier(row[1])})")
            columns = tuple(col[2] for col in info.fetchall())
            if columns and None not in columns:
                keys.append(columns)
        return keys

    def has_row_id(self, table: str) -> bool:
        schema, _, name = table.rpartition(".")
        master = f"{quote_identifier(schema)}.sqlite_master" if schema else "sqlite_master"
        row = self._run(
            f"SELECT sql FROM {master} WHERE type = 'table' AND name = ? COLLATE NOCASE",
            [name],
        ).fetchone()
        return not (row and row[0] and _WITHOUT_ROWID.search(row[0]))

    def query(
        self,
        table: str,
        columns: Sequence[str],
        predicate: str | None = None,
        args: Args = (),
    ) -> list[tuple[Any, ...]]:
        column_list = ", ".join(quote_identifier(c) for c in columns)
        sql = f"SELECT {column_list} FROM {quote_identifier(table)}{_where(predicate)}"
        return [tuple(row) for row in self._run(sql, args).fetchall()]

    def insert(
        self,
        table: str,
        values: Mapping[str, Any],
        conflict: ConflictPolicy = ConflictPolicy.NONE,
    ) -> int:
        target = quote_identifier(table)
        if values:
            cols = ", ".join(quote_identifier(c) for c in values)
            placeholders = ", ".join("?" * len(values))
            sql = f"INSERT{conflict.clause} INTO {target} ({cols}) VALUES ({placeholders})"
        else:
            sql = f"INSERT{conflict.clause} INTO {target} DEFAULT VALUES"
        cursor = self._run(sql, list(values.values()))
        if cursor.rowcount < 1 or cursor.lastrowid is None:
            return -1
        return cursor.lastrowid

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        predicate: str | None = None,
        args: Args = (),
        conflict: ConflictPolicy = ConflictPolicy.NONE,
    ) -> int:
        if not values:
            raise StoreError(f"Update of {table} has no values to set")
        set_clause = ", ".join(f"{quote_identifier(c)} = ?" for c in values)
        sql = (
            f"UPDATE{conflict.clause} {quote_identifier(table)} "
            f"SET {set_clause}{_where(predicate)}"
        )
        return self._run(sql, _bind(list(values.values()), args)).rowcount

    def delete(
        self,
        table: str,
        predicate: str | None = None,
        args: Args = (),
    ) -> int:
        sql = f"DELETE FROM {quote_identifier(table)}{_where(predicate)}"
        return self._run(sql, args).rowcount

    def execute(self, statement: str, args: Args = ()) -> StatementResult:
        cursor = self._run(statement, args)
        columns = [desc[0] for desc in cursor.description or ()]
        rows = [tuple(row) for row in cursor.fetchall()] if columns else []
        return StatementResult(
            rows=rows,
            columns=columns,
            rowcount=cursor.rowcount,
            last_row_id=cursor.lastrowid,
        )

    def close(self) -> None:
        self._conn.close()
        logger.debug("Closed SQLite store")

    def __repr__(self) -> str:
        return f"<SQLiteStore autocommit={self._autocommit}>"
