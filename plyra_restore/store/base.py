"""
Base Store
~~~~~~~~~~

Abstract base class for the relational store the journal records
against. The journal never talks to a database driver directly; it
only uses the primitives declared here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from plyra_restore.core.steps import ConflictPolicy

__all__ = ["BaseStore", "ColumnInfo", "StatementResult", "Args"]

# Positional or named statement arguments.
Args = Sequence[Any] | Mapping[str, Any]


@dataclass(frozen=True)
class ColumnInfo:
    """
    Schema entry for one table column.

    Attributes:
        name: Column name as declared.
        declared_type: Declared type, upper-cased, possibly empty.
        primary_key: 1-based position in the primary key, 0 if not part of it.
    """

    name: str
    declared_type: str = ""
    primary_key: int = 0


@dataclass
class StatementResult:
    """
    Result of executing a raw statement.

    Attributes:
        rows: Rows produced by the statement, if any.
        columns: Column names of ``rows``.
        rowcount: Rows written, or -1 when the statement wrote nothing
            countable (e.g. a SELECT).
        last_row_id: Row id of the last inserted row, if any.
    """

    rows: list[tuple[Any, ...]] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    rowcount: int = -1
    last_row_id: int | None = None


class BaseStore(ABC):
    """
    Abstract base class for relational stores.

    Each store is responsible for:
    1. Reporting a table's columns in schema order (table_columns)
    2. Reading rows matching a predicate (query)
    3. Executing the typed writes and raw statements the journal records

    Write methods raise ``StoreError`` (or ``ConstraintViolationError``)
    when the engine rejects a statement.
    """

    @abstractmethod
    def table_columns(self, table: str) -> list[ColumnInfo]:
        """Return the table's columns in schema order."""
        ...

    @abstractmethod
    def query(
        self,
        table: str,
        columns: Sequence[str],
        predicate: str | None = None,
        args: Args = (),
    ) -> list[tuple[Any, ...]]:
        """
        Read ``columns`` of every row matching ``predicate``.

        Args:
            table: Table to read.
            columns: Columns to return, in this order.
            predicate: SQL boolean expression; None matches every row.
            args: Values bound to the predicate's placeholders.

        Returns:
            One tuple per row, values ordered like ``columns``.
        """
        ...

    @abstractmethod
    def insert(
        self,
        table: str,
        values: Mapping[str, Any],
        conflict: ConflictPolicy = ConflictPolicy.NONE,
    ) -> int:
        """
        Insert one row.

        Returns:
            The new row id, or -1 if no row was written.
        """
        ...

    @abstractmethod
    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        predicate: str | None = None,
        args: Args = (),
        conflict: ConflictPolicy = ConflictPolicy.NONE,
    ) -> int:
        """Update matching rows and return the affected row count."""
        ...

    @abstractmethod
    def delete(
        self,
        table: str,
        predicate: str | None = None,
        args: Args = (),
    ) -> int:
        """Delete matching rows and return the affected row count."""
        ...

    @abstractmethod
    def execute(self, statement: str, args: Args = ()) -> StatementResult:
        """Execute an arbitrary statement."""
        ...

    def unique_keys(self, table: str) -> list[tuple[str, ...]]:
        """
        Return the column sets of the table's unique constraints.

        Used to find the rows a replacing insert would remove. The
        default reports none.
        """
        return []

    def has_row_id(self, table: str) -> bool:
        """Check whether the table's rows carry an engine row id."""
        return True

    def close(self) -> None:
        """Release the store's resources."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
