"""
Statement Classifier
~~~~~~~~~~~~~~~~~~~~

Translates raw write statements into the kind, target table and
predicate the inversion algorithms need. Parsing is delegated to
``sqlglot``; this module only adapts its syntax tree.

Inserts that may overwrite existing rows (``INSERT OR REPLACE``,
``REPLACE INTO`` and ``ON CONFLICT ... DO UPDATE``) also carry their
conflict target and, for a single ``VALUES`` row, where each value
comes from, so the rows they replace can be captured first.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from plyra_restore.exceptions import StatementParseError

__all__ = [
    "StatementKind",
    "ValueSource",
    "UNKNOWN",
    "ClassifiedStatement",
    "BaseStatementClassifier",
    "SqlglotClassifier",
]

logger = logging.getLogger(__name__)

# Marks an inserted value computed by an expression.
UNKNOWN = object()


class StatementKind(str, Enum):
    """Kinds of raw statement the journal distinguishes."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    OTHER = "other"


@dataclass(frozen=True)
class ValueSource:
    """
    Origin of one value in an INSERT's ``VALUES`` row.

    Exactly one of ``parameter`` (a positional index or a name) or
    ``literal`` applies; when ``known`` is False the value is computed
    by an expression and cannot be read before the statement runs.
    """

    parameter: int | str | None = None
    literal: Any = None
    known: bool = True

    def resolve(self, args: Sequence[Any] | Mapping[str, Any]) -> Any:
        if not self.known:
            return UNKNOWN
        if self.parameter is None:
            return self.literal
        if isinstance(args, Mapping):
            key = self.parameter
            return args.get(key, UNKNOWN) if isinstance(key, str) else UNKNOWN
        if isinstance(self.parameter, int) and self.parameter < len(args):
            return args[self.parameter]
        return UNKNOWN


@dataclass(frozen=True)
class ClassifiedStatement:
    """
    A raw statement reduced to what inversion needs.

    Attributes:
        kind: Statement kind.
        table: Target table, None for OTHER.
        predicate: WHERE expression as SQL text, None if absent.
        predicate_parameters: Number of placeholders in ``predicate``.
        replaces: INSERT resolves conflicts by replacing the old row.
        upsert_keys: Conflict target of an ``ON CONFLICT ... DO UPDATE``
            clause (empty if none was named), None without such a clause.
        columns: Column list of an INSERT, empty when omitted.
        row: Sources of a single-row ``VALUES`` list, None otherwise.
    """

    kind: StatementKind
    table: str | None = None
    predicate: str | None = None
    predicate_parameters: int = 0
    replaces: bool = False
    upsert_keys: tuple[str, ...] | None = None
    columns: tuple[str, ...] = ()
    row: tuple[ValueSource, ...] | None = None

    @property
    def overwrites(self) -> bool:
        """True if the INSERT may change rows that already exist."""
        return self.replaces or self.upsert_keys is not None

    def bind_row(
        self,
        args: Sequence[Any] | Mapping[str, Any],
        columns: Sequence[str] | None = None,
    ) -> dict[str, Any] | None:
        """
        Map the inserted row's columns to the values bound for them.

        Args:
            args: Arguments the statement is executed with.
            columns: Column names to use when the INSERT lists none.

        Returns:
            Column to value, with ``UNKNOWN`` for computed values. None
            if the statement has no single ``VALUES`` row or its width
            does not match the columns.
        """
        names = self.columns or tuple(columns or ())
        if self.row is None or len(names) != len(self.row):
            return None
        return {name: source.resolve(args) for name, source in zip(names, self.row)}


class BaseStatementClassifier(ABC):
    """Abstract base class for raw statement classifiers."""

    @abstractmethod
    def classify(self, sql: str) -> ClassifiedStatement:
        """
        Classify ``sql``.

        Raises:
            StatementParseError: If the text cannot be classified.
        """
        ...


_KINDS: dict[type[exp.Expression], StatementKind] = {
    exp.Insert: StatementKind.INSERT,
    exp.Update: StatementKind.UPDATE,
    exp.Delete: StatementKind.DELETE,
}

_WRITE_KEYWORDS = frozenset({"INSERT", "UPDATE", "DELETE", "REPLACE"})

# SQLite spellings the parser does not accept; the rewrite is only parsed,
# never executed.
_REPLACE_INTO = re.compile(r"^\s*REPLACE\b", re.IGNORECASE)
_UPDATE_OR = re.compile(
    r"^(\s*UPDATE)\s+OR\s+(?:ROLLBACK|ABORT|FAIL|IGNORE|REPLACE)\b", re.IGNORECASE
)


def _normalize(sql: str) -> tuple[str, bool]:
    """Rewrite SQLite-only forms; report whether the text was ``REPLACE INTO``."""
    if _REPLACE_INTO.match(sql):
        return _REPLACE_INTO.sub("INSERT OR REPLACE", sql, count=1), True
    return _UPDATE_OR.sub(r"\1", sql, count=1), False


def _table_name(node: exp.Expression) -> str | None:
    target = node.this
    if isinstance(target, exp.Schema):
        target = target.this
    if not isinstance(target, exp.Table):
        target = node.find(exp.Table)
    if target is None:
        return None
    return f"{target.db}.{target.name}" if target.db else target.name


def _literal(node: exp.Expression) -> tuple[bool, Any]:
    """Return ``(known, value)`` for a constant expression."""
    if isinstance(node, exp.Null):
        return True, None
    if isinstance(node, exp.Boolean):
        return True, int(bool(node.this))
    if isinstance(node, exp.Neg):
        known, value = _literal(node.this)
        if known and isinstance(value, (int, float)):
            return True, -value
        return False, None
    if isinstance(node, exp.Literal):
        if node.is_string:
            return True, node.this
        try:
            return True, int(node.this)
        except ValueError:
            try:
                return True, float(node.this)
            except ValueError:
                return False, None
    return False, None


def _value_sources(values: exp.Values) -> tuple[ValueSource, ...] | None:
    rows = values.expressions
    if len(rows) != 1:
        return None
    items = rows[0].expressions if isinstance(rows[0], exp.Tuple) else [rows[0]]

    sources = []
    position = 0
    for item in items:
        if isinstance(item, exp.Placeholder):
            name = item.name
            if not name:
                sources.append(ValueSource(parameter=position))
            elif name.isdigit():
                sources.append(ValueSource(parameter=int(name) - 1))
            else:
                sources.append(ValueSource(parameter=name))
            position += 1
            continue
        known, value = _literal(item)
        sources.append(ValueSource(literal=value, known=known))
        position += sum(1 for _ in item.find_all(exp.Placeholder))
    return tuple(sources)


def _upsert_keys(conflict: exp.Expression | None) -> tuple[str, ...] | None:
    if not isinstance(conflict, exp.OnConflict):
        return None
    action = str(conflict.args.get("action") or "").upper()
    if not conflict.expressions and "UPDATE" not in action:
        return None
    keys = conflict.args.get("conflict_keys") or []
    return tuple(key.name for key in keys)


class SqlglotClassifier(BaseStatementClassifier):
    """Classifier backed by the ``sqlglot`` parser."""

    def __init__(self, dialect: str = "sqlite") -> None:
        self._dialect = dialect

    def classify(self, sql: str) -> ClassifiedStatement:
        if not sql or not sql.strip():
            raise StatementParseError("Cannot classify an empty statement", sql=sql)
        text, replace_into = _normalize(sql)
        try:
            tree = sqlglot.parse_one(text, read=self._dialect)
        except SqlglotError as exc:
            raise StatementParseError(f"Cannot parse statement: {exc}", sql=sql) from exc

        if isinstance(tree, exp.Command):
            if str(tree.this).upper() in _WRITE_KEYWORDS:
                raise StatementParseError(
                    f"Cannot interpret {tree.this} statement", sql=sql
                )
            return ClassifiedStatement(StatementKind.OTHER)

        kind = next(
            (k for node_type, k in _KINDS.items() if isinstance(tree, node_type)),
            StatementKind.OTHER,
        )
        if kind is StatementKind.OTHER:
            return ClassifiedStatement(kind)

        table = _table_name(tree)
        if table is None:
            raise StatementParseError("Statement has no target table", sql=sql)

        if kind is StatementKind.INSERT:
            return self._classify_insert(tree, table, replace_into)

        where = tree.args.get("where")
        if where is None:
            return ClassifiedStatement(kind, table)

        predicate = where.this
        classified = ClassifiedStatement(
            kind,
            table,
            predicate.sql(dialect=self._dialect),
            sum(1 for _ in predicate.find_all(exp.Placeholder)),
        )
        logger.debug("Classified statement as %s on %s", kind.value, table)
        return classified

    def _classify_insert(
        self, tree: exp.Insert, table: str, replace_into: bool
    ) -> ClassifiedStatement:
        alternative = str(tree.args.get("alternative") or "").upper()
        replaces = replace_into or alternative == "REPLACE"

        target = tree.this
        columns: tuple[str, ...] = ()
        if isinstance(target, exp.Schema):
            columns = tuple(col.name for col in target.expressions)

        source = tree.expression
        row = _value_sources(source) if isinstance(source, exp.Values) else None

        classified = ClassifiedStatement(
            StatementKind.INSERT,
            table,
            replaces=replaces,
            upsert_keys=_upsert_keys(tree.args.get("conflict")),
            columns=columns,
            row=row,
        )
        logger.debug(
            "Classified statement as insert on %s (overwrites=%s)",
            table,
            classified.overwrites,
        )
        return classified
