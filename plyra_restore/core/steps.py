"""
Journal Data Models
~~~~~~~~~~~~~~~~~~~

Defines the dataclasses that flow between the snapshot reader, the
inversion synthesizer, the tag ledger and the restore executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "ConflictPolicy",
    "InverseStep",
    "InverseSequence",
    "RowImage",
    "RestoreReport",
    "ROW_ID_NAMES",
    "is_row_id_name",
    "quote_identifier",
]

# Names SQLite resolves to the implicit row id when no column shadows them.
ROW_ID_NAMES = frozenset({"rowid", "oid", "_rowid_"})


def is_row_id_name(name: str) -> bool:
    """Check whether ``name`` refers to the implicit row id."""
    return name.lower() in ROW_ID_NAMES


def quote_identifier(name: str) -> str:
    """
    Quote a table or column name for use in generated SQL.

    Dotted names are quoted part by part so ``main.items`` keeps its
    schema qualifier. Reserved row-id names are left bare.
    """
    if is_row_id_name(name):
        return name
    return ".".join('"' + part.replace('"', '""') + '"' for part in name.split("."))


class ConflictPolicy(str, Enum):
    """Conflict resolution applied to a forward insert or update."""

    NONE = "NONE"
    ROLLBACK = "ROLLBACK"
    ABORT = "ABORT"
    FAIL = "FAIL"
    IGNORE = "IGNORE"
    REPLACE = "REPLACE"

    @property
    def clause(self) -> str:
        """The ``OR <policy>`` fragment, empty for NONE."""
        if self is ConflictPolicy.NONE:
            return ""
        return f" OR {self.value}"


@dataclass(frozen=True)
class InverseStep:
    """
    One executable action that reverses part of a forward write.

    Attributes:
        statement: SQL text with positional ``?`` placeholders.
        parameters: Values bound to the placeholders, in order.
    """

    statement: str
    parameters: tuple[Any, ...] = ()


InverseSequence = tuple[InverseStep, ...]


@dataclass(frozen=True)
class RowImage:
    """
    Full column state of a single row, read before it was overwritten.

    Attributes:
        table: The table the row was read from.
        identity_column: Column holding the row's stable identity.
        values: Column name to value, in schema order. Always contains
            ``identity_column``.
    """

    table: str
    identity_column: str
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> Any:
        """The row's identity value."""
        return self.values[self.identity_column]

    @property
    def columns(self) -> list[str]:
        return list(self.values)


@dataclass
class RestoreReport:
    """
    Outcome of restoring several tags.

    Attributes:
        restored: Tags whose inverse steps all executed.
        failed: Tags whose replay raised, mapped to the error.
        executed: Total inverse steps executed, including the steps
            that ran before a failure.
    """

    restored: list[str] = field(default_factory=list)
    failed: dict[str, Exception] = field(default_factory=dict)
    executed: int = 0

    @property
    def ok(self) -> bool:
        return not self.failed
