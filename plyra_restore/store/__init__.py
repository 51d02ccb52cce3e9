"""Store primitives — the relational engine the journal records against."""

from plyra_restore.store.base import BaseStore, ColumnInfo, StatementResult
from plyra_restore.store.sqlite_store import SQLiteStore

__all__ = [
    "BaseStore",
    "ColumnInfo",
    "StatementResult",
    "SQLiteStore",
]
