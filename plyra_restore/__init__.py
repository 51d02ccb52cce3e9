"""
plyra-restore — Tag-based undo journal for relational stores.

Part of the Plyra infrastructure suite.
https://plyra.dev

plyra-restore wraps a database so that every tagged write records the
statements that reverse it:

- Inserts are undone by deleting the created row
- Upserts over an existing row put its previous columns back
- Updates restore every affected row's prior values
- Deletes reinsert every removed row
- Raw INSERT/UPDATE/DELETE statements are classified and inverted alike

Quick Start::

    from plyra_restore import RestorableDatabase

    db = RestorableDatabase.open("app.db")
    db.update("items", {"title": "b"}, "id = ?", [1], tag="rename")
    db.restore("rename")

:copyright: (c) 2024 Plyra
:license: Apache-2.0
"""

from plyra_restore.config.schema import RestoreConfig
from plyra_restore.core.database import RestorableDatabase
from plyra_restore.core.steps import (
    ConflictPolicy,
    InverseSequence,
    InverseStep,
    RestoreReport,
    RowImage,
)
from plyra_restore.journal.classifier import (
    BaseStatementClassifier,
    ClassifiedStatement,
    StatementKind,
)
from plyra_restore.store.base import BaseStore, StatementResult
from plyra_restore.store.sqlite_store import SQLiteStore

__version__ = "0.1.0"
__author__ = "Plyra"
__license__ = "Apache-2.0"
__url__ = "https://plyra.dev"

__all__ = [
    # Main class
    "RestorableDatabase",
    # Enums
    "ConflictPolicy",
    "StatementKind",
    # Data models
    "InverseStep",
    "InverseSequence",
    "RowImage",
    "RestoreReport",
    "StatementResult",
    "ClassifiedStatement",
    "RestoreConfig",
    # Extension bases
    "BaseStore",
    "BaseStatementClassifier",
    # Stores
    "SQLiteStore",
    # Version
    "__version__",
]
