"""
plyra.restore — namespace bridge for plyra-restore.

Allows importing via:
    from plyra.restore import RestorableDatabase

This re-exports everything from the plyra_restore package.
"""

# Re-export the entire public API from plyra_restore
from plyra_restore import *  # noqa: F401, F403
from plyra_restore import (
    BaseStatementClassifier,
    BaseStore,
    ConflictPolicy,
    InverseStep,
    RestorableDatabase,
    SQLiteStore,
    __version__,
)

__all__ = [
    "RestorableDatabase",
    "ConflictPolicy",
    "InverseStep",
    "BaseStore",
    "BaseStatementClassifier",
    "SQLiteStore",
    "__version__",
]
