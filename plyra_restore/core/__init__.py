"""plyra-restore core module — data models and the recording database facade."""

from plyra_restore.core.steps import (
    ConflictPolicy,
    InverseSequence,
    InverseStep,
    RestoreReport,
    RowImage,
)

__all__ = [
    "ConflictPolicy",
    "InverseStep",
    "InverseSequence",
    "RowImage",
    "RestoreReport",
]
