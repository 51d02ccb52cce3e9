"""plyra-restore journal — inverse capture, tag ledger, and replay."""

from plyra_restore.journal.classifier import (
    BaseStatementClassifier,
    ClassifiedStatement,
    SqlglotClassifier,
    StatementKind,
)
from plyra_restore.journal.ledger import TagLedger
from plyra_restore.journal.restore_executor import RestoreExecutor
from plyra_restore.journal.snapshot_reader import RowSnapshotReader
from plyra_restore.journal.synthesizer import InversionSynthesizer

__all__ = [
    "RowSnapshotReader",
    "InversionSynthesizer",
    "TagLedger",
    "RestoreExecutor",
    "BaseStatementClassifier",
    "ClassifiedStatement",
    "SqlglotClassifier",
    "StatementKind",
]
