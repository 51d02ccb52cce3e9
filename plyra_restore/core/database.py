"""
RestorableDatabase — Main Facade
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

The primary entry point for plyra-restore. Wraps a store so that every
tagged write records the inverse steps that undo it, and exposes
restore by tag.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from plyra_restore.config.defaults import DEFAULT_CONFIG
from plyra_restore.config.loader import load_config, load_config_from_dict
from plyra_restore.config.schema import RestoreConfig
from plyra_restore.core.steps import ConflictPolicy, InverseSequence
from plyra_restore.exceptions import StatementParseError
from plyra_restore.journal.classifier import (
    UNKNOWN,
    BaseStatementClassifier,
    ClassifiedStatement,
    SqlglotClassifier,
    StatementKind,
)
from plyra_restore.journal.ledger import TagLedger, validate_tag
from plyra_restore.journal.restore_executor import RestoreExecutor
from plyra_restore.journal.snapshot_reader import RowSnapshotReader
from plyra_restore.journal.synthesizer import InversionSynthesizer
from plyra_restore.store.base import Args, BaseStore, StatementResult
from plyra_restore.store.sqlite_store import SQLiteStore

__all__ = ["RestorableDatabase"]

logger = logging.getLogger(__name__)


class RestorableDatabase:
    """
    Store wrapper that journals an inverse for every tagged write.

    Each write records under its tag, replacing whatever that tag held
    before. ``restore`` replays a tag's inverse steps once and forgets it.

    The forward write and the journal entry are not atomic, and rows
    captured before a write may be changed by a concurrent writer before
    the write runs. Recorded inverses live in memory only.
    """

    def __init__(
        self,
        store: BaseStore,
        classifier: BaseStatementClassifier | None = None,
        config: RestoreConfig | None = None,
    ) -> None:
        self._config = config or RestoreConfig()
        self._store = store
        self._classifier = classifier or SqlglotClassifier(
            dialect=self._config.classifier.dialect
        )
        self._row_id_column = self._config.journal.row_id_column

        # ── Subsystems ────────────────────────────────────────────
        self._ledger = TagLedger()
        self._reader = RowSnapshotReader(store)
        self._synthesizer = InversionSynthesizer()
        self._executor = RestoreExecutor(store, self._ledger)

    # ── Class Methods (constructors) ──────────────────────────────

    @classmethod
    def open(
        cls,
        path: str | None = None,
        config: RestoreConfig | None = None,
    ) -> RestorableDatabase:
        """
        Open a SQLite database with journaling.

        Args:
            path: Database file; defaults to the configured store path.
            config: Configuration; defaults to ``DEFAULT_CONFIG``.
        """
        config = config or load_config_from_dict(DEFAULT_CONFIG)
        store = SQLiteStore.connect(
            path or config.store.path,
            timeout=config.store.timeout,
            autocommit=config.store.autocommit,
        )
        return cls(store, config=config)

    @classmethod
    def from_config(cls, path: str) -> RestorableDatabase:
        """Open the database described by a YAML config file."""
        return cls.open(config=load_config(path))

    # ── Properties ─────────────────────────────────────────────────

    @property
    def store(self) -> BaseStore:
        return self._store

    @property
    def config(self) -> RestoreConfig:
        return self._config

    # ── Primary API: Recording writes ─────────────────────────────

    def insert(
        self,
        table: str,
        values: Mapping[str, Any],
        tag: str,
        conflict: ConflictPolicy = ConflictPolicy.NONE,
        row_id_column: str | None = None,
    ) -> int:
        """
        Insert a row and record its inverse under ``tag``.

        A ``REPLACE`` conflict policy is handled as an upsert, keyed on
        ``row_id_column``. Any other insert is inverted by row id.

        Returns:
            The new row id, or -1 if no row was written. Nothing is
            recorded in the latter case.
        """
        validate_tag(tag)
        if conflict is ConflictPolicy.REPLACE:
            return self.replace(table, values, tag, row_id_column)

        identity = self._reader.row_id_column(table)
        row_id = self._store.insert(table, values, conflict)
        self._record_insert(tag, table, identity, row_id)
        return row_id

    def replace(
        self,
        table: str,
        values: Mapping[str, Any],
        tag: str,
        row_id_column: str | None = None,
    ) -> int:
        """
        Insert or replace a row and record its inverse under ``tag``.

        If a row already holds the identity carried in ``values``, its
        columns are captured first and the inverse writes them back.
        Otherwise the inverse deletes the new row.

        Args:
            table: Target table.
            values: Column values, including the identity to upsert on.
            tag: Tag to record under.
            row_id_column: Identity column, defaults to the configured one.

        Returns:
            The row id written, or -1 if nothing was written.
        """
        validate_tag(tag)
        _, image = self._reader.snapshot_identity(
            table, values, row_id_column or self._row_id_column
        )
        row_id = self._store.insert(table, values, ConflictPolicy.REPLACE)
        if image is None:
            self._record_insert(tag, table, self._reader.row_id_column(table), row_id)
        elif row_id != -1:
            self._ledger.put(tag, self._synthesizer.for_overwrite(image))
        return row_id

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: str | None,
        where_args: Args,
        tag: str,
        conflict: ConflictPolicy = ConflictPolicy.NONE,
    ) -> int:
        """
        Update matching rows and record their prior values under ``tag``.

        The entry is recorded even when nothing matched, so an earlier
        entry under the same tag is discarded.

        Returns:
            Number of rows updated.
        """
        validate_tag(tag)
        images = self._reader.snapshot(table, where, where_args, self._row_id_column)
        count = self._store.update(table, values, where, where_args, conflict)
        self._ledger.put(tag, self._synthesizer.for_update(images))
        return count

    def delete(
        self,
        table: str,
        where: str | None,
        where_args: Args,
        tag: str,
    ) -> int:
        """
        Delete matching rows and record them under ``tag`` for reinsertion.

        Returns:
            Number of rows deleted.
        """
        validate_tag(tag)
        images = self._reader.snapshot(table, where, where_args, self._row_id_column)
        count = self._store.delete(table, where, where_args)
        self._ledger.put(tag, self._synthesizer.for_delete(images))
        return count

    def execute(self, sql: str, args: Args = (), *, tag: str) -> StatementResult:
        """
        Execute a raw statement and record its inverse under ``tag``.

        UPDATE and DELETE statements are inverted like ``update`` and
        ``delete``; an INSERT is inverted from the row id it produced.
        An INSERT that may overwrite rows (``OR REPLACE``, ``REPLACE
        INTO``, ``ON CONFLICT ... DO UPDATE``) first captures the rows it
        collides with, and its inverse writes them back. Other statements
        run without recording anything.

        Raises:
            StatementParseError: If the statement cannot be classified, or
                an overwriting INSERT does not bind every key value in a
                single ``VALUES`` row.
        """
        validate_tag(tag)
        statement = self._classifier.classify(sql)

        if statement.kind in (StatementKind.UPDATE, StatementKind.DELETE):
            predicate_args = self._predicate_args(args, statement.predicate_parameters)
            images = self._reader.snapshot(
                statement.table, statement.predicate, predicate_args, self._row_id_column
            )
            result = self._store.execute(sql, args)
            if statement.kind is StatementKind.UPDATE:
                sequence = self._synthesizer.for_update(images)
            else:
                sequence = self._synthesizer.for_delete(images)
            self._ledger.put(tag, sequence)
            return result

        if statement.kind is StatementKind.INSERT:
            if statement.overwrites:
                return self._execute_overwriting_insert(sql, args, tag, statement)
            identity = self._reader.row_id_column(statement.table)
            result = self._store.execute(sql, args)
            self._record_insert(tag, statement.table, identity, self._written_row_id(result))
            return result

        logger.debug("Statement kind %s is not journaled", statement.kind.value)
        return self._store.execute(sql, args)

    # ── Primary API: Ledger ───────────────────────────────────────

    def recorded_tags(self) -> frozenset[str]:
        """Return a snapshot of all tags with recorded inverses."""
        return self._ledger.tags()

    def has_tag(self, tag: str) -> bool:
        """Check whether ``tag`` has recorded inverses."""
        return self._ledger.contains(tag)

    def inverse_steps(self, tag: str) -> InverseSequence | None:
        """Return the inverse steps recorded under ``tag``, or None."""
        return self._ledger.get(tag)

    # ── Primary API: Restore ──────────────────────────────────────

    def restore(self, tags: str | Iterable[str]) -> int:
        """
        Undo the writes recorded under one tag or several.

        Args:
            tags: A tag, or an iterable of tags restored in order.

        Returns:
            Number of inverse steps executed. Unknown tags count 0.

        Raises:
            PartialRestoreError: A single tag's replay failed part way.
            RestoreFailedError: One or more of several tags failed.
        """
        if tags is None or isinstance(tags, str):
            return self._executor.restore(tags)
        return self._executor.restore_many(tags)

    def restore_all(self) -> int:
        """Undo every recorded tag."""
        return self._executor.restore_all()

    def close(self) -> None:
        """Close the store. Recorded inverses are kept."""
        self._store.close()

    def __repr__(self) -> str:
        return f"<RestorableDatabase store={self._store!r} tags={len(self._ledger)}>"

    # ── Internals ─────────────────────────────────────────────────

    def _execute_overwriting_insert(
        self,
        sql: str,
        args: Args,
        tag: str,
        statement: ClassifiedStatement,
    ) -> StatementResult:
        table = statement.table
        identity = self._reader.row_id_column(table)
        schema = [c.name for c in self._store.table_columns(table)]
        row = statement.bind_row(args, schema)
        if row is None:
            raise StatementParseError(
                "Overwriting INSERT must insert a single VALUES row", sql=sql
            )

        if statement.upsert_keys:
            keys = [statement.upsert_keys]
        else:
            keys = [(identity,), *self._store.unique_keys(table)]
        for key in keys:
            lowered = {column.lower() for column in key}
            if any(v is UNKNOWN for k, v in row.items() if k.lower() in lowered):
                raise StatementParseError(
                    f"Cannot determine the value of conflict key {key!r} before execution",
                    sql=sql,
                )

        images = self._reader.snapshot_conflicts(table, row, keys, identity)
        result = self._store.execute(sql, args)
        created = self._written_row_id(result)

        if statement.replaces:
            # REPLACE deletes every colliding row, then inserts a new one.
            sequence = self._synthesizer.for_insert(table, identity, created)
            sequence += self._synthesizer.for_delete(images)
        elif images:
            sequence = self._synthesizer.for_update(images)
        else:
            sequence = self._synthesizer.for_insert(table, identity, created)

        if not sequence:
            logger.debug("Insert into %s wrote no row; tag %r left unchanged", table, tag)
            return result
        self._ledger.put(tag, sequence)
        return result

    def _record_insert(self, tag: str, table: str, identity: str, row_id: int) -> None:
        if row_id == -1:
            logger.debug("Insert into %s wrote no row; tag %r left unchanged", table, tag)
            return
        self._ledger.put(tag, self._synthesizer.for_insert(table, identity, row_id))

    @staticmethod
    def _predicate_args(args: Args, count: int) -> Args:
        """Pick the arguments bound to the predicate out of a statement's arguments."""
        if isinstance(args, Mapping):
            return args
        if count == 0:
            return ()
        return tuple(args)[-count:]

    @staticmethod
    def _written_row_id(result: StatementResult) -> int:
        if result.rowcount > 0 and result.last_row_id is not None:
            return result.last_row_id
        return -1
