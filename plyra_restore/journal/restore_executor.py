"""
Restore Executor
~~~~~~~~~~~~~~~~

Consumes tags from the ledger and replays their inverse steps against
the store, in recorded order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from plyra_restore.core.steps import RestoreReport
from plyra_restore.exceptions import PartialRestoreError, RestoreFailedError
from plyra_restore.journal.ledger import TagLedger, validate_tag
from plyra_restore.store.base import BaseStore

__all__ = ["RestoreExecutor"]

logger = logging.getLogger(__name__)


class RestoreExecutor:
    """
    Replays recorded inverse sequences.

    Handles:
    - Single tag restore, stop-on-error within the tag
    - Multi-tag restore, best-effort across tags
    - Restore of every recorded tag
    """

    def __init__(self, store: BaseStore, ledger: TagLedger) -> None:
        self._store = store
        self._ledger = ledger

    def restore(self, tag: str) -> int:
        """
        Restore a single tag.

        The tag is removed from the ledger before its first step runs, so
        it is consumed even if replay fails part way.

        Args:
            tag: The tag to restore.

        Returns:
            Number of inverse steps executed; 0 for an unknown tag.

        Raises:
            PartialRestoreError: If a step fails. Earlier steps stay applied.
        """
        steps = self._ledger.pop(tag)
        if steps is None:
            logger.debug("Nothing recorded under tag %r", tag)
            return 0

        executed = 0
        for step in steps:
            try:
                self._store.execute(step.statement, step.parameters)
            except Exception as exc:
                logger.warning(
                    "Restore of tag %r stopped after %d of %d steps: %s",
                    tag,
                    executed,
                    len(steps),
                    exc,
                )
                raise PartialRestoreError(tag, executed, len(steps)) from exc
            executed += 1

        logger.info("Restored tag %r (%d step(s))", tag, executed)
        return executed

    def restore_many(self, tags: Iterable[str]) -> int:
        """
        Restore each tag in iteration order and sum the steps executed.

        Every tag is validated before any is consumed. A failing tag does
        not stop the remaining tags from being attempted.

        Raises:
            InvalidTagError: If any tag is None or empty; nothing is restored.
            RestoreFailedError: After all tags were attempted, if any failed.
        """
        tags = list(tags)
        for tag in tags:
            validate_tag(tag)

        report = RestoreReport()
        for tag in tags:
            try:
                report.executed += self.restore(tag)
            except PartialRestoreError as exc:
                report.executed += exc.executed
                report.failed[tag] = exc
            else:
                report.restored.append(tag)

        if not report.ok:
            logger.warning(
                "Bulk restore finished with %d failed tag(s)", len(report.failed)
            )
            raise RestoreFailedError(report)
        return report.executed

    def restore_all(self) -> int:
        """Restore a snapshot of every currently recorded tag."""
        return self.restore_many(sorted(self._ledger.tags()))
