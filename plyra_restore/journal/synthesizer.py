"""
Inversion Synthesizer
~~~~~~~~~~~~~~~~~~~~~

Builds the ordered inverse steps that undo a forward write, from the
row images captured before it ran or from the identity of the row it
created.
"""

from __future__ import annotations

from collections.abc import Iterable

from plyra_restore.core.steps import (
    InverseSequence,
    InverseStep,
    RowImage,
    quote_identifier,
)

__all__ = ["InversionSynthesizer"]


class InversionSynthesizer:
    """
    One inversion algorithm per write kind.

    - Insert: delete the created row by identity.
    - Upsert over an existing row: update every non-identity column
      back to its captured value.
    - Update: one restoring update per captured row.
    - Delete: one ``INSERT OR REPLACE`` per captured row.

    Steps come out in capture order; replay preserves it.
    """

    def for_insert(self, table: str, identity_column: str, row_id: int) -> InverseSequence:
        """Invert an insert that created the row ``row_id``."""
        if row_id == -1:
            return ()
        statement = (
            f"DELETE FROM {quote_identifier(table)} "
            f"WHERE {quote_identifier(identity_column)} = ?"
        )
        return (InverseStep(statement, (row_id,)),)

    def for_overwrite(self, image: RowImage) -> InverseSequence:
        """Invert an upsert that replaced the row captured in ``image``."""
        return (self._restore_columns(image),)

    def for_update(self, images: Iterable[RowImage]) -> InverseSequence:
        """Invert an update of the rows captured in ``images``."""
        return tuple(self._restore_columns(image) for image in images)

    def for_delete(self, images: Iterable[RowImage]) -> InverseSequence:
        """Invert a delete of the rows captured in ``images``."""
        steps = []
        for image in images:
            columns = ", ".join(quote_identifier(c) for c in image.columns)
            placeholders = ", ".join("?" * len(image.values))
            statement = (
                f"INSERT OR REPLACE INTO {quote_identifier(image.table)} "
                f"({columns}) VALUES ({placeholders})"
            )
            steps.append(InverseStep(statement, tuple(image.values.values())))
        return tuple(steps)

    @staticmethod
    def _restore_columns(image: RowImage) -> InverseStep:
        # Identity is the match key, never part of the SET list.
        restored = [c for c in image.columns if c != image.identity_column]
        params = [image.values[c] for c in restored]
        identity = quote_identifier(image.identity_column)
        if not restored:
            # Nothing besides the identity to put back; keep the step a no-op.
            return InverseStep(
                f"UPDATE {quote_identifier(image.table)} SET {identity} = {identity} "
                f"WHERE {identity} = ?",
                (image.identity,),
            )
        set_clause = ", ".join(f"{quote_identifier(c)} = ?" for c in restored)
        statement = (
            f"UPDATE {quote_identifier(image.table)} SET {set_clause} "
            f"WHERE {identity} = ?"
        )
        return InverseStep(statement, (*params, image.identity))
