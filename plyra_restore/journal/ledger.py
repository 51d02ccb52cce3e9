"""
Tag Ledger
~~~~~~~~~~

Maps each tag to the inverse sequence recorded under it. At most one
sequence is live per tag: recording under a used tag replaces the
previous sequence entirely.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from plyra_restore.core.steps import InverseSequence, InverseStep
from plyra_restore.exceptions import InvalidTagError

__all__ = ["TagLedger", "validate_tag"]

logger = logging.getLogger(__name__)


def validate_tag(tag: str | None) -> str:
    """Reject a missing or empty tag."""
    if tag is None or tag == "":
        raise InvalidTagError("Tag must be a non-empty identifier")
    return tag


class TagLedger:
    """
    In-memory, lock-guarded tag to inverse-sequence mapping.

    The backing dict is never handed out; ``tags()`` returns a snapshot.
    """

    def __init__(self) -> None:
        self._entries: dict[str, InverseSequence] = {}
        self._lock = threading.RLock()

    def put(self, tag: str, sequence: Iterable[InverseStep]) -> None:
        """Record ``sequence`` under ``tag``, replacing any previous entry."""
        validate_tag(tag)
        steps = tuple(sequence)
        with self._lock:
            replaced = tag in self._entries
            self._entries[tag] = steps
        logger.debug(
            "Recorded %d inverse step(s) under tag %r%s",
            len(steps),
            tag,
            " (replaced previous entry)" if replaced else "",
        )

    def get(self, tag: str) -> InverseSequence | None:
        """Return the sequence recorded under ``tag``, or None."""
        validate_tag(tag)
        with self._lock:
            return self._entries.get(tag)

    def contains(self, tag: str) -> bool:
        """Check whether ``tag`` has a recorded sequence."""
        validate_tag(tag)
        with self._lock:
            return tag in self._entries

    def tags(self) -> frozenset[str]:
        """Return a snapshot of all recorded tags."""
        with self._lock:
            return frozenset(self._entries)

    def remove(self, tag: str) -> None:
        """Forget ``tag``. Unknown tags are ignored."""
        validate_tag(tag)
        with self._lock:
            self._entries.pop(tag, None)

    def pop(self, tag: str) -> InverseSequence | None:
        """Remove ``tag`` and return its sequence in one locked step."""
        validate_tag(tag)
        with self._lock:
            return self._entries.pop(tag, None)

    def __contains__(self, tag: object) -> bool:
        with self._lock:
            return tag in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"<TagLedger tags={len(self)}>"
