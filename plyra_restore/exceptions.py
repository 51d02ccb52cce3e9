"""
plyra-restore Custom Exceptions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

All custom exception classes for plyra-restore, organized by domain.
Every distinct failure mode has its own exception type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from plyra_restore.core.steps import RestoreReport

__all__ = [
    # Base
    "RestoreError",
    # Config
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigValidationError",
    # Arguments
    "InvalidTagError",
    # Statements
    "StatementParseError",
    # Store
    "StoreError",
    "ConstraintViolationError",
    "UnsupportedTableError",
    # Restore
    "PartialRestoreError",
    "RestoreFailedError",
]


# ── Base Exception ───────────────────────────────────────────────────────────


class RestoreError(Exception):
    """Base exception for all plyra-restore errors."""

    def __init__(self, message: str = "", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


# ── Config Exceptions ────────────────────────────────────────────────────────


class ConfigError(RestoreError):
    """Base exception for configuration-related errors."""


class ConfigFileNotFoundError(ConfigError):
    """Raised when a configuration file cannot be found at the specified path."""


class ConfigValidationError(ConfigError):
    """Raised when configuration values fail validation."""


# ── Argument Exceptions ──────────────────────────────────────────────────────


class InvalidTagError(RestoreError, ValueError):
    """Raised when a tag is missing or empty."""


# ── Statement Exceptions ─────────────────────────────────────────────────────


class StatementParseError(RestoreError):
    """Raised when a raw SQL statement cannot be classified."""

    def __init__(self, message: str = "", sql: str = "", details: dict | None = None) -> None:
        self.sql = sql
        super().__init__(message, details)


# ── Store Exceptions ─────────────────────────────────────────────────────────


class StoreError(RestoreError):
    """Raised when the underlying store rejects a statement."""

    def __init__(
        self,
        message: str = "",
        statement: str = "",
        details: dict | None = None,
    ) -> None:
        self.statement = statement
        super().__init__(message, details)


class ConstraintViolationError(StoreError):
    """Raised when a statement violates a uniqueness or integrity constraint."""


class UnsupportedTableError(StoreError):
    """Raised when a table has no stable unique row identity to key inverses on."""


# ── Restore Exceptions ───────────────────────────────────────────────────────


class PartialRestoreError(RestoreError):
    """
    Raised when replaying a tag's inverse steps stops mid-sequence.

    The tag is already consumed when this is raised; the steps that ran
    before the failure are not undone.

    Attributes:
        tag: The tag whose replay failed.
        executed: Number of steps that completed before the failure.
        total: Number of steps recorded for the tag.
    """

    def __init__(
        self,
        tag: str,
        executed: int,
        total: int,
        details: dict | None = None,
    ) -> None:
        self.tag = tag
        self.executed = executed
        self.total = total
        super().__init__(
            f"Restore of tag {tag!r} stopped after {executed} of {total} steps",
            details,
        )


class RestoreFailedError(RestoreError):
    """
    Raised after a bulk restore in which at least one tag failed.

    Every tag was attempted; ``report`` lists what was restored,
    what failed, and how many steps ran in total.
    """

    def __init__(self, report: RestoreReport, details: dict | None = None) -> None:
        self.report = report
        failed = ", ".join(repr(tag) for tag in report.failed)
        super().__init__(
            f"Restore failed for {len(report.failed)} tag(s): {failed}",
            details,
        )

    @property
    def executed(self) -> int:
        """Total inverse steps executed across all attempted tags."""
        return self.report.executed
