"""
Configuration Schema
~~~~~~~~~~~~~~~~~~~~

Pydantic models for validating plyra-restore configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

__all__ = [
    "RestoreConfig",
    "JournalSettings",
    "StoreSettings",
    "ClassifierSettings",
]


class JournalSettings(BaseModel):
    """Inverse recording settings."""

    row_id_column: str = "ROWID"

    @field_validator("row_id_column")
    @classmethod
    def validate_row_id_column(cls, v: str) -> str:
        """Reject blank identity column names."""
        if not v.strip():
            raise ValueError("row_id_column must not be empty")
        return v.strip()


class StoreSettings(BaseModel):
    """SQLite store settings."""

    path: str = ":memory:"
    timeout: float = Field(default=5.0, gt=0.0)
    autocommit: bool = True


class ClassifierSettings(BaseModel):
    """Raw statement classifier settings."""

    dialect: str = "sqlite"


class RestoreConfig(BaseModel):
    """
    Root configuration model for plyra-restore.

    Validated on load with clear error messages for invalid values.
    """

    version: str = "1.0"
    journal: JournalSettings = Field(default_factory=JournalSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
