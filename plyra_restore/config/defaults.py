"""
Default Configuration
~~~~~~~~~~~~~~~~~~~~~

Sensible defaults for plyra-restore when no config file is provided.
"""

from __future__ import annotations

__all__ = ["DEFAULT_CONFIG"]

DEFAULT_CONFIG: dict = {
    "version": "1.0",
    "journal": {
        "row_id_column": "ROWID",
    },
    "store": {
        "path": ":memory:",
        "timeout": 5.0,
        "autocommit": True,
    },
    "classifier": {
        "dialect": "sqlite",
    },
}
