"""
Configuration Loader
~~~~~~~~~~~~~~~~~~~~

Reads a YAML file of journal, store and classifier settings and
overlays it section by section on ``DEFAULT_CONFIG``.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from plyra_restore.config.defaults import DEFAULT_CONFIG
from plyra_restore.config.schema import RestoreConfig
from plyra_restore.exceptions import ConfigFileNotFoundError, ConfigValidationError

__all__ = ["load_config", "load_config_from_dict"]

logger = logging.getLogger(__name__)


def _overlay(target: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Write ``overrides`` into ``target`` in place, descending into sections."""
    for key, value in overrides.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _overlay(current, value)
        else:
            target[key] = value
    return target


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigValidationError(
            f"{path} must hold a mapping of settings, not {type(document).__name__}"
        )
    return document


def load_config(path: str | os.PathLike[str]) -> RestoreConfig:
    """
    Load settings from the YAML file at ``path``.

    Raises:
        ConfigFileNotFoundError: If ``path`` is not a file.
        ConfigValidationError: If the file is not a YAML mapping or holds
            invalid settings.
    """
    source = Path(path)
    if not source.is_file():
        raise ConfigFileNotFoundError(f"Configuration file not found: {source}")
    settings = _read_mapping(source)
    logger.debug("Read %d configuration section(s) from %s", len(settings), source)
    return load_config_from_dict(settings)


def load_config_from_dict(data: dict[str, Any]) -> RestoreConfig:
    """Validate ``data`` laid over the default settings."""
    settings = _overlay(copy.deepcopy(DEFAULT_CONFIG), data)
    try:
        return RestoreConfig.model_validate(settings)
    except ValidationError as exc:
        raise ConfigValidationError(
            f"Invalid configuration: {exc.error_count()} error(s)",
            details={"errors": exc.errors(include_url=False)},
        ) from exc
