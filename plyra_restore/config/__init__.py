"""plyra-restore configuration — loading, validation, and defaults."""

from plyra_restore.config.defaults import DEFAULT_CONFIG
from plyra_restore.config.loader import load_config, load_config_from_dict
from plyra_restore.config.schema import RestoreConfig

__all__ = [
    "load_config",
    "load_config_from_dict",
    "RestoreConfig",
    "DEFAULT_CONFIG",
]
