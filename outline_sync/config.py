"""
Configuration for outline-sync.

Settings are read from config.yaml and laid over the built-in defaults, so a
file only needs the keys it changes. Values the rest of the package depends
on (the workspace used in document keys and the default view type) are
checked when loaded; invalid ones are logged and replaced by their default.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .models import ViewType


DEFAULTS: Dict[str, Any] = {
    "sync": {
        "workspace": "default",
        "default_view_type": ViewType.BULLET.value,
    },
    "store": {
        "filename": "outline_sync.db",
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
    "paths": {
        "log_file": "outline_sync.log",
    },
}


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively lay ``overrides`` over ``base``, returning a new dict."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """
    Loads config.yaml and answers dot-path lookups against it.
    """

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        overrides: Dict[str, Any] = {}
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Expected a mapping at the top of {self.config_path}")
            overrides = loaded

            logging.info(f"Configuration loaded from {self.config_path}")

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")

        self._config = _merge(DEFAULTS, overrides)
        self._validate()

    def _validate(self) -> None:
        for section, values in DEFAULTS.items():
            if not isinstance(self._config.get(section), dict):
                logging.error(f"Configuration section '{section}' must be a mapping, using defaults")
                self._config[section] = copy.deepcopy(values)

        sync = self._config["sync"]

        view_type = sync.get("default_view_type")
        if view_type not in {v.value for v in ViewType}:
            logging.error(
                f"Unknown default_view_type '{view_type}', using '{DEFAULTS['sync']['default_view_type']}'"
            )
            sync["default_view_type"] = DEFAULTS["sync"]["default_view_type"]

        workspace = sync.get("workspace")
        if not isinstance(workspace, str) or not workspace or "/" in workspace:
            # The workspace is the first part of "<workspace>/<page>" document keys
            logging.error(f"Invalid workspace {workspace!r}, using '{DEFAULTS['sync']['workspace']}'")
            sync["workspace"] = DEFAULTS["sync"]["workspace"]

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Examples:
            config.get("sync.default_view_type")  # "bullet"
            config.get("store.filename")  # "outline_sync.db"
        """
        value = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        return self._config.get(section, {})

    def reload(self) -> None:
        self._load_config()

    @property
    def workspace(self) -> str:
        """Workspace name used as the prefix of document keys."""
        return self.get("sync.workspace")

    @property
    def default_view_type(self) -> str:
        """View type of pages that set none."""
        return self.get("sync.default_view_type")

    @property
    def store_filename(self) -> str:
        return self.get("store.filename")

    @property
    def log_filename(self) -> str:
        return self.get("paths.log_file")


config = ConfigManager()
