# src/bootstrap_email/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Iterable, Optional

from bootstrap_email.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide access to the packaged settings.json.
    Overrides (the CLI's `--set key=value`) only live in memory; `reset()` drops them.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up a dotted key such as 'compiler.grid_columns'; missing keys and nulls give `default`."""
        value: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(key)
        return default if value is None else value

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Stores a value under a dotted key, creating intermediate sections.
        String values are cast to the type of the value they replace, so
        'compiler.workers=4' stays an int and 'debug.provenance=false' a bool.
        """
        *sections, leaf = key_path.split('.')
        section: Dict[str, Any] = self._config
        for key in sections:
            section = section.setdefault(key, {})
            if not isinstance(section, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        current = section.get(leaf)
        if current is not None and isinstance(value, str):
            value = self._cast(key_path, value, current)

        section[leaf] = value
        logger.debug("Setting overridden: %s = %r", key_path, value)
        return True

    def apply_overrides(self, assignments: Iterable[str]) -> None:
        """Applies `key=value` strings. Raises ValueError on an assignment without '='."""
        for assignment in assignments:
            key_path, sep, value = assignment.partition("=")
            if not sep or not key_path.strip():
                raise ValueError(f"Expected key=value, got '{assignment}'")
            self.set_nested(key_path.strip(), value.strip())

    @staticmethod
    def _cast(key_path: str, value: str, current: Any) -> Any:
        if isinstance(current, bool):
            return value.lower() in _TRUE_VALUES
        try:
            return type(current)(value)
        except (ValueError, TypeError):
            logger.warning(
                "'%s' expects %s, keeping '%s' as text.", key_path, type(current).__name__, value
            )
            return value

    def reset(self):
        """Reloads settings.json, discarding every in-memory override."""
        config_path = PathUtils.get_settings_file()
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            logger.debug("Settings loaded from %s", config_path)
        except FileNotFoundError:
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load settings.json: %s", e, exc_info=True)
            self._config = {}


config_manager = ConfigManager()
