"""
Spark Configuration Manager.

Centralized configuration with:
- Schema-driven defaults and validation
- Environment variable override (a .env file is loaded first)
- Optional JSON config file
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from dotenv import load_dotenv, set_key

from spark.shared.gate import GateLogger, PathUtils

_log = GateLogger.get("Config")

from spark.Config.schema import (
    CONFIG_SCHEMA,
    ConfigField,
    ConfigType,
    ConfigCategory,
    get_schema_by_key,
    schema_to_dict,
)
from spark.Config.flags import SparkFlags


class ConfigManager:
    """
    Manages Spark configuration.

    Priority order:
    1. Environment variables (including those loaded from .env)
    2. JSON config file
    3. Schema defaults
    """

    def __init__(
        self,
        env_file: Optional[Union[str, Path]] = None,
        config_json: Optional[Union[str, Path]] = None,
    ):
        self.env_file = Path(env_file) if env_file else Path.cwd() / ".env"
        self.config_json = Path(config_json) if config_json else None
        self._cache: Dict[str, Any] = {}
        self._loaded = False
        self._load()

    def _load(self):
        """Load configuration from all sources."""
        load_dotenv(self.env_file)

        json_config = {}
        if self.config_json is not None and self.config_json.exists():
            try:
                with open(self.config_json, encoding="utf-8") as f:
                    json_config = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                _log.warning(f"Ignoring unreadable config file {self.config_json}: {e}")

        for field in CONFIG_SCHEMA:
            # Priority: env var > json config > default
            value = os.environ.get(field.env_var)

            if value is None and field.key in json_config:
                value = json_config[field.key]

            if value is None:
                value = field.default

            self._cache[field.key] = self._convert_type(value, field.config_type)

        self._loaded = True

    def _convert_type(self, value: Any, config_type: ConfigType) -> Any:
        """Convert value to appropriate type."""
        if value is None:
            return None

        try:
            if config_type == ConfigType.INTEGER:
                return int(value)
            elif config_type == ConfigType.BOOLEAN:
                if isinstance(value, bool):
                    return value
                return str(value).lower() in ("true", "1", "yes", "on")
            elif config_type == ConfigType.PATH:
                return str(PathUtils.expand(str(value))) if value else None
            else:
                return str(value) if value else None
        except (ValueError, TypeError):
            return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        if not self._loaded:
            self._load()
        return self._cache.get(key, default)

    def set(self, key: str, value: Any, persist: bool = True) -> bool:
        """
        Set a configuration value.

        Args:
            key: Config key
            value: New value
            persist: Whether to write the value to the .env file

        Returns:
            True if successful
        """
        field = get_schema_by_key(key)
        if not field:
            return False

        value = self._convert_type(value, field.config_type)
        self._cache[key] = value

        if persist:
            self._update_env(field.env_var, value, field.config_type)

        return True

    def _update_env(self, key: str, value: Any, config_type: ConfigType):
        """Update .env file."""
        if config_type == ConfigType.BOOLEAN:
            str_value = "true" if value else "false"
        else:
            str_value = str(value) if value is not None else ""

        try:
            set_key(str(self.env_file), key, str_value)
            os.environ[key] = str_value
        except OSError as e:
            _log.warning(f"Could not update .env: {e}")

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return {field.key: self._cache.get(field.key) for field in CONFIG_SCHEMA}

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate configuration.

        Returns:
            (is_valid, list of error messages)
        """
        errors = []

        for field in CONFIG_SCHEMA:
            value = self._cache.get(field.key)

            if field.config_type == ConfigType.INTEGER and not isinstance(value, int):
                errors.append(f"Invalid integer for {field.key}: {value}")
                continue

            if value and field.options and str(value).upper() not in field.options:
                errors.append(f"Invalid option for {field.key}: {value}")

        return len(errors) == 0, errors


# Global instance
_manager: Optional[ConfigManager] = None


def get_manager() -> ConfigManager:
    """Get or create the global ConfigManager."""
    global _manager
    if _manager is None:
        _manager = ConfigManager()
    return _manager


def reload():
    """Reload configuration from files."""
    global _manager
    _manager = ConfigManager()


# Convenience functions
def get(key: str, default: Any = None) -> Any:
    """Get a config value."""
    return get_manager().get(key, default)


def set(key: str, value: Any, persist: bool = True) -> bool:
    """Set a config value."""
    return get_manager().set(key, value, persist)


def get_all() -> Dict:
    """Get all config values."""
    return get_manager().get_all()


def validate() -> Tuple[bool, List[str]]:
    """Validate configuration."""
    return get_manager().validate()


def get_schema() -> Dict:
    """Get schema as dict."""
    return schema_to_dict()


__all__ = [
    "ConfigManager",
    "ConfigField",
    "ConfigType",
    "ConfigCategory",
    "SparkFlags",
    "get_manager",
    "reload",
    "get",
    "set",
    "get_all",
    "validate",
    "get_schema",
]
