"""
Configuration schema for Spark.

Defines all configurable options with metadata for validation
and documentation.
"""

from enum import Enum
from typing import Optional, List, Any, Dict
from dataclasses import dataclass


class ConfigType(Enum):
    """Configuration value types."""
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    PATH = "path"          # File system path, ~ is expanded


class ConfigCategory(Enum):
    """Configuration categories for grouping."""
    STORAGE = "storage"
    WORKSPACE = "workspace"
    LOGGING = "logging"


@dataclass
class ConfigField:
    """Definition of a configuration field."""
    key: str
    description: str
    config_type: ConfigType
    category: ConfigCategory
    default: Any = None
    env_var: str = None          # Override env var name (defaults to key)
    options: List[str] = None    # For enumerated types

    def __post_init__(self):
        if self.env_var is None:
            self.env_var = self.key


# ==================== Schema Definition ====================

CONFIG_SCHEMA: List[ConfigField] = [
    # === Storage ===
    ConfigField(
        key="SPARK_STORAGE_ROOT",
        description="Directory exposed to the editor as its local storage",
        config_type=ConfigType.PATH,
        category=ConfigCategory.STORAGE,
        default="~/spark",
    ),
    ConfigField(
        key="SPARK_PREFERENCES_PATH",
        description="JSON file holding persisted preferences (project folder token, workspace roots)",
        config_type=ConfigType.PATH,
        category=ConfigCategory.STORAGE,
        default="~/.spark/preferences.json",
    ),

    # === Workspace ===
    ConfigField(
        key="SPARK_EVENT_HISTORY",
        description="Number of recent resource change events kept for diagnostics",
        config_type=ConfigType.INTEGER,
        category=ConfigCategory.WORKSPACE,
        default=100,
    ),

    # === Logging ===
    ConfigField(
        key="SPARK_LOG_LEVEL",
        description="Log level for the spark.* loggers",
        config_type=ConfigType.STRING,
        category=ConfigCategory.LOGGING,
        default="INFO",
        options=["DEBUG", "INFO", "WARNING", "ERROR"],
    ),
]


def get_schema_by_key(key: str) -> Optional[ConfigField]:
    """Look up a field definition by key."""
    for field in CONFIG_SCHEMA:
        if field.key == key:
            return field
    return None


def schema_to_dict() -> Dict[str, Any]:
    """Schema as a plain dict, grouped by category."""
    result: Dict[str, Any] = {}
    for category in ConfigCategory:
        result[category.value] = [
            {
                "key": f.key,
                "description": f.description,
                "type": f.config_type.value,
                "default": f.default,
                "options": f.options,
            }
            for f in CONFIG_SCHEMA
            if f.category == category
        ]
    return result
