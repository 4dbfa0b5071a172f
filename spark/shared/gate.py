"""
Shared Gate utilities for Spark.

Provides consolidated patterns for all Gate implementations:
- GateLogger: Unified logging with Python's logging module
- ConfigLoader: Unified JSON config loading/saving
- PathUtils: Common path operations
- build_health_status: Standardized health reports
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Type,
    TypeVar,
    Union,
)


# =============================================================================
# GateLogger - Unified logging for all Gates
# =============================================================================


class GateLogger:
    """
    Unified logging for all Gates.

    Each gate gets its own logger under the "spark" namespace.
    """

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def _ensure_configured(cls):
        """Ensure basic logging is configured."""
        if cls._configured:
            return

        root_logger = logging.getLogger("spark")
        if not root_logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "[%(name)s] %(levelname)s: %(message)s"
            )
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)
            root_logger.setLevel(logging.INFO)

        cls._configured = True

    @classmethod
    def get(cls, gate_name: str) -> logging.Logger:
        """
        Get a logger for a specific gate.

        Args:
            gate_name: Name of the gate (e.g., "WorkspaceGate", "LocationGate")

        Returns:
            Logger instance for the gate
        """
        cls._ensure_configured()

        logger_name = f"spark.{gate_name}"
        if logger_name not in cls._loggers:
            cls._loggers[logger_name] = logging.getLogger(logger_name)

        return cls._loggers[logger_name]

    @classmethod
    def set_level(cls, level: Union[int, str], gate_name: Optional[str] = None):
        """
        Set logging level.

        Args:
            level: Logging level (e.g., logging.DEBUG or "DEBUG")
            gate_name: Specific gate to set level for, or None for all
        """
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {level}")

        if gate_name:
            cls.get(gate_name).setLevel(level)
        else:
            logging.getLogger("spark").setLevel(level)


# =============================================================================
# Health reporting
# =============================================================================


def build_health_status(
    gate_name: str,
    initialized: bool,
    dependencies: List[str],
    checks: Dict[str, bool],
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a standardized health status dict.

    Args:
        gate_name: Name of the gate
        initialized: Whether the gate is initialized
        dependencies: List of dependency names
        checks: Dict of check name -> passed
        details: Additional details

    Returns:
        Standardized health status dict
    """
    all_checks_passed = all(checks.values()) if checks else True

    return {
        "gate": gate_name,
        "healthy": initialized and all_checks_passed,
        "initialized": initialized,
        "dependencies": dependencies,
        "checks": checks,
        "details": details or {},
    }


# =============================================================================
# ConfigLoader - Unified JSON config loading
# =============================================================================


ConfigT = TypeVar("ConfigT")


class ConfigLoader:
    """
    Unified configuration loading and saving.

    Provides consistent JSON file handling across all Gates.
    """

    @staticmethod
    def load(
        path: Union[str, Path],
        model_class: Type[ConfigT],
        create_default: bool = True,
    ) -> Optional[ConfigT]:
        """
        Load a JSON config file into a model class.

        Args:
            path: Path to the config file
            model_class: Class with from_dict() or model_validate()
            create_default: If True and file doesn't exist, return model_class()

        Returns:
            Instance of model_class, or None if the file is missing
            (and create_default is False) or cannot be parsed
        """
        path = Path(path)

        if not path.exists():
            if create_default:
                return model_class()
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)

            if hasattr(model_class, "from_dict"):
                return model_class.from_dict(data)
            elif hasattr(model_class, "model_validate"):
                return model_class.model_validate(data)
            else:
                return model_class(**data)

        except (OSError, ValueError, TypeError) as e:
            logger = GateLogger.get("ConfigLoader")
            logger.error(f"Failed to load config from {path}: {e}")
            return None

    @staticmethod
    def save(
        path: Union[str, Path],
        config: Any,
        create_dirs: bool = True,
    ) -> bool:
        """
        Save a config object to a JSON file.

        Args:
            path: Path to save the config
            config: Config object with to_dict() or model_dump() method
            create_dirs: Create parent directories if needed

        Returns:
            True if successful
        """
        path = Path(path)

        try:
            if create_dirs:
                PathUtils.ensure_dirs(path)

            if hasattr(config, "to_dict"):
                data = config.to_dict()
            elif hasattr(config, "model_dump"):
                data = config.model_dump(mode="json")
            else:
                data = dict(config)

            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)

            return True

        except (OSError, TypeError, ValueError) as e:
            logger = GateLogger.get("ConfigLoader")
            logger.error(f"Failed to save config to {path}: {e}")
            return False


# =============================================================================
# PathUtils - Common path operations
# =============================================================================


class PathUtils:
    """Common path utilities for Gates."""

    @staticmethod
    def ensure_dirs(*paths: Union[str, Path]) -> None:
        """
        Ensure directories exist for the given paths.

        For file paths, creates the parent directory.
        For directory paths, creates the directory.
        """
        for path in paths:
            path = Path(path)
            if path.suffix:
                # Looks like a file path, create parent
                path.parent.mkdir(parents=True, exist_ok=True)
            else:
                path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def expand(path: Union[str, Path]) -> Path:
        """Expand ~ and make a path absolute without requiring it to exist."""
        return Path(path).expanduser().absolute()


# =============================================================================
# Deep update utility
# =============================================================================


def deep_update(base: dict, updates: dict) -> dict:
    """
    Deep merge updates into base dict (in-place).

    Args:
        base: Base dictionary to update
        updates: Updates to apply

    Returns:
        The updated base dict
    """
    for key, value in updates.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            deep_update(base[key], value)
        else:
            base[key] = value
    return base


# =============================================================================
# Convenience exports
# =============================================================================


def get_logger(gate_name: str) -> logging.Logger:
    """Shortcut for GateLogger.get()."""
    return GateLogger.get(gate_name)
