"""
Process-wide developer flags.

Flags are plain JSON values keyed by name. Later sources are deep-merged
over earlier ones, so a project location's .spark.json has the highest
precedence when it is loaded last.
"""

import json
from typing import Any, Dict

from spark.shared.gate import GateLogger, deep_update

_log = GateLogger.get("Config.Flags")

# Module-level state
_flags: Dict[str, Any] = {}


class SparkFlags:
    """Access to the process-wide flag table."""

    @classmethod
    def init_from_dict(cls, values: Dict[str, Any]) -> None:
        """Merge a mapping of flags over the current ones."""
        if not isinstance(values, dict):
            raise ValueError(f"Flags must be a JSON object, got {type(values).__name__}")
        deep_update(_flags, values)
        _log.debug(f"Flags updated: {sorted(values)}")

    @classmethod
    def init_from_text(cls, text: str) -> None:
        """
        Merge flags from JSON text.

        Raises:
            ValueError: if the text is not a JSON object
        """
        cls.init_from_dict(json.loads(text))

    @classmethod
    def get(cls, name: str, default: Any = None) -> Any:
        return _flags.get(name, default)

    @classmethod
    def is_enabled(cls, name: str) -> bool:
        return _flags.get(name) is True

    @classmethod
    def all(cls) -> Dict[str, Any]:
        return dict(_flags)

    @classmethod
    def reset(cls) -> None:
        _flags.clear()
