"""
Shared utilities for Spark.

Provides access to common functionality used across Gate implementations.
"""

from spark.shared.events import EventBus
from spark.shared.gate import (
    GateLogger,
    ConfigLoader,
    PathUtils,
    build_health_status,
    deep_update,
    get_logger,
)

__all__ = [
    # Events
    "EventBus",
    # Gate utilities
    "GateLogger",
    "ConfigLoader",
    "PathUtils",
    "build_health_status",
    "deep_update",
    "get_logger",
]
