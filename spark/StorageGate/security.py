"""
StorageGate security module.

Provides path validation and traversal prevention for the local sandbox.
"""

import os
import re
from typing import Tuple, Optional

from .provider import StorageError


class PathSecurityError(StorageError):
    """Raised when a path fails security validation."""
    pass


_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


def normalize_path(path: str) -> str:
    """
    Normalize a path to prevent traversal attacks.

    Args:
        path: Raw path string

    Returns:
        Normalized absolute path
    """
    path = os.path.expanduser(path)
    path = os.path.normpath(path)
    path = os.path.abspath(path)
    return path


def validate_path_within_root(
    target_path: str,
    root_path: str
) -> Tuple[bool, str, Optional[str]]:
    """
    Validate that a target path is within the sandbox root.

    Args:
        target_path: Path to validate
        root_path: Sandbox root directory

    Returns:
        Tuple of (is_valid, resolved_path, error_message)
    """
    root = normalize_path(root_path)
    target = normalize_path(target_path)

    try:
        common = os.path.commonpath([root, target])
        if common != root:
            return False, target, f"Path escapes storage root: {target}"
    except ValueError:
        # Different drives on Windows
        return False, target, f"Path is on different drive: {target}"

    return True, target, None


def resolve_entry_path(root_path: str, full_path: str) -> str:
    """
    Map a provider path ("/a/b") to an absolute on-disk path under root.

    Raises:
        PathSecurityError: if the result would escape the root
    """
    root = normalize_path(root_path)

    if not full_path or full_path in (".", "/", "\\"):
        return root

    relative = full_path.lstrip("/\\")
    is_valid, resolved, error = validate_path_within_root(os.path.join(root, relative), root)
    if not is_valid:
        raise PathSecurityError(error)
    return resolved


def to_entry_path(root_path: str, absolute_path: str) -> str:
    """Inverse of resolve_entry_path()."""
    rel = os.path.relpath(normalize_path(absolute_path), normalize_path(root_path))
    if rel == ".":
        return "/"
    return "/" + rel.replace(os.sep, "/")


def validate_entry_name(name: str) -> str:
    """
    Reject names that are not a single, plain path component.

    Raises:
        PathSecurityError: for empty names, separators, "." / "..",
            or control characters
    """
    if not name or name in (".", ".."):
        raise PathSecurityError(f"Invalid entry name: {name!r}")
    if "/" in name or "\\" in name or os.sep in name:
        raise PathSecurityError(f"Entry name must not contain path separators: {name!r}")
    if _CONTROL_CHARS.search(name):
        raise PathSecurityError(f"Entry name contains control characters: {name!r}")
    return name
