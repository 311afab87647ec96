"""Common utilities for Critical CSS."""

import math
import os
from .error import FileOperationError

BYTE_UNITS = ['kB', 'MB', 'GB', 'TB', 'PB']

def ensure_directory(path: str) -> bool:
    """Ensure directory exists.

    Args:
        path: Directory path

    Returns:
        True if directory exists or was created

    Raises:
        FileOperationError: If directory creation fails
    """
    try:
        if path and not os.path.exists(path):
            os.makedirs(path)
        return True
    except OSError as e:
        raise FileOperationError(f"Failed to create directory {path}: {e}")

def pretty_bytes(size: int) -> str:
    """Format a byte count for humans, e.g. ``1337`` -> ``'1.34 kB'``."""
    if size < 1000:
        return f"{size} B"
    exponent = min(int(math.log10(size) // 3), len(BYTE_UNITS))
    value = float(f"{size / 1000 ** exponent:.3g}")
    return f"{value:g} {BYTE_UNITS[exponent - 1]}"

def is_subpath(base_path: str, current_path: str) -> bool:
    """Check whether ``current_path`` lies inside ``base_path``."""
    relative = os.path.relpath(os.path.abspath(current_path), os.path.abspath(base_path))
    return not relative.startswith('..')

# Exported functions
__all__ = [
    'ensure_directory',
    'pretty_bytes',
    'is_subpath',
]
