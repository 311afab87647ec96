"""Resource managers for Critical CSS."""

from .base import BaseManager
from .loader import StylesheetLoader

# Exported classes
__all__ = [
    'BaseManager',
    'StylesheetLoader',
]
