"""HTML document access for Critical CSS."""

from .document import HTMLDocument
from .selector_index import SelectorIndex

__all__ = ['HTMLDocument', 'SelectorIndex']
