"""Critical CSS: inline the CSS a page needs for its first render."""

from .utils.config import VERSION
from .core import CriticalInliner, CriticalReducer, Options, ProcessResult, ReductionResult
from .dom import HTMLDocument
from .utils.error import CriticalCSSError

__version__ = VERSION

__all__ = [
    'CriticalInliner',
    'CriticalReducer',
    'Options',
    'ProcessResult',
    'ReductionResult',
    'HTMLDocument',
    'CriticalCSSError',
]
