"""Error utility for Critical CSS."""

class CriticalCSSError(Exception):
    """Base exception for Critical CSS."""
    pass

class ConfigurationError(CriticalCSSError):
    """Raised when configuration is invalid."""
    pass

class FileOperationError(CriticalCSSError):
    """Raised when file operations fail."""
    pass

class SelectorSyntaxError(CriticalCSSError):
    """Raised when a selector cannot be parsed or matched against a document.

    Recoverable: the reducer treats the selector as unused and reports it.
    """

    def __init__(self, selector: str, reason: str):
        super().__init__(f"{selector} -> {reason}")
        self.selector = selector
        self.reason = reason

class StructuralMismatchError(CriticalCSSError):
    """Raised when a mirror stylesheet does not have the primary's shape."""
    pass

# Exported exceptions
__all__ = [
    'CriticalCSSError',
    'ConfigurationError',
    'FileOperationError',
    'SelectorSyntaxError',
    'StructuralMismatchError',
]
