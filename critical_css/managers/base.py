"""Base manager class for Critical CSS."""

import logging
from typing import Dict, Any, Optional
from abc import ABC, abstractmethod
from ..utils.error import CriticalCSSError

class BaseManager(ABC):
    """Base class for services that own resources across documents."""

    def __init__(self):
        """Initialize base manager."""
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        pass

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        """Log error message.

        Args:
            message: Error message
            error: Optional exception
        """
        if error:
            self.logger.error(f"{message}: {error}")
        else:
            self.logger.error(message)

    def log_warning(self, message: str) -> None:
        self.logger.warning(message)

    def log_info(self, message: str) -> None:
        self.logger.info(message)

    def log_debug(self, message: str) -> None:
        self.logger.debug(message)

    def handle_error(self, error: Exception, message: str) -> None:
        """Log ``error``, release resources and re-raise as ``CriticalCSSError``.

        Args:
            error: Exception to handle
            message: Error message
        """
        self.log_error(message, error)
        self.cleanup()
        raise CriticalCSSError(f"{message}: {error}") from error

    def cleanup(self) -> None:
        """Clean up resources."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()

# Exported class
__all__ = ['BaseManager']
