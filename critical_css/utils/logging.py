"""Logging utility for Critical CSS."""

import logging
import os
from typing import Optional

import colorama
from colorama import Fore, Style

from .config import LOG_LEVELS, LOG_LEVEL, LOG_FORMAT, LOG_DATE_FORMAT, ENABLE_COLOR
from .error import ConfigurationError

def setup_logging(log_level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Set up logging configuration.

    Args:
        log_level: Minimum level passed to the handlers
        log_file: Optional file receiving a copy of the output
    """
    colorama.init()
    handlers = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers
    )

def get_logger(name):
    """Get a logger instance for the specified module.

    Args:
        name: Name of the module

    Returns:
        Logger instance
    """
    return logging.getLogger(name)

class LeveledLogger:
    """Logger sink exposing trace/debug/info/warn/error/silent.

    Methods below the configured level are replaced by ``silent``. Messages
    are forwarded to a standard library logger.
    """

    def __init__(self, level: str = LOG_LEVEL, logger: Optional[logging.Logger] = None,
                 color: bool = ENABLE_COLOR):
        if level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {level} (expected one of {', '.join(LOG_LEVELS)})"
            )
        self.level = level
        self.color = color
        self._logger = logger or get_logger('critical_css')

        threshold = LOG_LEVELS.index(level)
        for index, name in enumerate(LOG_LEVELS):
            if index < threshold:
                setattr(self, name, self.silent)

    def _paint(self, message: str, color: str) -> str:
        if not self.color:
            return message
        return f"{color}{message}{Style.RESET_ALL}"

    def trace(self, message: str) -> None:
        self._logger.debug(message, stack_info=True)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def info(self, message: str) -> None:
        self._logger.info(self._paint(message, Style.BRIGHT + Fore.BLUE))

    def warn(self, message: str) -> None:
        self._logger.warning(self._paint(message, Fore.YELLOW))

    def error(self, message: str) -> None:
        self._logger.error(self._paint(message, Style.BRIGHT + Fore.RED))

    def silent(self, message: str = '') -> None:
        pass

def create_logger(level: str = LOG_LEVEL) -> LeveledLogger:
    """Create a leveled logger sink.

    Args:
        level: One of trace, debug, info, warn, error, silent

    Returns:
        LeveledLogger instance
    """
    return LeveledLogger(level)

# Exported functions
__all__ = ['setup_logging', 'get_logger', 'LeveledLogger', 'create_logger']
