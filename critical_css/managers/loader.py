"""Stylesheet loading for Critical CSS."""

import os
import re
import threading
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

import aiofiles

from ..core.stylesheet import StyleSheet, parse_stylesheet
from ..utils.common import is_subpath
from ..utils.error import FileOperationError
from .base import BaseManager

REMOTE_URL = re.compile(r'^(https?:)?//', re.IGNORECASE)


class StylesheetLoader(BaseManager):
    """Resolve stylesheet hrefs to local files and read them.

    Parsed additional stylesheets are cached by path so that processing many
    pages with the same options parses each of them once.
    """

    def __init__(self, base_path: str = '', public_path: str = '', encoding: str = 'utf-8'):
        """Initialize stylesheet loader.

        Args:
            base_path: Directory hrefs are resolved against
            public_path: URL prefix removed from hrefs before resolving
            encoding: Encoding of stylesheet files
        """
        super().__init__()
        self.base_path = os.path.abspath(base_path or os.getcwd())
        self.public_path = public_path or ''
        self.encoding = encoding
        self._parsed: Dict[str, Tuple[str, StyleSheet]] = {}
        self._lock = threading.Lock()
        self.stats = {'reads': 0, 'misses': 0, 'hits': 0}

    def resolve(self, href: str) -> Optional[str]:
        """Map ``href`` to a file path, or ``None`` for remote or escaping URLs."""
        if not href or REMOTE_URL.match(href):
            return None
        path = urlsplit(href).path
        if path.startswith('/'):
            path = path[1:]
        prefix = self.public_path.strip('/')
        if prefix and (path == prefix or path.startswith(prefix + '/')):
            path = path[len(prefix):].lstrip('/')
        if not path:
            return None

        filename = os.path.abspath(os.path.join(self.base_path, path))
        if not is_subpath(self.base_path, filename):
            self.log_warning(f"Refusing to read {href}: outside of {self.base_path}")
            return None
        return filename

    async def read_file(self, filename: str) -> str:
        """Read a stylesheet file.

        Raises:
            FileOperationError: If the file cannot be read
        """
        try:
            async with aiofiles.open(filename, mode='r', encoding=self.encoding) as f:
                return await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileOperationError(f"Failed to read file {filename}: {e}")

    async def get_css_asset(self, href: str) -> Optional[str]:
        """Return the text of the stylesheet referenced by ``href``.

        Missing files are logged and yield ``None``.
        """
        filename = self.resolve(href)
        if filename is None:
            return None
        try:
            sheet = await self.read_file(filename)
        except FileOperationError as e:
            self.stats['misses'] += 1
            self.log_warning(f"Unable to locate stylesheet: {filename}")
            self.log_debug(str(e))
            return None
        self.stats['reads'] += 1
        return sheet

    async def get_parsed_stylesheet(self, href: str) -> Optional[Tuple[str, StyleSheet]]:
        """Return ``(text, parsed)`` for ``href``, parsing it at most once."""
        with self._lock:
            cached = self._parsed.get(href)
        if cached is not None:
            self.stats['hits'] += 1
            return cached

        sheet = await self.get_css_asset(href)
        if sheet is None:
            return None
        entry = (sheet, parse_stylesheet(sheet))
        with self._lock:
            self._parsed.setdefault(href, entry)
            return self._parsed[href]

    def get_stats(self) -> Dict[str, Any]:
        return dict(self.stats, cached=len(self._parsed))

    def cleanup(self) -> None:
        with self._lock:
            self._parsed.clear()


__all__ = ['StylesheetLoader']
