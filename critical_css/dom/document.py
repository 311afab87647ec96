"""Queryable HTML document backed by BeautifulSoup."""

import logging
import re
import threading
from typing import Dict, List, Optional

import soupsieve
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.element import Script, Stylesheet
from bs4.formatter import HTMLFormatter

from ..utils.config import CONTAINER_ATTRIBUTE
from ..utils.error import SelectorSyntaxError
from .selector_index import SelectorIndex

logger = logging.getLogger(__name__)

# Escape markup characters, leave void elements unclosed
OUTPUT_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)

RAW_TEXT_CLOSE = re.compile(r'</(?=(style|script)\b)', re.IGNORECASE)


class HTMLDocument:
    """Parsed HTML page with the queries used during critical CSS extraction.

    Selector matching is scoped to the critical container: the element
    carrying ``data-critical-container`` if there is one, otherwise ``<html>``.
    """

    def __init__(self, html: str, parser: str = 'html.parser'):
        self.soup = BeautifulSoup(html, parser)
        self.container = self._find_container()
        self.index = SelectorIndex.build(self.container)
        self._preloaded_fonts = set()
        self._lock = threading.Lock()

    def _find_container(self) -> Tag:
        container = self.soup.find(attrs={CONTAINER_ATTRIBUTE: True})
        if container is None:
            container = self.soup.find('html')
        return container if container is not None else self.soup

    def exists(self, selector: str) -> bool:
        """Check whether any element in the container matches ``selector``.

        Raises:
            SelectorSyntaxError: If the selector cannot be parsed or matched
        """
        if selector == ':root':
            return True
        try:
            return self.index.exists(selector, self.container)
        except (soupsieve.SelectorSyntaxError, NotImplementedError, ValueError) as e:
            raise SelectorSyntaxError(selector, str(e).splitlines()[0] if str(e) else type(e).__name__)

    def query_first(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def query_all(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def create_element(self, name: str, attrs: Optional[Dict[str, str]] = None) -> Tag:
        return self.soup.new_tag(name, attrs=dict(attrs or {}))

    @property
    def head(self) -> Tag:
        head = self.soup.head
        if head is None:
            head = self.create_element('head')
            html = self.soup.find('html')
            (html if html is not None else self.soup).insert(0, head)
        return head

    @property
    def body(self) -> Tag:
        body = self.soup.body
        if body is None:
            body = self.create_element('body')
            html = self.soup.find('html')
            (html if html is not None else self.soup).append(body)
        return body

    def get_text(self, element: Tag) -> str:
        """Raw text content of ``element``, including style and script text."""
        return ''.join(str(child) for child in element.children if isinstance(child, NavigableString))

    def set_text(self, element: Tag, text: str) -> None:
        """Replace the content of ``element`` with ``text``.

        Inside ``<style>`` and ``<script>`` any ``</style`` or ``</script`` is
        escaped so the text cannot close the element.
        """
        element.clear()
        if element.name == 'style':
            element.append(Stylesheet(RAW_TEXT_CLOSE.sub(r'<\\/', text)))
        elif element.name == 'script':
            element.append(Script(RAW_TEXT_CLOSE.sub(r'<\\/', text)))
        else:
            element.append(NavigableString(text))

    def add_font_preload(self, href: str) -> bool:
        """Append a font preload link to ``<head>`` once per URL.

        Returns:
            True if a link was added
        """
        with self._lock:
            if href in self._preloaded_fonts:
                return False
            self._preloaded_fonts.add(href)
        link = self.create_element('link', {
            'rel': 'preload',
            'as': 'font',
            'crossorigin': 'anonymous',
            'href': href,
        })
        self.head.append(link)
        logger.debug(f"Added font preload for {href}")
        return True

    def serialize(self) -> str:
        return self.soup.decode(formatter=OUTPUT_FORMATTER)


__all__ = ['HTMLDocument', 'OUTPUT_FORMATTER']
