"""Selector existence index for a parsed HTML document."""

from collections import deque
from dataclasses import dataclass, field
from typing import Set

import soupsieve
import tinycss2
from bs4 import Tag


@dataclass
class SelectorIndex:
    """Class and id tokens present under a root element.

    Lone ``.class`` and ``#id`` selectors are answered from these sets;
    anything else goes through soupsieve.
    """

    class_tokens: Set[str] = field(default_factory=set)
    id_tokens: Set[str] = field(default_factory=set)

    @classmethod
    def build(cls, root: Tag) -> 'SelectorIndex':
        """Index ``root`` and all of its element descendants, breadth first."""
        index = cls()
        queue = deque([root])
        while queue:
            element = queue.popleft()
            classes = element.get('class') if element.name != '[document]' else None
            if classes:
                if isinstance(classes, str):
                    classes = classes.split()
                index.class_tokens.update(token for token in classes if token)
            element_id = element.get('id') if element.name != '[document]' else None
            if isinstance(element_id, str) and element_id.strip():
                index.id_tokens.add(element_id.strip())
            queue.extend(child for child in element.children if isinstance(child, Tag))
        return index

    def exists(self, selector: str, root: Tag) -> bool:
        """True iff at least one element under ``root`` matches ``selector``.

        Raises:
            soupsieve.SelectorSyntaxError: If soupsieve rejects the selector
        """
        tokens = tinycss2.parse_component_value_list(selector.strip(), skip_comments=True)
        if len(tokens) == 2 and tokens[0].type == 'literal' and tokens[0].value == '.' \
                and tokens[1].type == 'ident':
            return tokens[1].value in self.class_tokens
        if len(tokens) == 1 and tokens[0].type == 'hash' and tokens[0].is_identifier:
            return tokens[0].value in self.id_tokens

        if root.select_one(selector) is not None:
            return True
        # select_one only searches descendants
        return root.parent is not None and soupsieve.match(selector, root)


__all__ = ['SelectorIndex']
