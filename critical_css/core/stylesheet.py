"""Stylesheet AST built on top of tinycss2.

The tree is a small closed set of node classes (``Rule``, ``AtRule``,
``Declaration``, ``Comment``) under a ``StyleSheet`` root. Nodes keep the raw
whitespace they were parsed with in ``raws`` so an uncompressed serialization
reproduces the source layout.
"""

import copy
import logging
import re
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

import tinycss2

logger = logging.getLogger(__name__)

# At-rules whose block holds rules rather than declarations
RULE_LIST_AT_RULES = frozenset([
    'media', 'supports', 'document', '-moz-document', 'layer', 'container',
    'scope', 'starting-style',
])

KEYFRAMES_NAME = re.compile(r'^(-[a-z]+-)?keyframes$')


class NodeType(Enum):
    ROOT = 'root'
    RULE = 'rule'
    AT_RULE = 'atrule'
    DECLARATION = 'decl'
    COMMENT = 'comment'


class Node:
    """Base class of every stylesheet node."""

    type = None
    children = None

    def __init__(self, raws: Optional[Dict[str, Any]] = None):
        self.raws = dict(raws or {})


class StyleSheet(Node):
    type = NodeType.ROOT

    def __init__(self, children: Optional[List[Node]] = None, raws=None):
        super().__init__(raws)
        self.children = list(children or [])

    def __repr__(self):
        return f"StyleSheet({len(self.children)} nodes)"


class Rule(Node):
    """A style rule: a selector list and a block of declarations."""

    type = NodeType.RULE

    def __init__(self, selectors: List[str], children: Optional[List[Node]] = None, raws=None):
        super().__init__(raws)
        self.selectors = list(selectors)
        self.children = list(children or [])

    @property
    def selector(self) -> str:
        return ', '.join(self.selectors)

    @property
    def declarations(self) -> List['Declaration']:
        return [child for child in self.children if isinstance(child, Declaration)]

    def __repr__(self):
        return f"Rule({self.selector!r})"


class AtRule(Node):
    """An at-rule. ``children`` is ``None`` for statements such as ``@import``."""

    type = NodeType.AT_RULE

    def __init__(self, name: str, params: str = '', children: Optional[List[Node]] = None, raws=None):
        super().__init__(raws)
        self.name = name
        self.params = params
        self.children = list(children) if children is not None else None

    @property
    def is_keyframes(self) -> bool:
        return bool(KEYFRAMES_NAME.match(self.name))

    @property
    def is_font_face(self) -> bool:
        return self.name == 'font-face'

    @property
    def declarations(self) -> List['Declaration']:
        return [child for child in self.children or [] if isinstance(child, Declaration)]

    def __repr__(self):
        return f"AtRule(@{self.name} {self.params!r})"


class Declaration(Node):
    type = NodeType.DECLARATION

    def __init__(self, property: str, value: str, important: bool = False, raws=None):
        super().__init__(raws)
        self.property = property
        self.value = value
        self.important = important

    def __repr__(self):
        return f"Declaration({self.property}: {self.value})"


class Comment(Node):
    type = NodeType.COMMENT

    def __init__(self, text: str, raws=None):
        super().__init__(raws)
        self.text = text

    def __repr__(self):
        return f"Comment({self.text!r})"


def split_selectors(prelude) -> List[str]:
    """Split a rule prelude on its top-level commas.

    Commas nested in functions such as ``:is(a, b)`` are part of a single
    component value and never split. Comments are dropped.
    """
    groups = [[]]
    for token in prelude:
        if token.type == 'comment':
            continue
        if token.type == 'literal' and token.value == ',':
            groups.append([])
        else:
            groups[-1].append(token)
    selectors = (tinycss2.serialize(tokens).strip() for tokens in groups)
    return [selector for selector in selectors if selector]


def _split_trailing_space(text: str) -> Tuple[str, str]:
    stripped = text.rstrip()
    return stripped, text[len(stripped):]


def _ends_with_semicolon(content) -> bool:
    for token in reversed(content or []):
        if token.type in ('whitespace', 'comment'):
            continue
        return token.type == 'literal' and token.value == ';'
    return False


def _convert_rule(item) -> Rule:
    raw_prelude = tinycss2.serialize(item.prelude)
    raw_selector, between = _split_trailing_space(raw_prelude)
    selectors = split_selectors(item.prelude)
    children, after = _convert_nodes(
        tinycss2.parse_blocks_contents(item.content, skip_comments=False, skip_whitespace=False)
    )
    return Rule(selectors, children, raws={
        'selector': {'value': list(selectors), 'raw': raw_selector.strip()},
        'between': between,
        'after': after,
        'semicolon': _ends_with_semicolon(item.content),
    })


def _convert_at_rule(item) -> AtRule:
    name = item.lower_at_keyword
    raw_prelude = tinycss2.serialize(item.prelude)
    after_name = raw_prelude[:len(raw_prelude) - len(raw_prelude.lstrip())]
    params, between = _split_trailing_space(raw_prelude.lstrip())
    raws = {'after_name': after_name, 'between': between}

    if item.content is None:
        return AtRule(name, params, None, raws=raws)

    if name in RULE_LIST_AT_RULES or KEYFRAMES_NAME.match(name):
        items = tinycss2.parse_rule_list(item.content, skip_comments=False, skip_whitespace=False)
    else:
        items = tinycss2.parse_blocks_contents(item.content, skip_comments=False, skip_whitespace=False)
    children, after = _convert_nodes(items)
    raws['after'] = after
    raws['semicolon'] = _ends_with_semicolon(item.content)
    return AtRule(name, params, children, raws=raws)


def _convert_declaration(item) -> Tuple[Declaration, str]:
    """Return the declaration and the whitespace trailing its value."""
    raw_value = tinycss2.serialize(item.value)
    leading = raw_value[:len(raw_value) - len(raw_value.lstrip())]
    value, trailing = _split_trailing_space(raw_value.lstrip())
    decl = Declaration(item.name, value, item.important, raws={'between': ':' + leading})
    return decl, '' if item.important else trailing


def _convert(item) -> Optional[Node]:
    if item.type == 'qualified-rule':
        return _convert_rule(item)
    if item.type == 'at-rule':
        return _convert_at_rule(item)
    if item.type == 'comment':
        return Comment(item.value)
    if item.type == 'error':
        logger.debug(f"Skipping invalid CSS at {item.source_line}:{item.source_column}: {item.message}")
    return None


def _convert_nodes(items) -> Tuple[List[Node], str]:
    """Convert tinycss2 nodes, folding whitespace into each node's ``before``."""
    nodes = []
    pending = ''
    for item in items:
        if item.type == 'whitespace':
            pending += item.value
            continue
        trailing = ''
        if item.type == 'declaration':
            node, trailing = _convert_declaration(item)
        else:
            node = _convert(item)
        if node is None:
            continue
        node.raws['before'] = pending
        pending = trailing
        nodes.append(node)
    return nodes, pending


def parse_stylesheet(text: str) -> StyleSheet:
    """Parse CSS text into a mutable ``StyleSheet``."""
    items = tinycss2.parse_stylesheet(text, skip_comments=False, skip_whitespace=False)
    children, after = _convert_nodes(items)
    return StyleSheet(children, raws={'after': after})


def clone_stylesheet(sheet: StyleSheet) -> StyleSheet:
    """Deep copy with the exact same shape, used as a mirror target."""
    return copy.deepcopy(sheet)


def iter_rules(node: Node) -> Iterator[Rule]:
    """Yield every style rule below ``node`` in document order."""
    for child in node.children or []:
        if isinstance(child, Rule):
            yield child
        if child.children:
            yield from iter_rules(child)


__all__ = [
    'NodeType', 'Node', 'StyleSheet', 'Rule', 'AtRule', 'Declaration', 'Comment',
    'split_selectors', 'parse_stylesheet', 'clone_stylesheet', 'iter_rules',
]
