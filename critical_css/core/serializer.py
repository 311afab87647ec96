"""Stylesheet serialization with an optional compressing builder."""

import re
from typing import Callable, Optional

from .stylesheet import AtRule, Comment, Declaration, Node, Rule, StyleSheet

# builder(text, node, kind) where kind is None, 'start' or 'end'
Builder = Callable[[str, Optional[Node], Optional[str]], None]

BLOCK_START_SPACE = re.compile(r'\s\{$')


class Stringifier:
    """Walks a tree and feeds text fragments to a builder callback."""

    def __init__(self, builder: Builder):
        self.builder = builder

    def stringify(self, node: Node, semicolon: bool = False) -> None:
        if isinstance(node, StyleSheet):
            self.body(node)
            if node.raws.get('after'):
                self.builder(node.raws['after'], None, None)
        elif isinstance(node, Rule):
            self.block(node, self.rule_selector(node) + node.raws.get('between', ' '))
        elif isinstance(node, AtRule):
            self.at_rule(node, semicolon)
        elif isinstance(node, Declaration):
            self.declaration(node, semicolon)
        elif isinstance(node, Comment):
            self.builder(f"/*{node.text}*/", node, None)
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def rule_selector(self, rule: Rule) -> str:
        raw = rule.raws.get('selector')
        if raw and raw['value'] == rule.selectors:
            return raw['raw']
        return ', '.join(rule.selectors)

    def at_rule(self, node: AtRule, semicolon: bool) -> None:
        name = '@' + node.name
        if node.params:
            name += node.raws.get('after_name', ' ') + node.params
        if node.children is None:
            self.builder(name + node.raws.get('between', '') + ';', node, None)
        else:
            self.block(node, name + node.raws.get('between', ' '))

    def declaration(self, node: Declaration, semicolon: bool) -> None:
        text = node.property + node.raws.get('between', ': ') + node.value
        if node.important:
            text += node.raws.get('important', ' !important')
        if semicolon:
            text += ';'
        self.builder(text, node, None)

    def block(self, node: Node, start: str) -> None:
        self.builder(start + '{', node, 'start')
        if node.children:
            self.body(node)
        after = node.raws.get('after')
        if after:
            self.builder(after, None, None)
        self.builder('}', node, 'end')

    def body(self, node: Node) -> None:
        children = node.children
        last = len(children) - 1
        while last > 0 and isinstance(children[last], Comment):
            last -= 1
        semicolon = node.raws.get('semicolon', False)
        for index, child in enumerate(children):
            before = child.raws.get('before')
            if before:
                self.builder(before, None, None)
            self.stringify(child, index != last or semicolon)


def stringify(node: Node, builder: Builder) -> None:
    """Emit ``node`` as text fragments through ``builder``."""
    Stringifier(builder).stringify(node)


def serialize_stylesheet(ast: StyleSheet, compress: bool = False) -> str:
    """Serialize a stylesheet, optionally stripping comments and whitespace.

    Args:
        ast: Stylesheet to serialize
        compress: Drop comments and collapse formatting whitespace

    Returns:
        CSS text
    """
    parts = []
    # Whether parts[-1] is a declaration; only its ';' is dropped before '}'
    after_declaration = False

    def builder(text: str, node: Optional[Node] = None, kind: Optional[str] = None) -> None:
        nonlocal after_declaration
        if not compress:
            parts.append(text)
            return
        if isinstance(node, Comment):
            return
        if isinstance(node, Declaration):
            prefix = node.property + node.raws.get('between', ': ')
            parts.append(text.replace(prefix, prefix.strip(), 1))
            after_declaration = True
            return
        if kind == 'start':
            if isinstance(node, Rule) and node.selectors:
                parts.append(','.join(node.selectors) + '{')
            else:
                parts.append(BLOCK_START_SPACE.sub('{', text))
            after_declaration = False
            return
        if kind == 'end' and after_declaration and parts[-1].endswith(';'):
            parts[-1] = parts[-1][:-1]
        text = text.strip()
        if text:
            parts.append(text)
            after_declaration = False

    stringify(ast, builder)
    return ''.join(parts)


__all__ = ['Stringifier', 'stringify', 'serialize_stylesheet']
