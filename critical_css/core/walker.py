"""Tree walking helpers for stylesheet reduction.

``walk_style_rules`` filters a tree in place. ``walk_style_rules_with_mirror``
does the same while routing everything the primary tree gives up into a
structurally identical mirror tree, so that the two outputs together cover
the original stylesheet.
"""

from typing import TYPE_CHECKING, Callable, List, Optional, Tuple, TypeVar

from ..utils.error import StructuralMismatchError
from .stylesheet import AtRule, Comment, Node, Rule

if TYPE_CHECKING:
    from .marking import MarkTable

T = TypeVar('T')

# iterator(node) -> False drops the node, anything else keeps it
NodeIterator = Callable[[Node], Optional[bool]]


def partition(items: List[T], predicate: Callable[..., bool],
              mirror_items: Optional[list] = None) -> Tuple[List[T], List[T]]:
    """Split ``items`` into (matched, unmatched), evaluating ``predicate`` once per item.

    The predicate is called as ``predicate(item, index, items, mirror_items)``.
    """
    matched, unmatched = [], []
    for index, item in enumerate(items):
        if predicate(item, index, items, mirror_items):
            matched.append(item)
        else:
            unmatched.append(item)
    return matched, unmatched


def has_nested_rules(node: Node) -> bool:
    """True when ``node`` contains rules or at-rules to recurse into.

    Keyframes blocks are leaves: their frame selectors are not matched
    against the document.
    """
    if not node.children:
        return False
    if isinstance(node, AtRule) and node.is_keyframes:
        return False
    return any(isinstance(child, (Rule, AtRule)) for child in node.children)


def has_content(node: Node) -> bool:
    """False for blocks holding nothing but comments; statements always count."""
    if node.children is None:
        return True
    return any(not isinstance(child, Comment) for child in node.children)


def has_remainder(mirror: Node) -> bool:
    """True when a mirror node still carries something after partitioning."""
    if isinstance(mirror, Rule):
        return bool(mirror.selectors)
    return has_nested_rules(mirror)


def filter_selectors(rule: Rule, predicate: Callable[[str], bool],
                     marks: Optional['MarkTable'] = None) -> None:
    """Keep the selectors of ``rule`` matching ``predicate``.

    When the rule is linked to a mirror rule the mirror receives the
    selectors that were rejected.
    """
    mirror = marks.mirror_of(rule) if marks is not None else None
    if isinstance(mirror, Rule):
        rule.selectors, mirror.selectors = partition(
            rule.selectors, lambda selector, *_: predicate(selector)
        )
    else:
        rule.selectors = [selector for selector in rule.selectors if predicate(selector)]


def walk_style_rules(node: Node, iterator: NodeIterator, marks: 'MarkTable') -> None:
    """Post-order filter of ``node``'s children.

    Nested containers are walked before the iterator sees them, so decisions
    about a container can rely on what is left of its children.
    """
    def visit(child, index, children, mirror_children):
        if has_nested_rules(child):
            walk_style_rules(child, iterator, marks)
        marks.unlink(child)
        return iterator(child) is not False

    node.children, _ = partition(node.children, visit)


def check_structure(node: Node, mirror: Node) -> None:
    """Raise ``StructuralMismatchError`` unless both nodes have matching children."""
    children = node.children or []
    mirror_children = mirror.children or []
    if len(children) != len(mirror_children):
        raise StructuralMismatchError(
            f"Mirror of {node!r} has {len(mirror_children)} children, expected {len(children)}"
        )
    for child, mirror_child in zip(children, mirror_children):
        if type(child) is not type(mirror_child):
            raise StructuralMismatchError(
                f"Mirror node {mirror_child!r} does not match {child!r}"
            )


def walk_style_rules_with_mirror(node: Node, mirror: Optional[Node],
                                 iterator: NodeIterator, marks: 'MarkTable') -> None:
    """Filter ``node`` like ``walk_style_rules`` and keep the complement in ``mirror``.

    Each child is linked to its mirror counterpart before the iterator runs,
    so selector filtering applied by the iterator splits across both trees.
    A mirror child survives if the primary dropped its counterpart and it has
    content, or if it still holds selectors or nested rules after the split.

    Raises:
        StructuralMismatchError: If ``mirror`` is not shaped like ``node``
    """
    if mirror is None:
        walk_style_rules(node, iterator, marks)
        return

    check_structure(node, mirror)
    complement = []

    def visit(child, index, children, mirror_children):
        mirror_child = mirror_children[index]
        if has_nested_rules(child):
            walk_style_rules_with_mirror(child, mirror_child, iterator, marks)
        marks.link(child, mirror_child)
        keep = iterator(child) is not False
        remains = has_remainder(mirror_child) if keep else has_content(mirror_child)
        if remains:
            complement.append(mirror_child)
        return keep

    node.children, _ = partition(node.children, visit, mirror.children)
    mirror.children = complement


__all__ = [
    'partition', 'has_nested_rules', 'has_content', 'has_remainder', 'filter_selectors',
    'walk_style_rules', 'walk_style_rules_with_mirror', 'check_structure',
]
