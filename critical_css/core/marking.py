"""Two-phase marking state for stylesheet reduction.

Marking runs once over the tree without removing anything: it records which
nodes are pending removal and which selectors survived, then restores each
rule's selectors. The commit pass later replays those decisions. State lives
in a ``MarkTable`` keyed by node identity instead of on the nodes themselves.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .stylesheet import Node, Rule
from .walker import filter_selectors


@dataclass
class MarkState:
    """Per-node marking result."""

    pending_removal: bool = False
    pre_mark_selectors: Optional[List[str]] = None
    marked_selectors: Optional[List[str]] = None


class MarkTable:
    """Side table holding mark states and mirror links for one reduction."""

    def __init__(self):
        self._states: Dict[Node, MarkState] = {}
        self._mirrors: Dict[Node, Node] = {}

    def state(self, node: Node) -> MarkState:
        """Get the state of ``node``, creating an empty one if needed."""
        state = self._states.get(node)
        if state is None:
            state = self._states[node] = MarkState()
        return state

    def get(self, node: Node) -> Optional[MarkState]:
        return self._states.get(node)

    def is_pending(self, node: Node) -> bool:
        state = self._states.get(node)
        return state is not None and state.pending_removal

    def link(self, node: Node, mirror: Node) -> None:
        self._mirrors[node] = mirror

    def unlink(self, node: Node) -> None:
        self._mirrors.pop(node, None)

    def mirror_of(self, node: Node) -> Optional[Node]:
        return self._mirrors.get(node)

    def clear(self) -> None:
        self._states.clear()
        self._mirrors.clear()

    def __len__(self):
        return len(self._states)


def mark_only(predicate: Callable[[Node], Optional[bool]], marks: MarkTable) -> Callable[[Node], bool]:
    """Wrap ``predicate`` so that it only records its decision.

    The returned iterator always keeps the node. A ``False`` result sets the
    node pending removal; for rules the selectors left by the predicate are
    stored as marked and the original selectors are put back, on the node
    and on its mirror.
    """
    def iterator(node: Node) -> bool:
        mirror = marks.mirror_of(node)
        state = marks.state(node)
        if isinstance(node, Rule):
            state.pre_mark_selectors = list(node.selectors)
        mirror_selectors = list(mirror.selectors) if isinstance(mirror, Rule) else None

        if predicate(node) is False:
            state.pending_removal = True

        if isinstance(node, Rule):
            state.marked_selectors = node.selectors
            node.selectors = list(state.pre_mark_selectors)
            if isinstance(mirror, Rule):
                marks.state(mirror).marked_selectors = mirror.selectors
                mirror.selectors = mirror_selectors
        return True

    return iterator


def apply_marked_selectors(node: Node, marks: MarkTable) -> None:
    """Commit the selectors recorded for ``node`` while marking.

    If ``node`` is linked to a mirror rule, the mirror keeps the selectors
    the node gives up.
    """
    state = marks.get(node)
    if not isinstance(node, Rule) or state is None or state.marked_selectors is None:
        return
    survivors = set(state.marked_selectors)
    filter_selectors(node, lambda selector: selector in survivors, marks)


__all__ = ['MarkState', 'MarkTable', 'mark_only', 'apply_marked_selectors']
