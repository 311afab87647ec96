"""Two-pass critical CSS reduction of a single stylesheet."""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Union

from ..utils.common import pretty_bytes
from ..utils.config import KEYFRAMES_ALL, KEYFRAMES_NONE
from ..utils.error import SelectorSyntaxError
from ..utils.logging import create_logger
from .marking import MarkTable, apply_marked_selectors, mark_only
from .options import Options
from .serializer import serialize_stylesheet
from .stylesheet import AtRule, Comment, Declaration, Node, Rule, StyleSheet, clone_stylesheet, parse_stylesheet
from .walker import filter_selectors, has_content, walk_style_rules, walk_style_rules_with_mirror

BARE_PSEUDO_ELEMENT = re.compile(r'^::?(before|after)$')
PSEUDO_SELECTOR = re.compile(r'(?<!\\)::?[a-z-]+(?![a-z-(])', re.IGNORECASE)
EMPTY_NOT = re.compile(r'::?not\(\s*\)')
FONT_PROPERTY = re.compile(r'\bfont(-family)?\b', re.IGNORECASE)
FONT_URL = re.compile(r'url\s*\(\s*([\'"]?)(.+?)\1\s*\)')
ANIMATION_PROPERTIES = ('animation', 'animation-name')


def strip_pseudo_selectors(selector: str) -> str:
    """Remove pseudo-classes and pseudo-elements that cannot be matched statically.

    Functional pseudo-classes such as ``:not(.a)`` or ``:is(h1, h2)`` are kept;
    a ``:not()`` left empty is dropped.
    """
    selector = PSEUDO_SELECTOR.sub('', selector)
    selector = EMPTY_NOT.sub('', selector)
    return selector.strip()


@dataclass
class UsageEvidence:
    """Fonts and animations referenced by critical rules."""

    critical_fonts: str = ''
    critical_keyframe_names: Set[str] = field(default_factory=set)

    def collect(self, declarations: List[Declaration]) -> None:
        for decl in declarations:
            prop = decl.property.lower()
            if FONT_PROPERTY.search(prop):
                self.critical_fonts += ' ' + decl.value
            if prop in ANIMATION_PROPERTIES:
                self.critical_keyframe_names.update(decl.value.split())


@dataclass
class ReductionResult:
    """Outcome of reducing one stylesheet."""

    critical_text: str
    original_text: str
    name: str = 'inline CSS'
    non_critical_text: Optional[str] = None
    fully_inlined: bool = False
    failed_selectors: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.critical_text.strip()

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'original_size': len(self.original_text),
            'critical_size': len(self.critical_text),
            'non_critical_size': len(self.non_critical_text) if self.non_critical_text is not None else None,
            'fully_inlined': self.fully_inlined,
            'failed_selectors': list(self.failed_selectors),
        }


class CriticalReducer:
    """Reduce stylesheets to the rules a document needs for its first render.

    ``document`` is any object with ``exists(selector)`` and
    ``add_font_preload(href)``, typically a ``dom.HTMLDocument``.
    """

    def __init__(self, options: Optional[Options] = None, logger=None):
        self.options = options or Options()
        self.logger = logger or self.options.logger or create_logger(self.options.log_level)

    def reduce(self, stylesheet: Union[str, StyleSheet], document, name: str = 'inline CSS') -> ReductionResult:
        """Split ``stylesheet`` into critical and non-critical CSS for ``document``.

        Args:
            stylesheet: CSS text, or a parsed stylesheet that is left untouched
            document: Document the selectors are matched against
            name: Label used in log messages

        Returns:
            ReductionResult

        Raises:
            StructuralMismatchError: If the source and mirror trees diverge
        """
        prune = self.options.prune_source
        if isinstance(stylesheet, StyleSheet):
            original = serialize_stylesheet(stylesheet)
            ast = clone_stylesheet(stylesheet)
            ast_inverse = clone_stylesheet(stylesheet) if prune else None
        else:
            original = stylesheet
            ast = parse_stylesheet(stylesheet)
            ast_inverse = parse_stylesheet(stylesheet) if prune else None

        marks = MarkTable()
        evidence = UsageEvidence()
        failed_selectors = []
        try:
            walk_style_rules(ast, mark_only(self._mark_predicate(document, marks, evidence, failed_selectors), marks), marks)
            if failed_selectors:
                self.logger.warn(
                    f"{len(failed_selectors)} rules skipped due to selector errors:\n  "
                    + '\n  '.join(failed_selectors)
                )
            walk_style_rules_with_mirror(ast, ast_inverse, self._commit_predicate(document, marks, evidence), marks)
        finally:
            marks.clear()

        compress = self.options.compress
        result = ReductionResult(
            critical_text=serialize_stylesheet(ast, compress=compress),
            original_text=original,
            name=name,
            failed_selectors=failed_selectors,
        )
        if ast_inverse is not None:
            result.non_critical_text = serialize_stylesheet(ast_inverse, compress=compress)

        if result.is_empty:
            return result

        minimum = self.options.minimum_external_size
        if prune and minimum and len(result.non_critical_text) < minimum:
            self.logger.info(
                f"Inlined all of {name} (non-critical external stylesheet would have been "
                f"{len(result.non_critical_text)}b, which was below the threshold of {minimum})"
            )
            result.critical_text = original
            result.fully_inlined = True
            return result

        self._report(result)
        return result

    def _report(self, result: ReductionResult) -> None:
        before = len(result.original_text)
        after = len(result.critical_text)
        percent = after / before * 100 if before else 0
        message = (
            f"Inlined {pretty_bytes(after)} ({percent:.0f}% of original {pretty_bytes(before)}) "
            f"of {result.name}"
        )
        if result.non_critical_text is not None:
            remaining = len(result.non_critical_text)
            reduction = (before - remaining) / before * 100 if before else 0
            message += f", reducing non-inlined size {reduction:.0f}% to {pretty_bytes(remaining)}"
        self.logger.info(message + '.')

    def _is_critical_selector(self, document, failed_selectors: List[str]) -> Callable[[str], bool]:
        def check(selector: str) -> bool:
            if selector == ':root' or BARE_PSEUDO_ELEMENT.match(selector):
                return True
            normalized = strip_pseudo_selectors(selector)
            if not normalized:
                return False
            try:
                return document.exists(normalized)
            except SelectorSyntaxError as e:
                failed_selectors.append(f"{normalized} -> {e.reason}")
                return False
        return check

    def _mark_predicate(self, document, marks: MarkTable, evidence: UsageEvidence,
                        failed_selectors: List[str]) -> Callable[[Node], Optional[bool]]:
        is_critical_selector = self._is_critical_selector(document, failed_selectors)

        def predicate(node: Node) -> Optional[bool]:
            if isinstance(node, Rule):
                filter_selectors(node, is_critical_selector, marks)
                if not node.selectors:
                    return False
                evidence.collect(node.declarations)

            if isinstance(node, AtRule) and node.is_font_face:
                return None

            # Statements, declarations and comments carry no children
            if node.children is None or isinstance(node, (Declaration, Comment)):
                return True
            return any(
                not isinstance(child, Comment) and not marks.is_pending(child)
                for child in node.children
            )

        return predicate

    def _commit_predicate(self, document, marks: MarkTable, evidence: UsageEvidence) -> Callable[[Node], bool]:
        mode = self.options.keyframes_mode

        def predicate(node: Node) -> bool:
            if marks.is_pending(node):
                return False
            apply_marked_selectors(node, marks)

            if isinstance(node, Rule):
                return bool(node.selectors)
            if isinstance(node, AtRule):
                if node.is_keyframes:
                    if mode == KEYFRAMES_NONE:
                        return False
                    if mode == KEYFRAMES_ALL:
                        return True
                    return node.params in evidence.critical_keyframe_names
                if node.is_font_face:
                    return self._keep_font_face(node, document, evidence)
                if not has_content(node):
                    return False
            return True

        return predicate

    def _keep_font_face(self, rule: AtRule, document, evidence: UsageEvidence) -> bool:
        family = None
        src = None
        for decl in rule.declarations:
            prop = decl.property.lower()
            if prop == 'src':
                match = FONT_URL.search(decl.value)
                src = match.group(2) if match else None
            elif prop == 'font-family':
                family = decl.value

        if src and self.options.should_preload_fonts:
            document.add_font_preload(src.strip())

        return bool(
            self.options.should_inline_fonts
            and family
            and src
            and family in evidence.critical_fonts
        )


__all__ = ['CriticalReducer', 'ReductionResult', 'UsageEvidence', 'strip_pseudo_selectors']
