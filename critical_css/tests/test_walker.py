"""Tests for tree walking and the mark/apply protocol."""

import pytest

from ..core.marking import MarkTable, apply_marked_selectors, mark_only
from ..core.serializer import serialize_stylesheet
from ..core.stylesheet import AtRule, Rule, clone_stylesheet, parse_stylesheet
from ..core.walker import (
    filter_selectors,
    has_nested_rules,
    partition,
    walk_style_rules,
    walk_style_rules_with_mirror,
)
from ..utils.error import StructuralMismatchError

class TestPartition:
    """Tests for partition."""

    def test_split_is_stable(self):
        """Test matched and unmatched keep their order."""
        matched, unmatched = partition([1, 2, 3, 4, 5], lambda item, *_: item % 2 == 0)
        assert matched == [2, 4]
        assert unmatched == [1, 3, 5]

    def test_predicate_called_once_in_order(self):
        """Test the predicate sees each item exactly once with its index."""
        calls = []

        def predicate(item, index, items, mirror_items):
            calls.append((item, index, mirror_items))
            return True

        partition(['a', 'b'], predicate, ['x', 'y'])
        assert calls == [('a', 0, ['x', 'y']), ('b', 1, ['x', 'y'])]

    def test_empty(self):
        """Test partitioning an empty list."""
        assert partition([], lambda *_: True) == ([], [])

class TestHasNestedRules:
    """Tests for has_nested_rules."""

    def test_containers(self):
        """Test which nodes are recursed into."""
        media, keyframes, rule, font_face = parse_stylesheet(
            "@media print { a { top: 0 } }"
            "@keyframes spin { from { top: 0 } }"
            "b { top: 0 }"
            "@font-face { font-family: X }"
        ).children
        assert has_nested_rules(media)
        assert not has_nested_rules(keyframes)
        assert not has_nested_rules(rule)
        assert not has_nested_rules(font_face)
        assert not has_nested_rules(AtRule('media', 'print', []))

class TestWalkStyleRules:
    """Tests for walk_style_rules."""

    def test_post_order(self):
        """Test nested children are visited before their container."""
        sheet = parse_stylesheet("@media print { a{top:0} } b{top:0}")
        seen = []

        def iterator(node):
            seen.append(node.selectors[0] if isinstance(node, Rule) else '@' + node.name)

        walk_style_rules(sheet, iterator, MarkTable())
        assert seen == ['a', '@media', 'b']

    def test_false_drops(self):
        """Test that returning False removes the child."""
        sheet = parse_stylesheet("a{top:0} b{top:0} @media print { b{top:0} c{top:0} }")
        walk_style_rules(
            sheet,
            lambda node: not (isinstance(node, Rule) and node.selectors == ['b']),
            MarkTable()
        )
        assert serialize_stylesheet(sheet, compress=True) == "a{top:0}@media print{c{top:0}}"

    def test_clears_mirror_links(self):
        """Test that stale mirror links are removed."""
        sheet = parse_stylesheet("a, b {top:0}")
        stale = parse_stylesheet("a, b {top:0}").children[0]
        marks = MarkTable()
        marks.link(sheet.children[0], stale)

        def iterator(node):
            filter_selectors(node, lambda selector: selector == 'a', marks)

        walk_style_rules(sheet, iterator, marks)
        assert sheet.children[0].selectors == ['a']
        assert stale.selectors == ['a', 'b']

class TestMirroredWalk:
    """Tests for walk_style_rules_with_mirror."""

    def test_without_mirror(self):
        """Test that no mirror behaves like the plain walk."""
        sheet = parse_stylesheet("a{top:0} b{top:0}")
        walk_style_rules_with_mirror(
            sheet, None, lambda node: node.selectors == ['a'], MarkTable()
        )
        assert [rule.selectors for rule in sheet.children] == [['a']]

    def test_complement(self):
        """Test the mirror keeps exactly what the primary gives up."""
        sheet = parse_stylesheet(
            "a, x { top: 0 } y { top: 1px } @media print { a { top: 2px } z { top: 3px } }"
        )
        mirror = clone_stylesheet(sheet)
        marks = MarkTable()

        def iterator(node):
            if isinstance(node, Rule):
                filter_selectors(node, lambda selector: selector == 'a', marks)
                return bool(node.selectors)

        walk_style_rules_with_mirror(sheet, mirror, iterator, marks)
        assert serialize_stylesheet(sheet, compress=True) == (
            "a{top:0}@media print{a{top:2px}}"
        )
        assert serialize_stylesheet(mirror, compress=True) == (
            "x{top:0}y{top:1px}@media print{z{top:3px}}"
        )

    def test_fully_kept_container_leaves_mirror(self):
        """Test a container fully claimed by the primary is not duplicated."""
        sheet = parse_stylesheet("@media print { a { top: 0 } }")
        mirror = clone_stylesheet(sheet)
        marks = MarkTable()

        def iterator(node):
            if isinstance(node, Rule):
                filter_selectors(node, lambda selector: True, marks)

        walk_style_rules_with_mirror(sheet, mirror, iterator, marks)
        assert serialize_stylesheet(sheet, compress=True) == "@media print{a{top:0}}"
        assert serialize_stylesheet(mirror, compress=True) == ''

    def test_rejected_empty_blocks_leave_mirror(self):
        """Test dropped blocks without content are not moved to the mirror."""
        sheet = parse_stylesheet("a {} b { /* c */ } @media print {} c { top: 0 } @import url(x);")
        mirror = clone_stylesheet(sheet)
        marks = MarkTable()

        def iterator(node):
            if isinstance(node, Rule):
                filter_selectors(node, lambda selector: selector == 'c', marks)
                return bool(node.selectors)
            return False

        walk_style_rules_with_mirror(sheet, mirror, iterator, marks)
        assert serialize_stylesheet(sheet, compress=True) == "c{top:0}"
        assert serialize_stylesheet(mirror, compress=True) == "@import url(x);"

    def test_structure_mismatch(self):
        """Test that differently shaped trees are rejected."""
        sheet = parse_stylesheet("a{top:0} b{top:0}")
        with pytest.raises(StructuralMismatchError):
            walk_style_rules_with_mirror(
                sheet, parse_stylesheet("a{top:0}"), lambda node: True, MarkTable()
            )
        with pytest.raises(StructuralMismatchError):
            walk_style_rules_with_mirror(
                sheet, parse_stylesheet("a{top:0} @media print { b{top:0} }"),
                lambda node: True, MarkTable()
            )

class TestFilterSelectors:
    """Tests for filter_selectors."""

    def test_plain_filter(self):
        """Test filtering without a mirror."""
        rule = Rule(['a', 'b', 'c'])
        filter_selectors(rule, lambda selector: selector != 'b')
        assert rule.selectors == ['a', 'c']

    def test_joint_filter(self):
        """Test the mirror receives the rejected selectors."""
        rule, mirror = Rule(['a', 'b', 'c']), Rule(['a', 'b', 'c'])
        marks = MarkTable()
        marks.link(rule, mirror)
        filter_selectors(rule, lambda selector: selector == 'b', marks)
        assert rule.selectors == ['b']
        assert mirror.selectors == ['a', 'c']

class TestMarking:
    """Tests for mark_only and apply_marked_selectors."""

    def test_mark_restores_selectors(self):
        """Test marking records the decision without applying it."""
        rule = Rule(['a', 'b'])
        marks = MarkTable()

        def predicate(node):
            filter_selectors(node, lambda selector: selector == 'a', marks)

        assert mark_only(predicate, marks)(rule) is True
        state = marks.get(rule)
        assert rule.selectors == ['a', 'b']
        assert state.pre_mark_selectors == ['a', 'b']
        assert state.marked_selectors == ['a']
        assert not state.pending_removal

        apply_marked_selectors(rule, marks)
        assert rule.selectors == ['a']

    def test_false_sets_pending(self):
        """Test that a False predicate marks the node."""
        rule = Rule(['a'])
        marks = MarkTable()
        mark_only(lambda node: False, marks)(rule)
        assert marks.is_pending(rule)
        assert rule.selectors == ['a']

    def test_mark_restores_mirror(self):
        """Test marking restores the linked mirror's selectors too."""
        rule, mirror = Rule(['a', 'b']), Rule(['a', 'b'])
        marks = MarkTable()
        marks.link(rule, mirror)
        mark_only(lambda node: filter_selectors(node, lambda selector: selector == 'b', marks), marks)(rule)
        assert rule.selectors == ['a', 'b']
        assert mirror.selectors == ['a', 'b']
        assert marks.get(mirror).marked_selectors == ['a']

    def test_apply_with_mirror(self):
        """Test that committing splits selectors into the mirror."""
        rule, mirror = Rule(['a', 'b', 'c']), Rule(['a', 'b', 'c'])
        marks = MarkTable()
        marks.state(rule).marked_selectors = ['a', 'c']
        marks.link(rule, mirror)
        apply_marked_selectors(rule, marks)
        assert rule.selectors == ['a', 'c']
        assert mirror.selectors == ['b']

    def test_apply_without_state(self):
        """Test that unmarked nodes are left alone."""
        rule = Rule(['a'])
        apply_marked_selectors(rule, MarkTable())
        assert rule.selectors == ['a']

    def test_clear(self):
        """Test clearing the table drops states and links."""
        rule, mirror = Rule(['a']), Rule(['a'])
        marks = MarkTable()
        marks.state(rule).pending_removal = True
        marks.link(rule, mirror)
        marks.clear()
        assert len(marks) == 0
        assert marks.mirror_of(rule) is None
        assert not marks.is_pending(rule)
