"""Core functionality for critical CSS extraction."""

from .stylesheet import (
    NodeType, StyleSheet, Rule, AtRule, Declaration, Comment,
    parse_stylesheet, clone_stylesheet,
)
from .serializer import stringify, serialize_stylesheet
from .walker import (
    partition, has_nested_rules, filter_selectors,
    walk_style_rules, walk_style_rules_with_mirror,
)
from .marking import MarkState, MarkTable, mark_only, apply_marked_selectors
from .options import Options
from .reducer import CriticalReducer, ReductionResult, UsageEvidence
from .inliner import CriticalInliner, ProcessResult

__all__ = [
    'NodeType',
    'StyleSheet',
    'Rule',
    'AtRule',
    'Declaration',
    'Comment',
    'parse_stylesheet',
    'clone_stylesheet',
    'stringify',
    'serialize_stylesheet',
    'partition',
    'has_nested_rules',
    'filter_selectors',
    'walk_style_rules',
    'walk_style_rules_with_mirror',
    'MarkState',
    'MarkTable',
    'mark_only',
    'apply_marked_selectors',
    'Options',
    'CriticalReducer',
    'ReductionResult',
    'UsageEvidence',
    'CriticalInliner',
    'ProcessResult',
]
