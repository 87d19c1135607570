"""Difference evaluators: policies adjusting the engine's provisional outcome."""

from __future__ import annotations

from typing import Any, Callable, Optional
from xml.dom import Node

from .models import Comparison, ComparisonResult, ComparisonType
from .nodes import index_of, is_whitespace_text, significant_children

DifferenceEvaluator = Callable[[Comparison, ComparisonResult], ComparisonResult]

EQUAL = ComparisonResult.EQUAL
SIMILAR = ComparisonResult.SIMILAR
DIFFERENT = ComparisonResult.DIFFERENT
CRITICAL = ComparisonResult.CRITICAL

# differences that do not change the meaning of a document
_SIMILAR_TYPES = frozenset({
    ComparisonType.NAMESPACE_PREFIX,
    ComparisonType.DOCTYPE_SYSTEM_ID,
    ComparisonType.XML_ENCODING,
    ComparisonType.CHILD_NODELIST_SEQUENCE,
})

_TEXT_AND_CDATA = frozenset({Node.TEXT_NODE, Node.CDATA_SECTION_NODE})


def accept(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """Keep the engine's outcome."""
    return outcome


def default(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """
    Downgrade differences that keep the documents equivalent to SIMILAR:
    namespace prefixes, doctype system ids, declared encodings, child order
    and text vs CDATA node types.
    """
    if outcome != DIFFERENT:
        return outcome

    if comparison.type in _SIMILAR_TYPES:
        return SIMILAR

    if comparison.type == ComparisonType.NODE_TYPE:
        kinds = {comparison.control_details.value, comparison.test_details.value}
        if kinds == _TEXT_AND_CDATA:
            return SIMILAR

    return outcome


def chain(*evaluators: DifferenceEvaluator) -> DifferenceEvaluator:
    """Feed the outcome of each evaluator into the next one."""
    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        for evaluator in evaluators:
            outcome = evaluator(comparison, outcome)
        return outcome
    return evaluate


def first(*evaluators: DifferenceEvaluator) -> DifferenceEvaluator:
    """The first evaluator that changes the outcome decides."""
    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        for evaluator in evaluators:
            altered = evaluator(comparison, outcome)
            if altered != outcome:
                return altered
        return outcome
    return evaluate


def _replace(
    types: tuple,
    matches: Callable[[ComparisonResult], bool],
    replacement: ComparisonResult
) -> DifferenceEvaluator:
    selected = frozenset(types)

    def evaluate(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
        if comparison.type in selected and matches(outcome):
            return replacement
        return outcome
    return evaluate


def downgrade_differences_to_equal(*types: ComparisonType) -> DifferenceEvaluator:
    """SIMILAR and DIFFERENT outcomes of the given types become EQUAL."""
    return _replace(types, lambda outcome: outcome in (SIMILAR, DIFFERENT), EQUAL)


def downgrade_differences_to_similar(*types: ComparisonType) -> DifferenceEvaluator:
    """DIFFERENT outcomes of the given types become SIMILAR."""
    return _replace(types, lambda outcome: outcome == DIFFERENT, SIMILAR)


def upgrade_differences_to_different(*types: ComparisonType) -> DifferenceEvaluator:
    """SIMILAR outcomes of the given types become DIFFERENT."""
    return _replace(types, lambda outcome: outcome == SIMILAR, DIFFERENT)


def stop_when_different(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """Turn DIFFERENT into CRITICAL so the walk stops at the first real difference."""
    return CRITICAL if outcome == DIFFERENT else outcome


def stop_when_similar(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """Turn SIMILAR and DIFFERENT into CRITICAL."""
    return CRITICAL if outcome in (SIMILAR, DIFFERENT) else outcome


def _collapse(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return " ".join(value.split())


def _significant_index(node: Any) -> Optional[int]:
    parent = node.parentNode
    if parent is None:
        return None
    return index_of(node, significant_children(parent))


def ignore_whitespace(comparison: Comparison, outcome: ComparisonResult) -> ComparisonResult:
    """
    Downgrade differences caused only by whitespace to SIMILAR.

    Covers text values differing in whitespace, whitespace-only text present
    on one side, and the child counts and positions shifted by such text.
    """
    if outcome != DIFFERENT:
        return outcome

    control = comparison.control_details
    test = comparison.test_details
    comparison_type = comparison.type

    if comparison_type == ComparisonType.TEXT_VALUE:
        collapsed = _collapse(control.value)
        if collapsed is not None and collapsed == _collapse(test.value):
            return SIMILAR

    elif comparison_type == ComparisonType.CHILD_LOOKUP:
        node = control.node if control.node is not None else test.node
        if node is not None and is_whitespace_text(node):
            return SIMILAR

    elif comparison_type == ComparisonType.CHILD_NODELIST_LENGTH:
        if len(significant_children(control.node)) == len(significant_children(test.node)):
            return SIMILAR

    elif comparison_type == ComparisonType.CHILD_NODELIST_SEQUENCE:
        if is_whitespace_text(control.node) or is_whitespace_text(test.node):
            return SIMILAR
        if _significant_index(control.node) == _significant_index(test.node):
            return SIMILAR

    return outcome
