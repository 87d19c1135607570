"""DOM based difference engine for domdiff."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Optional
from xml.dom import Node

from . import element_selectors, evaluators
from .convert import to_node
from .element_selectors import ElementSelector
from .evaluators import DifferenceEvaluator
from .exceptions import EngineStateError, InvalidArgumentError
from .listeners import ComparisonListener, ComparisonListenerSupport
from .models import Comparison, ComparisonResult, ComparisonType
from .nodes import (
    attribute_map,
    attribute_name,
    comparable_children,
    document_declaration,
    is_whitespace_text,
    local_name,
    namespace_prefix,
    namespace_uri,
    node_label,
    same_kind,
    text_value,
)
from .xpath import attribute_xpath, child_xpaths, xpath_of

logger = logging.getLogger(__name__)

EQUAL = ComparisonResult.EQUAL
CRITICAL = ComparisonResult.CRITICAL


class DOMDifferenceEngine:
    """
    Walks a control and a test DOM tree in parallel and reports every
    comparison it performs to the registered listeners.

    Each comparison gets a provisional outcome (EQUAL when both values are
    equal, DIFFERENT otherwise) which the difference evaluator may change.
    The walk stops as soon as any outcome is CRITICAL.

    The engine is configured before a run and read-only while it runs;
    reconfiguring it or calling compare() from a listener raises
    EngineStateError.
    """

    VERSION = "1.0.0"

    def __init__(
        self,
        element_selector: Optional[ElementSelector] = None,
        difference_evaluator: Optional[DifferenceEvaluator] = None
    ):
        self._listeners = ComparisonListenerSupport()
        self._element_selector = element_selector or element_selectors.default
        self._difference_evaluator = difference_evaluator or evaluators.default
        self._running = False
        self.comparisons_performed = 0

    @property
    def element_selector(self) -> ElementSelector:
        return self._element_selector

    @property
    def difference_evaluator(self) -> DifferenceEvaluator:
        return self._difference_evaluator

    @property
    def is_running(self) -> bool:
        return self._running

    def add_comparison_listener(self, listener: ComparisonListener):
        self._check_configurable("add a comparison listener")
        if listener is None:
            raise InvalidArgumentError("listener must not be None")
        self._listeners.add_comparison_listener(listener)

    def add_match_listener(self, listener: ComparisonListener):
        self._check_configurable("add a match listener")
        if listener is None:
            raise InvalidArgumentError("listener must not be None")
        self._listeners.add_match_listener(listener)

    def add_difference_listener(self, listener: ComparisonListener):
        self._check_configurable("add a difference listener")
        if listener is None:
            raise InvalidArgumentError("listener must not be None")
        self._listeners.add_difference_listener(listener)

    def set_element_selector(self, selector: ElementSelector):
        self._check_configurable("set the element selector")
        if selector is None:
            raise InvalidArgumentError("element selector must not be None")
        self._element_selector = selector

    def set_difference_evaluator(self, evaluator: DifferenceEvaluator):
        self._check_configurable("set the difference evaluator")
        if evaluator is None:
            raise InvalidArgumentError("difference evaluator must not be None")
        self._difference_evaluator = evaluator

    def compare(self, control: Any, test: Any) -> ComparisonResult:
        """
        Compare two XML sources.

        Args:
            control: The reference document (any source accepted by to_node)
            test: The candidate document

        Returns:
            The maximum outcome observed, or CRITICAL if the walk was stopped
        """
        if control is None:
            raise InvalidArgumentError("control must not be None")
        if test is None:
            raise InvalidArgumentError("test must not be None")
        self._check_configurable("start a comparison")

        control_node = to_node(control)
        test_node = to_node(test)

        self._running = True
        self.comparisons_performed = 0
        logger.debug("Comparing %s with %s", control_node.nodeName, test_node.nodeName)
        try:
            outcome = self.compare_nodes(control_node, test_node)
        finally:
            self._running = False

        logger.debug(
            "Comparison finished with %s after %d comparisons",
            outcome.value, self.comparisons_performed
        )
        return outcome

    def compare_nodes(
        self,
        control: Any,
        test: Any,
        control_xpath: Optional[str] = None,
        test_xpath: Optional[str] = None
    ) -> ComparisonResult:
        """
        Recursively compare two nodes.

        Performs the comparisons common to all node types, then the node type
        specific ones and finally recurses into the child lists. Stops as soon
        as any comparison is CRITICAL.
        """
        if control_xpath is None:
            control_xpath = xpath_of(control)
        if test_xpath is None:
            test_xpath = xpath_of(test)

        outcome = self._perform(
            self._node_comparisons(control, control_xpath, test, test_xpath)
        )
        if outcome == CRITICAL:
            return outcome

        return max(outcome, self.compare_node_lists(control, test, control_xpath, test_xpath))

    def compare_node_lists(
        self,
        control: Any,
        test: Any,
        control_xpath: Optional[str] = None,
        test_xpath: Optional[str] = None
    ) -> ComparisonResult:
        """
        Pair the children of two nodes and compare them.

        Elements are paired through the element selector, other children with
        the earliest unused test child of the same kind; whitespace-only text
        only pairs with whitespace-only text. Each pair is checked
        for its position and compared recursively; unpaired children on either
        side are reported as CHILD_LOOKUP differences.
        """
        if control_xpath is None:
            control_xpath = xpath_of(control)
        if test_xpath is None:
            test_xpath = xpath_of(test)

        control_children = comparable_children(control)
        test_children = comparable_children(test)
        control_paths = child_xpaths(control_xpath, control_children)
        test_paths = child_xpaths(test_xpath, test_children)

        pairs, unmatched_control, unmatched_test = self._match_children(
            control_children, test_children
        )

        outcome = EQUAL
        for i, j in pairs:
            control_child = control_children[i]
            test_child = test_children[j]

            result = self.compare_values(Comparison.of(
                ComparisonType.CHILD_NODELIST_SEQUENCE,
                control_child, control_paths[i], i,
                test_child, test_paths[j], j
            ))
            if result == CRITICAL:
                return result
            outcome = max(outcome, result)

            result = self.compare_nodes(
                control_child, test_child, control_paths[i], test_paths[j]
            )
            if result == CRITICAL:
                return result
            outcome = max(outcome, result)

        missing = (
            Comparison.of(
                ComparisonType.CHILD_LOOKUP,
                control_children[i], control_paths[i], node_label(control_children[i]),
                None, test_xpath, None
            )
            for i in unmatched_control
        )
        extra = (
            Comparison.of(
                ComparisonType.CHILD_LOOKUP,
                None, control_xpath, None,
                test_children[j], test_paths[j], node_label(test_children[j])
            )
            for j in unmatched_test
        )
        result = self._perform(missing, outcome)
        if result == CRITICAL:
            return result
        return self._perform(extra, result)

    def compare_values(self, comparison: Comparison) -> ComparisonResult:
        """
        Compare the detail values of a comparison, let the difference
        evaluator decide on the outcome, notify all listeners and return the
        outcome.
        """
        control_value = comparison.control_details.value
        test_value = comparison.test_details.value
        if control_value is None:
            equal = test_value is None
        else:
            equal = test_value is not None and control_value == test_value
        provisional = ComparisonResult.EQUAL if equal else ComparisonResult.DIFFERENT

        outcome = self._difference_evaluator(comparison, provisional)
        self.comparisons_performed += 1
        self._listeners.fire_comparison_performed(comparison, outcome)

        if outcome == CRITICAL:
            logger.debug(
                "Critical %s at %s, stopping",
                comparison.type.value, comparison.control_details.xpath
            )
        return outcome

    def _perform(
        self,
        comparisons: Iterable[Comparison],
        outcome: ComparisonResult = EQUAL
    ) -> ComparisonResult:
        """Run comparisons in order until one is CRITICAL; return the maximum."""
        for comparison in comparisons:
            result = self.compare_values(comparison)
            if result == CRITICAL:
                return result
            outcome = max(outcome, result)
        return outcome

    def _node_comparisons(
        self,
        control: Any,
        control_xpath: str,
        test: Any,
        test_xpath: str
    ) -> Iterator[Comparison]:
        """Comparisons of a node pair, lazily, in their fixed order."""
        yield Comparison.of(
            ComparisonType.NODE_TYPE,
            control, control_xpath, control.nodeType,
            test, test_xpath, test.nodeType
        )
        yield Comparison.of(
            ComparisonType.NAMESPACE_URI,
            control, control_xpath, namespace_uri(control),
            test, test_xpath, namespace_uri(test)
        )
        yield Comparison.of(
            ComparisonType.NAMESPACE_PREFIX,
            control, control_xpath, namespace_prefix(control),
            test, test_xpath, namespace_prefix(test)
        )

        if same_kind(control, test):
            yield from self._type_specific_comparisons(
                control, control_xpath, test, test_xpath
            )

        yield Comparison.of(
            ComparisonType.CHILD_NODELIST_LENGTH,
            control, control_xpath, len(comparable_children(control)),
            test, test_xpath, len(comparable_children(test))
        )

    def _type_specific_comparisons(
        self,
        control: Any,
        control_xpath: str,
        test: Any,
        test_xpath: str
    ) -> Iterator[Comparison]:
        node_type = control.nodeType

        def both(comparison_type: ComparisonType, control_value: Any, test_value: Any) -> Comparison:
            return Comparison.of(
                comparison_type,
                control, control_xpath, control_value,
                test, test_xpath, test_value
            )

        if node_type == Node.ELEMENT_NODE:
            yield both(ComparisonType.ELEMENT_TAG_NAME, local_name(control), local_name(test))
            yield from self._attribute_comparisons(control, control_xpath, test, test_xpath)

        elif node_type in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE):
            comparison_type = ComparisonType.TEXT_VALUE
            if node_type == test.nodeType == Node.CDATA_SECTION_NODE:
                comparison_type = ComparisonType.CDATA_VALUE
            yield both(comparison_type, text_value(control), text_value(test))

        elif node_type == Node.COMMENT_NODE:
            yield both(ComparisonType.COMMENT_VALUE, control.data, test.data)

        elif node_type == Node.PROCESSING_INSTRUCTION_NODE:
            yield both(ComparisonType.PROCESSING_INSTRUCTION_TARGET, control.target, test.target)
            yield both(ComparisonType.PROCESSING_INSTRUCTION_DATA, control.data, test.data)

        elif node_type == Node.DOCUMENT_TYPE_NODE:
            yield both(ComparisonType.DOCTYPE_NAME, control.name, test.name)
            yield both(ComparisonType.DOCTYPE_PUBLIC_ID, control.publicId, test.publicId)
            yield both(ComparisonType.DOCTYPE_SYSTEM_ID, control.systemId, test.systemId)

        elif node_type == Node.DOCUMENT_NODE:
            control_version, control_encoding, control_standalone = document_declaration(control)
            test_version, test_encoding, test_standalone = document_declaration(test)
            yield both(ComparisonType.XML_VERSION, control_version, test_version)
            yield both(ComparisonType.XML_ENCODING, control_encoding, test_encoding)
            yield both(ComparisonType.XML_STANDALONE, control_standalone, test_standalone)

    def _attribute_comparisons(
        self,
        control: Any,
        control_xpath: str,
        test: Any,
        test_xpath: str
    ) -> Iterator[Comparison]:
        control_attributes = attribute_map(control)
        test_attributes = attribute_map(test)

        for key, control_attr in control_attributes.items():
            control_attr_xpath = attribute_xpath(control_xpath, control_attr)
            test_attr = test_attributes.get(key)
            if test_attr is None:
                yield Comparison.of(
                    ComparisonType.ATTR_NAME_LOOKUP,
                    control_attr, control_attr_xpath, attribute_name(control_attr),
                    test, test_xpath, None
                )
                continue

            test_attr_xpath = attribute_xpath(test_xpath, test_attr)
            yield Comparison.of(
                ComparisonType.ATTR_NAME_LOOKUP,
                control_attr, control_attr_xpath, attribute_name(control_attr),
                test_attr, test_attr_xpath, attribute_name(test_attr)
            )
            yield Comparison.of(
                ComparisonType.ATTR_VALUE,
                control_attr, control_attr_xpath, control_attr.value,
                test_attr, test_attr_xpath, test_attr.value
            )

        for key, test_attr in test_attributes.items():
            if key in control_attributes:
                continue
            yield Comparison.of(
                ComparisonType.ATTR_NAME_LOOKUP,
                control, control_xpath, None,
                test_attr, attribute_xpath(test_xpath, test_attr), attribute_name(test_attr)
            )

    def _match_children(
        self,
        control_children: list,
        test_children: list
    ) -> tuple[list[tuple[int, int]], list[int], list[int]]:
        """
        Pair control children with test children.

        Returns:
            Tuple of (pairs of indices in control order, unmatched control
            indices, unmatched test indices)
        """
        consumed = [False] * len(test_children)
        pairs = []
        unmatched_control = []

        for i, control_child in enumerate(control_children):
            j = self._find_match(control_child, test_children, consumed)
            if j is None:
                unmatched_control.append(i)
                continue
            consumed[j] = True
            pairs.append((i, j))

        unmatched_test = [j for j, used in enumerate(consumed) if not used]
        return pairs, unmatched_control, unmatched_test

    def _find_match(
        self,
        control_child: Any,
        test_children: list,
        consumed: list[bool]
    ) -> Optional[int]:
        if control_child.nodeType == Node.ELEMENT_NODE:
            candidate_indices = [
                j for j, child in enumerate(test_children)
                if not consumed[j] and child.nodeType == Node.ELEMENT_NODE
            ]
            if not candidate_indices:
                return None
            match = self._element_selector(
                control_child, [test_children[j] for j in candidate_indices]
            )
            if match is None:
                return None
            for j in candidate_indices:
                if test_children[j] is match:
                    return j
            logger.warning(
                "Element selector returned a node that is not a candidate for %s",
                control_child.nodeName
            )
            return None

        whitespace = is_whitespace_text(control_child)
        for j, child in enumerate(test_children):
            if consumed[j] or not same_kind(control_child, child):
                continue
            # whitespace-only text pairs only with whitespace-only text
            if is_whitespace_text(child) != whitespace:
                continue
            return j
        return None

    def _check_configurable(self, operation: str):
        if self._running:
            raise EngineStateError(operation)
