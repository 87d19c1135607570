"""Human readable descriptions of comparisons."""

from __future__ import annotations

from typing import Any
from xml.dom import Node

from .models import Comparison, ComparisonType, NodeDetails
from .nodes import node_type_name, text_value
from .utils import shorten


class ComparisonFormatter:
    """
    Describes a comparison in one line, e.g.

        Expected element tag name 'a' but was 'b' - comparing <a...> at /a[1]
        to <b...> at /b[1]
    """

    def describe(self, comparison: Comparison) -> str:
        control = comparison.control_details
        test = comparison.test_details
        return (
            f"Expected {comparison.type.description} "
            f"{self._value(comparison.type, control.value)} "
            f"but was {self._value(comparison.type, test.value)} - comparing "
            f"{self._location(control)} to {self._location(test)}"
        )

    def _value(self, comparison_type: ComparisonType, value: Any) -> str:
        if comparison_type == ComparisonType.NODE_TYPE and value is not None:
            return f"'{node_type_name(value)}'"
        if isinstance(value, str):
            return shorten(value)
        if value is None:
            return "null"
        return str(value)

    def _location(self, details: NodeDetails) -> str:
        rendered = self.short_node(details.node)
        if details.xpath:
            return f"{rendered} at {details.xpath}"
        return rendered

    def short_node(self, node: Any) -> str:
        """Short textual rendering of a node."""
        if node is None:
            return "<NULL>"

        node_type = node.nodeType
        if node_type == Node.ELEMENT_NODE:
            return f"<{node.tagName}...>"
        if node_type == Node.ATTRIBUTE_NODE:
            return f"{node.name}=\"{shorten(node.value, 30, quote=False)}\""
        if node_type == Node.TEXT_NODE:
            return shorten(text_value(node), 30)
        if node_type == Node.CDATA_SECTION_NODE:
            return f"<![CDATA[{shorten(node.data, 30, quote=False)}]]>"
        if node_type == Node.COMMENT_NODE:
            return f"<!--{shorten(node.data, 30, quote=False)}-->"
        if node_type == Node.PROCESSING_INSTRUCTION_NODE:
            return f"<?{node.target} {shorten(node.data, 30, quote=False)}?>"
        if node_type == Node.DOCUMENT_TYPE_NODE:
            return f"<!DOCTYPE {node.name}>"
        if node_type == Node.DOCUMENT_NODE:
            return "<#document>"
        return node.nodeName
