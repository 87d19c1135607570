"""XPath locations for comparison details."""

from __future__ import annotations

from typing import Any, Optional
from xml.dom import Node

from .nodes import comparable_children, index_of


def _step_kind(node: Any) -> Optional[tuple]:
    """Key under which siblings are counted, None for nodes without a step."""
    node_type = node.nodeType
    if node_type == Node.ELEMENT_NODE:
        return ("element", node.nodeName)
    if node_type in (Node.TEXT_NODE, Node.CDATA_SECTION_NODE):
        return ("text()",)
    if node_type == Node.COMMENT_NODE:
        return ("comment()",)
    if node_type == Node.PROCESSING_INSTRUCTION_NODE:
        return ("processing-instruction()",)
    return None


def _step(kind: tuple, position: int) -> str:
    name = kind[1] if kind[0] == "element" else kind[0]
    return f"{name}[{position}]"


def append_step(parent_xpath: str, step: str) -> str:
    return f"{parent_xpath}/{step}"


def child_xpaths(parent_xpath: str, children: list) -> list[str]:
    """
    XPath of every child in a comparable child list.

    Positions are 1-based among siblings of the same kind (and name, for
    elements). Nodes without an XPath step (doctype) get the parent's path.
    """
    counters: dict[tuple, int] = {}
    paths = []
    for child in children:
        kind = _step_kind(child)
        if kind is None:
            paths.append(parent_xpath)
            continue
        counters[kind] = counters.get(kind, 0) + 1
        paths.append(append_step(parent_xpath, _step(kind, counters[kind])))
    return paths


def attribute_xpath(element_xpath: str, attr: Any) -> str:
    return append_step(element_xpath, f"@{attr.name}")


def xpath_of(node: Any) -> str:
    """Compute the XPath of a node from its ancestors."""
    if node is None:
        return ""
    if node.nodeType == Node.DOCUMENT_NODE:
        return ""
    if node.nodeType == Node.ATTRIBUTE_NODE:
        return attribute_xpath(xpath_of(node.ownerElement), node)

    parent = node.parentNode
    if parent is None:
        kind = _step_kind(node)
        return append_step("", _step(kind, 1)) if kind else ""

    parent_xpath = xpath_of(parent)
    siblings = comparable_children(parent)
    position = index_of(node, siblings)
    if position is None:
        # a text node inside a run is located by the run's first node
        sibling = node.previousSibling
        while position is None and sibling is not None:
            position = index_of(sibling, siblings)
            sibling = sibling.previousSibling
    if position is None:
        return parent_xpath
    return child_xpaths(parent_xpath, siblings)[position]
