"""DOM helpers shared by the engine, selectors and evaluators."""

from __future__ import annotations

from typing import Any, Optional
from xml.dom import Node

XMLNS_NAMESPACE = "http://www.w3.org/2000/xmlns/"

CHARACTER_DATA_TYPES = (Node.TEXT_NODE, Node.CDATA_SECTION_NODE)

NODE_TYPE_NAMES = {
    Node.ELEMENT_NODE: "Element",
    Node.ATTRIBUTE_NODE: "Attribute",
    Node.TEXT_NODE: "Text",
    Node.CDATA_SECTION_NODE: "CDATA Section",
    Node.ENTITY_REFERENCE_NODE: "Entity Reference",
    Node.ENTITY_NODE: "Entity",
    Node.PROCESSING_INSTRUCTION_NODE: "Processing Instruction",
    Node.COMMENT_NODE: "Comment",
    Node.DOCUMENT_NODE: "Document",
    Node.DOCUMENT_TYPE_NODE: "Document Type",
    Node.DOCUMENT_FRAGMENT_NODE: "Document Fragment",
    Node.NOTATION_NODE: "Notation",
}


def node_type_name(node_type: Any) -> str:
    """Friendly name for a DOM node type constant."""
    return NODE_TYPE_NAMES.get(node_type, str(node_type))


def is_character_data(node: Any) -> bool:
    return node.nodeType in CHARACTER_DATA_TYPES


def same_kind(control: Any, test: Any) -> bool:
    """True when both nodes have the same type, text and CDATA counting as one."""
    if control.nodeType == test.nodeType:
        return True
    return is_character_data(control) and is_character_data(test)


def namespace_uri(node: Any) -> Optional[str]:
    return getattr(node, 'namespaceURI', None) or None


def namespace_prefix(node: Any) -> Optional[str]:
    return getattr(node, 'prefix', None) or None


def local_name(node: Any) -> str:
    return getattr(node, 'localName', None) or node.nodeName


def node_label(node: Any) -> str:
    """Name used to identify a child in lookups (tag name, '#text', PI target...)."""
    return node.nodeName


def comparable_children(node: Any) -> list:
    """
    Children of a node with every run of adjacent text nodes collapsed.

    The first text node of a run stands for the whole run; text_value()
    returns the concatenated data.
    """
    result = []
    previous = None
    for child in node.childNodes:
        if (child.nodeType == Node.TEXT_NODE and previous is not None
                and previous.nodeType == Node.TEXT_NODE):
            previous = child
            continue
        result.append(child)
        previous = child
    return result


def text_value(node: Any) -> str:
    """Data of a character data node, including adjacent text siblings for text nodes."""
    if node.nodeType != Node.TEXT_NODE:
        return node.data

    parts = [node.data]
    sibling = node.nextSibling
    while sibling is not None and sibling.nodeType == Node.TEXT_NODE:
        parts.append(sibling.data)
        sibling = sibling.nextSibling
    return "".join(parts)


def is_whitespace_text(node: Any) -> bool:
    return node.nodeType == Node.TEXT_NODE and text_value(node).strip() == ""


def significant_children(node: Any) -> list:
    """Comparable children without whitespace-only text fragments."""
    return [c for c in comparable_children(node) if not is_whitespace_text(c)]


def index_of(node: Any, siblings: list) -> Optional[int]:
    for i, sibling in enumerate(siblings):
        if sibling is node:
            return i
    return None


def element_text(element: Any) -> str:
    """Concatenated character data of an element's direct children."""
    return "".join(
        child.data for child in element.childNodes if is_character_data(child)
    )


def is_namespace_declaration(attr: Any) -> bool:
    if attr.namespaceURI == XMLNS_NAMESPACE:
        return True
    return attr.name == "xmlns" or attr.name.startswith("xmlns:")


def attribute_key(attr: Any) -> tuple:
    return (namespace_uri(attr), local_name(attr))


def attribute_name(attr: Any) -> str:
    """Prefix independent attribute name, '{uri}local' for namespaced attributes."""
    uri, name = attribute_key(attr)
    if uri:
        return f"{{{uri}}}{name}"
    return name


def attribute_map(element: Any) -> dict:
    """Attributes of an element keyed by (namespace, local name), in document order."""
    result = {}
    if element.attributes is None:
        return result
    for attr in element.attributes.values():
        if is_namespace_declaration(attr):
            continue
        result[attribute_key(attr)] = attr
    return result


def document_declaration(document: Any) -> tuple:
    """(version, encoding, standalone) as declared; None for anything undeclared."""
    return (
        getattr(document, 'version', None),
        getattr(document, 'encoding', None),
        getattr(document, 'standalone', None),
    )
