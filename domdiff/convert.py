"""Conversion of source handles into DOM nodes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from xml.dom import Node, minidom

from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


def to_node(source: Any) -> Node:
    """
    Convert a source handle into a DOM node.

    Accepted sources:
    - a DOM node (returned unchanged)
    - a pathlib.Path to an XML file
    - bytes holding an XML document
    - a str holding an XML document (first non-blank character is '<')
      or a file path otherwise
    - a binary stream with a read() method

    Parse errors (xml.parsers.expat.ExpatError) and missing files propagate
    unchanged.
    """
    if source is None:
        raise InvalidArgumentError("source must not be None")

    if isinstance(source, Node):
        return source

    if isinstance(source, Path):
        logger.debug("Parsing XML file %s", source)
        return minidom.parse(str(source))

    if isinstance(source, (bytes, bytearray)):
        return minidom.parseString(bytes(source))

    if isinstance(source, str):
        if source.lstrip().startswith("<"):
            return minidom.parseString(source)
        logger.debug("Parsing XML file %s", source)
        return minidom.parse(source)

    if hasattr(source, "read"):
        return minidom.parse(source)

    raise InvalidArgumentError(
        "unsupported source type",
        {"type": type(source).__name__}
    )
