"""Strategies pairing a control element with one of the candidate test elements."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from .exceptions import ConfigError
from .nodes import attribute_map, element_text, local_name, namespace_uri

# (control element, candidate test elements in document order) -> chosen element or None
ElementSelector = Callable[[Any, Sequence[Any]], Optional[Any]]


def from_predicate(predicate: Callable[[Any, Any], bool]) -> ElementSelector:
    """
    Build a selector from a pairwise predicate.

    The earliest candidate satisfying the predicate wins.
    """
    def select(control: Any, candidates: Sequence[Any]) -> Optional[Any]:
        for candidate in candidates:
            if predicate(control, candidate):
                return candidate
        return None
    return select


def same_name(control: Any, test: Any) -> bool:
    return (namespace_uri(control) == namespace_uri(test)
            and local_name(control) == local_name(test))


def same_text(control: Any, test: Any) -> bool:
    return element_text(control) == element_text(test)


def _attribute_values(element: Any) -> dict:
    return {key: attr.value for key, attr in attribute_map(element).items()}


by_name = from_predicate(same_name)

by_name_and_text = from_predicate(
    lambda control, test: same_name(control, test) and same_text(control, test)
)

by_name_and_all_attributes = from_predicate(
    lambda control, test: (same_name(control, test)
                           and _attribute_values(control) == _attribute_values(test))
)


def by_name_and_attributes(*names: str) -> ElementSelector:
    """
    Match elements with the same name and the same values for the named
    attributes. An attribute missing on both sides counts as equal.
    """
    def predicate(control: Any, test: Any) -> bool:
        if not same_name(control, test):
            return False
        for name in names:
            if control.hasAttribute(name) != test.hasAttribute(name):
                return False
            if control.getAttribute(name) != test.getAttribute(name):
                return False
        return True
    return from_predicate(predicate)


def first_of(*selectors: ElementSelector) -> ElementSelector:
    """Ask each selector in turn; the first one finding a match wins."""
    def select(control: Any, candidates: Sequence[Any]) -> Optional[Any]:
        for selector in selectors:
            match = selector(control, candidates)
            if match is not None:
                return match
        return None
    return select


default = by_name

_BY_NAME = {
    "by_name": by_name,
    "by_name_and_text": by_name_and_text,
    "by_name_and_all_attributes": by_name_and_all_attributes,
}

SELECTOR_NAMES = tuple(_BY_NAME)


def by_config_name(name: str) -> ElementSelector:
    """Resolve a selector from its EngineConfig name."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise ConfigError(
            "element_selector",
            f"expected one of {', '.join(SELECTOR_NAMES)}, got {name!r}"
        )
