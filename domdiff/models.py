"""Data models for the domdiff engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .element_selectors import SELECTOR_NAMES
from .exceptions import ConfigError
from .utils import load_structured_file


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def logging_name(self) -> str:
        return "WARNING" if self is LogLevel.WARN else self.value


class ComparisonResult(Enum):
    """Outcome of a single comparison, ordered EQUAL < SIMILAR < DIFFERENT < CRITICAL."""
    EQUAL = "EQUAL"
    SIMILAR = "SIMILAR"
    DIFFERENT = "DIFFERENT"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _RESULT_ORDER[self.value]

    def __lt__(self, other):
        if not isinstance(other, ComparisonResult):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ComparisonResult):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ComparisonResult):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ComparisonResult):
            return NotImplemented
        return self.rank >= other.rank


_RESULT_ORDER = {"EQUAL": 0, "SIMILAR": 1, "DIFFERENT": 2, "CRITICAL": 3}


class ComparisonType(Enum):
    """Kinds of structural questions the engine asks.

    Members are only ever added, never renamed or repurposed; evaluators and
    listeners match on them.
    """
    NODE_TYPE = "NODE_TYPE"
    NAMESPACE_URI = "NAMESPACE_URI"
    NAMESPACE_PREFIX = "NAMESPACE_PREFIX"
    CHILD_NODELIST_LENGTH = "CHILD_NODELIST_LENGTH"
    CHILD_NODELIST_SEQUENCE = "CHILD_NODELIST_SEQUENCE"
    CHILD_LOOKUP = "CHILD_LOOKUP"
    ELEMENT_TAG_NAME = "ELEMENT_TAG_NAME"
    ATTR_NAME_LOOKUP = "ATTR_NAME_LOOKUP"
    ATTR_VALUE = "ATTR_VALUE"
    TEXT_VALUE = "TEXT_VALUE"
    PROCESSING_INSTRUCTION_TARGET = "PROCESSING_INSTRUCTION_TARGET"
    PROCESSING_INSTRUCTION_DATA = "PROCESSING_INSTRUCTION_DATA"
    DOCTYPE_NAME = "DOCTYPE_NAME"
    DOCTYPE_PUBLIC_ID = "DOCTYPE_PUBLIC_ID"
    DOCTYPE_SYSTEM_ID = "DOCTYPE_SYSTEM_ID"
    COMMENT_VALUE = "COMMENT_VALUE"
    CDATA_VALUE = "CDATA_VALUE"
    XML_VERSION = "XML_VERSION"
    XML_ENCODING = "XML_ENCODING"
    XML_STANDALONE = "XML_STANDALONE"

    @property
    def description(self) -> str:
        return _TYPE_DESCRIPTIONS[self.value]


_TYPE_DESCRIPTIONS = {
    "NODE_TYPE": "node type",
    "NAMESPACE_URI": "namespace URI",
    "NAMESPACE_PREFIX": "namespace prefix",
    "CHILD_NODELIST_LENGTH": "number of child nodes",
    "CHILD_NODELIST_SEQUENCE": "sequence of child nodes",
    "CHILD_LOOKUP": "child",
    "ELEMENT_TAG_NAME": "element tag name",
    "ATTR_NAME_LOOKUP": "attribute",
    "ATTR_VALUE": "attribute value",
    "TEXT_VALUE": "text value",
    "PROCESSING_INSTRUCTION_TARGET": "processing instruction target",
    "PROCESSING_INSTRUCTION_DATA": "processing instruction data",
    "DOCTYPE_NAME": "doctype name",
    "DOCTYPE_PUBLIC_ID": "doctype public id",
    "DOCTYPE_SYSTEM_ID": "doctype system id",
    "COMMENT_VALUE": "comment value",
    "CDATA_VALUE": "CDATA section value",
    "XML_VERSION": "xml version",
    "XML_ENCODING": "xml encoding",
    "XML_STANDALONE": "xml standalone",
}


@dataclass(frozen=True)
class NodeDetails:
    """One side of a comparison: the node, its location and the compared value."""
    node: Any
    xpath: Optional[str]
    value: Any


@dataclass(frozen=True)
class Comparison:
    """A single structural question posed about the control and test trees."""
    type: ComparisonType
    control_details: NodeDetails
    test_details: NodeDetails

    @classmethod
    def of(
        cls,
        comparison_type: ComparisonType,
        control_node: Any,
        control_xpath: Optional[str],
        control_value: Any,
        test_node: Any,
        test_xpath: Optional[str],
        test_value: Any
    ) -> Comparison:
        return cls(
            type=comparison_type,
            control_details=NodeDetails(control_node, control_xpath, control_value),
            test_details=NodeDetails(test_node, test_xpath, test_value),
        )


@dataclass
class Difference:
    """A comparison whose outcome was not EQUAL."""
    comparison: Comparison
    result: ComparisonResult
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "type": self.comparison.type.value,
            "result": self.result.value,
            "control_xpath": self.comparison.control_details.xpath,
            "test_xpath": self.comparison.test_details.xpath,
            "control_value": _jsonable(self.comparison.control_details.value),
            "test_value": _jsonable(self.comparison.test_details.value),
            "message": self.message,
        }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass
class EngineConfig:
    """Configuration used by DiffBuilder and the scenario runner."""
    check_for_similar: bool = True
    element_selector: str = "by_name"
    ignore_whitespace: bool = False
    stop_at_first_difference: bool = False
    max_differences: int = 0
    log_level: LogLevel = LogLevel.INFO

    def __post_init__(self):
        if isinstance(self.log_level, str):
            try:
                self.log_level = LogLevel(self.log_level.upper())
            except ValueError:
                raise ConfigError("log_level", f"unknown level {self.log_level!r}")
        if self.element_selector not in SELECTOR_NAMES:
            raise ConfigError(
                "element_selector",
                f"expected one of {', '.join(SELECTOR_NAMES)}, "
                f"got {self.element_selector!r}"
            )
        if not isinstance(self.max_differences, int) or self.max_differences < 0:
            raise ConfigError("max_differences", "must be a non-negative integer")

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> EngineConfig:
        """Build a config from a plain mapping, rejecting unknown keys."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("<root>", f"expected a mapping, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(unknown[0], "unknown configuration key")
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> EngineConfig:
        """Load a config from a YAML or JSON file."""
        return cls.from_dict(load_structured_file(path))

    def merged(self, overrides: Optional[dict]) -> EngineConfig:
        """Return a copy with the given keys replaced."""
        if not overrides:
            return self
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data.update(overrides)
        return EngineConfig.from_dict(data)

    def to_dict(self) -> dict:
        return {
            "check_for_similar": self.check_for_similar,
            "element_selector": self.element_selector,
            "ignore_whitespace": self.ignore_whitespace,
            "stop_at_first_difference": self.stop_at_first_difference,
            "max_differences": self.max_differences,
            "log_level": self.log_level.value,
        }


@dataclass
class ExecutionInfo:
    """Execution metadata."""
    duration_ms: int
    timestamp: str
    engine_version: str = "1.0.0"

    def to_dict(self) -> dict:
        return {
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
            "engine_version": self.engine_version,
        }


@dataclass
class Summary:
    """Outcome counts of a comparison run."""
    comparisons_performed: int = 0
    equal: int = 0
    similar: int = 0
    different: int = 0
    critical: int = 0

    def record(self, result: ComparisonResult):
        self.comparisons_performed += 1
        if result == ComparisonResult.EQUAL:
            self.equal += 1
        elif result == ComparisonResult.SIMILAR:
            self.similar += 1
        elif result == ComparisonResult.DIFFERENT:
            self.different += 1
        else:
            self.critical += 1

    def to_dict(self) -> dict:
        return {
            "comparisons_performed": self.comparisons_performed,
            "equal": self.equal,
            "similar": self.similar,
            "different": self.different,
            "critical": self.critical,
        }


@dataclass
class DiffReport:
    """Complete comparison report."""
    result: ComparisonResult
    check_for_similar: bool
    execution: ExecutionInfo
    summary: Summary
    differences: list[Difference] = field(default_factory=list)
    truncated: bool = False

    @property
    def is_identical(self) -> bool:
        return self.result == ComparisonResult.EQUAL

    @property
    def is_similar(self) -> bool:
        return self.result <= ComparisonResult.SIMILAR

    def has_differences(self) -> bool:
        return len(self.differences) > 0

    def to_dict(self) -> dict:
        result = {
            "result": self.result.value,
            "is_identical": self.is_identical,
            "is_similar": self.is_similar,
            "check_for_similar": self.check_for_similar,
            "execution": self.execution.to_dict(),
            "summary": self.summary.to_dict(),
            "differences": [d.to_dict() for d in self.differences],
        }
        if self.truncated:
            result["truncated"] = True
        return result

    def __str__(self) -> str:
        if not self.differences:
            return "[identical]" if self.is_identical else "[similar]"
        return "\n".join(d.message for d in self.differences)
