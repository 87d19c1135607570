"""
domdiff - Structural XML Comparison Engine

Walks a control and a test DOM tree in parallel, emits a typed comparison
for every structural question, lets a pluggable evaluator classify each
outcome and fans the results out to listeners.
"""

from .engine import DOMDifferenceEngine
from .models import (
    Comparison,
    ComparisonResult,
    ComparisonType,
    NodeDetails,
    Difference,
    DiffReport,
    EngineConfig,
    LogLevel,
)
from .listeners import (
    ComparisonListenerSupport,
    ComparisonCollector,
    LoggingListener,
)
from .builder import (
    DiffBuilder,
    DifferenceCollector,
    compare,
)
from .formatter import ComparisonFormatter
from .convert import to_node
from .exceptions import (
    DomDiffError,
    InvalidArgumentError,
    EngineStateError,
    ConfigError,
    ScenarioError,
)
from .runner import (
    Scenario,
    ScenarioRunner,
    ScenarioResult,
    GlobalReport,
    run_scenarios,
)
from . import element_selectors, evaluators

__version__ = "1.0.0"
__all__ = [
    # Engine
    "DOMDifferenceEngine",
    "Comparison",
    "ComparisonResult",
    "ComparisonType",
    "NodeDetails",
    # Strategies
    "element_selectors",
    "evaluators",
    # Listeners
    "ComparisonListenerSupport",
    "ComparisonCollector",
    "LoggingListener",
    # Reports
    "DiffBuilder",
    "DifferenceCollector",
    "DiffReport",
    "Difference",
    "ComparisonFormatter",
    "EngineConfig",
    "LogLevel",
    "compare",
    "to_node",
    # Errors
    "DomDiffError",
    "InvalidArgumentError",
    "EngineStateError",
    "ConfigError",
    "ScenarioError",
    # Scenario Runner
    "Scenario",
    "ScenarioRunner",
    "ScenarioResult",
    "GlobalReport",
    "run_scenarios",
]
