"""Builder API producing a DiffReport for two XML sources."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from . import element_selectors, evaluators
from .element_selectors import ElementSelector
from .engine import DOMDifferenceEngine
from .evaluators import DifferenceEvaluator
from .exceptions import InvalidArgumentError
from .formatter import ComparisonFormatter
from .listeners import ComparisonListener, LoggingListener
from .models import (
    Comparison,
    ComparisonResult,
    DiffReport,
    Difference,
    EngineConfig,
    ExecutionInfo,
    Summary,
)
from .utils import elapsed_ms, utc_timestamp

logger = logging.getLogger(__name__)


class DifferenceCollector:
    """Listener that counts every outcome and keeps the reportable differences."""

    def __init__(
        self,
        check_for_similar: bool = True,
        max_differences: int = 0,
        formatter: Optional[ComparisonFormatter] = None
    ):
        self.check_for_similar = check_for_similar
        self.max_differences = max_differences
        self.formatter = formatter or ComparisonFormatter()
        self.summary = Summary()
        self.differences: list[Difference] = []
        self.truncated = False

    def is_reportable(self, outcome: ComparisonResult) -> bool:
        if self.check_for_similar:
            return outcome >= ComparisonResult.DIFFERENT
        return outcome > ComparisonResult.EQUAL

    def __call__(self, comparison: Comparison, outcome: ComparisonResult):
        self.summary.record(outcome)
        if not self.is_reportable(outcome):
            return
        if self.max_differences and len(self.differences) >= self.max_differences:
            self.truncated = True
            return
        self.differences.append(Difference(
            comparison=comparison,
            result=outcome,
            message=f"[{outcome.value}] {self.formatter.describe(comparison)}"
        ))


class DiffBuilder:
    """
    Fluent configuration of a comparison run.

    Usage:
        report = (DiffBuilder("<a><b/></a>")
                  .with_test("<a><b/><c/></a>")
                  .ignore_whitespace()
                  .build())
        if report.has_differences():
            print(report)
    """

    def __init__(self, control: Any):
        if control is None:
            raise InvalidArgumentError("control must not be None")
        self._control = control
        self._test: Any = None
        self._check_for_similar = True
        self._element_selector: Optional[ElementSelector] = None
        self._difference_evaluator: Optional[DifferenceEvaluator] = None
        self._ignore_whitespace = False
        self._stop_at_first_difference = False
        self._max_differences = 0
        self._comparison_listeners: list[ComparisonListener] = []
        self._difference_listeners: list[ComparisonListener] = []

    @classmethod
    def from_config(cls, control: Any, config: Optional[EngineConfig] = None) -> DiffBuilder:
        """Create a builder preconfigured from an EngineConfig."""
        config = config or EngineConfig()
        builder = cls(control)
        builder._check_for_similar = config.check_for_similar
        builder._element_selector = element_selectors.by_config_name(config.element_selector)
        builder._ignore_whitespace = config.ignore_whitespace
        builder._stop_at_first_difference = config.stop_at_first_difference
        builder._max_differences = config.max_differences
        return builder

    def with_test(self, test: Any) -> DiffBuilder:
        if test is None:
            raise InvalidArgumentError("test must not be None")
        self._test = test
        return self

    def check_for_similar(self) -> DiffBuilder:
        """Only DIFFERENT and CRITICAL outcomes count as differences."""
        self._check_for_similar = True
        return self

    def check_for_identical(self) -> DiffBuilder:
        """Every outcome other than EQUAL counts as a difference."""
        self._check_for_similar = False
        return self

    def with_element_selector(self, selector: ElementSelector) -> DiffBuilder:
        if selector is None:
            raise InvalidArgumentError("element selector must not be None")
        self._element_selector = selector
        return self

    def with_difference_evaluator(self, evaluator: DifferenceEvaluator) -> DiffBuilder:
        if evaluator is None:
            raise InvalidArgumentError("difference evaluator must not be None")
        self._difference_evaluator = evaluator
        return self

    def ignore_whitespace(self) -> DiffBuilder:
        self._ignore_whitespace = True
        return self

    def stop_at_first_difference(self) -> DiffBuilder:
        self._stop_at_first_difference = True
        return self

    def with_max_differences(self, limit: int) -> DiffBuilder:
        if limit is None or limit < 0:
            raise InvalidArgumentError("limit must be a non-negative integer")
        self._max_differences = limit
        return self

    def with_comparison_listeners(self, *listeners: ComparisonListener) -> DiffBuilder:
        self._comparison_listeners.extend(listeners)
        return self

    def with_difference_listeners(self, *listeners: ComparisonListener) -> DiffBuilder:
        self._difference_listeners.extend(listeners)
        return self

    def _build_evaluator(self) -> DifferenceEvaluator:
        steps = [self._difference_evaluator or evaluators.default]
        if self._ignore_whitespace:
            steps.append(evaluators.ignore_whitespace)
        if self._stop_at_first_difference:
            steps.append(
                evaluators.stop_when_different
                if self._check_for_similar
                else evaluators.stop_when_similar
            )
        if len(steps) == 1:
            return steps[0]
        return evaluators.chain(*steps)

    def build(self) -> DiffReport:
        """Run the comparison and collect the report."""
        if self._test is None:
            raise InvalidArgumentError("test must be set with with_test()")

        start_time = time.perf_counter()

        engine = DOMDifferenceEngine(
            element_selector=self._element_selector,
            difference_evaluator=self._build_evaluator()
        )
        collector = DifferenceCollector(
            check_for_similar=self._check_for_similar,
            max_differences=self._max_differences
        )
        engine.add_comparison_listener(collector)
        for listener in self._comparison_listeners:
            engine.add_comparison_listener(listener)
        engine.add_difference_listener(LoggingListener())
        for listener in self._difference_listeners:
            engine.add_difference_listener(listener)

        outcome = engine.compare(self._control, self._test)

        report = DiffReport(
            result=outcome,
            check_for_similar=self._check_for_similar,
            execution=ExecutionInfo(
                duration_ms=elapsed_ms(start_time),
                timestamp=utc_timestamp(),
                engine_version=DOMDifferenceEngine.VERSION
            ),
            summary=collector.summary,
            differences=collector.differences,
            truncated=collector.truncated
        )
        logger.debug(
            "Diff finished: %s, %d differences out of %d comparisons",
            outcome.value, len(report.differences), report.summary.comparisons_performed
        )
        return report


def compare(
    control: Any,
    test: Any,
    config: Optional[EngineConfig] = None
) -> DiffReport:
    """
    Convenience function to compare two XML sources.

    Args:
        control: The reference document
        test: The document to validate
        config: Optional engine configuration

    Returns:
        DiffReport of the run
    """
    return DiffBuilder.from_config(control, config).with_test(test).build()
