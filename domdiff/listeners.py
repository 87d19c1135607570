"""Comparison listener registration and fan-out."""

from __future__ import annotations

import logging
from typing import Callable

from .formatter import ComparisonFormatter
from .models import Comparison, ComparisonResult, ComparisonType

logger = logging.getLogger(__name__)

ComparisonListener = Callable[[Comparison, ComparisonResult], None]


class ComparisonListenerSupport:
    """
    Holds the three listener channels of an engine.

    - comparison listeners receive every outcome
    - match listeners receive EQUAL outcomes
    - difference listeners receive SIMILAR, DIFFERENT and CRITICAL outcomes

    Comparison listeners are notified first; each channel in registration
    order. A listener that raises stops the notification and the exception
    propagates to the caller.
    """

    def __init__(self):
        self.comparison_listeners: list[ComparisonListener] = []
        self.match_listeners: list[ComparisonListener] = []
        self.difference_listeners: list[ComparisonListener] = []

    def add_comparison_listener(self, listener: ComparisonListener):
        self.comparison_listeners.append(listener)

    def add_match_listener(self, listener: ComparisonListener):
        self.match_listeners.append(listener)

    def add_difference_listener(self, listener: ComparisonListener):
        self.difference_listeners.append(listener)

    def fire_comparison_performed(
        self,
        comparison: Comparison,
        outcome: ComparisonResult
    ):
        for listener in self.comparison_listeners:
            listener(comparison, outcome)

        channel = (
            self.match_listeners
            if outcome == ComparisonResult.EQUAL
            else self.difference_listeners
        )
        for listener in channel:
            listener(comparison, outcome)


class ComparisonCollector:
    """Listener that records every (comparison, outcome) pair it receives."""

    def __init__(self):
        self.events: list[tuple[Comparison, ComparisonResult]] = []

    def __call__(self, comparison: Comparison, outcome: ComparisonResult):
        self.events.append((comparison, outcome))

    def __len__(self) -> int:
        return len(self.events)

    @property
    def types(self) -> list[ComparisonType]:
        return [c.type for c, _ in self.events]

    @property
    def outcomes(self) -> list[ComparisonResult]:
        return [r for _, r in self.events]

    def of_type(self, comparison_type: ComparisonType) -> list[tuple[Comparison, ComparisonResult]]:
        return [(c, r) for c, r in self.events if c.type == comparison_type]

    def clear(self):
        self.events.clear()


class LoggingListener:
    """Listener that logs every difference it receives."""

    def __init__(self, formatter=None, level: int = logging.DEBUG):
        self.formatter = formatter or ComparisonFormatter()
        self.level = level

    def __call__(self, comparison: Comparison, outcome: ComparisonResult):
        if outcome == ComparisonResult.EQUAL:
            return
        if logger.isEnabledFor(self.level):
            logger.log(self.level, "[%s] %s", outcome.value,
                       self.formatter.describe(comparison))
