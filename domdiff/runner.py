"""Scenario runner: compares folders of control/test document pairs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .builder import compare
from .exceptions import DomDiffError, ScenarioError
from .models import ComparisonResult, EngineConfig
from .utils import load_structured_file, utc_timestamp

logger = logging.getLogger(__name__)

EXPECTATIONS = ("identical", "similar", "different")
SCENARIO_PATTERNS = ("*.yaml", "*.yml", "*.json")


def classify(result: ComparisonResult) -> str:
    """Map an aggregate outcome onto a scenario expectation."""
    if result == ComparisonResult.EQUAL:
        return "identical"
    if result == ComparisonResult.SIMILAR:
        return "similar"
    return "different"


@dataclass
class Scenario:
    """A control/test pair with the expected outcome."""
    name: str
    path: str
    control: Any
    test: Any
    expected: str = "identical"
    config: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str | Path) -> Scenario:
        """
        Load a scenario from a YAML or JSON file.

        `control` and `test` hold inline XML or a path relative to the
        scenario file.
        """
        path = Path(path)
        try:
            data = load_structured_file(path)
        except DomDiffError as e:
            raise ScenarioError(str(path), str(e))

        if not isinstance(data, dict):
            raise ScenarioError(str(path), "scenario must be a mapping")
        for key in ("control", "test"):
            if not data.get(key):
                raise ScenarioError(str(path), f"'{key}' is required")

        expected = str(data.get("expected", "identical")).lower()
        if expected not in EXPECTATIONS:
            raise ScenarioError(
                str(path),
                f"'expected' must be one of {', '.join(EXPECTATIONS)}"
            )

        return cls(
            name=data.get("name", path.stem),
            path=str(path),
            control=cls._resolve_source(data["control"], path.parent),
            test=cls._resolve_source(data["test"], path.parent),
            expected=expected,
            config=data.get("config") or {}
        )

    @staticmethod
    def _resolve_source(value: Any, base_dir: Path) -> Any:
        if isinstance(value, str) and not value.lstrip().startswith("<"):
            return base_dir / value
        return value


@dataclass
class ScenarioResult:
    """Result of a single scenario."""
    name: str
    scenario_path: str
    passed: bool
    expected: str
    actual: Optional[str] = None
    diff_report: Optional[dict] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {
            "name": self.name,
            "scenario_path": self.scenario_path,
            "passed": self.passed,
            "expected": self.expected,
            "actual": self.actual,
        }
        if self.diff_report:
            result["diff_report"] = self.diff_report
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class GlobalReport:
    """Report across all scenarios of a folder."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    scenarios: list[ScenarioResult] = field(default_factory=list)
    breakdown: dict[str, list[str]] = field(default_factory=dict)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = utc_timestamp()
        if not self.breakdown:
            self.breakdown = {
                "identical": [],
                "similar": [],
                "different": [],
                "errors": []
            }

    @property
    def pass_rate(self) -> str:
        return f"{(self.passed / self.total * 100):.1f}%" if self.total > 0 else "0.0%"

    def add(self, result: ScenarioResult):
        self.scenarios.append(result)
        self.total += 1
        if result.passed:
            self.passed += 1
        else:
            self.failed += 1
        if result.error:
            self.breakdown["errors"].append(result.name)
        elif result.actual:
            self.breakdown[result.actual].append(result.name)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "summary": {
                "total_scenarios": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "pass_rate": self.pass_rate
            },
            "breakdown": self.breakdown,
            "scenarios": [s.to_dict() for s in self.scenarios]
        }

    def print_summary(self):
        print(f"\nScenario Results: {self.passed}/{self.total} passed ({self.pass_rate})")
        if self.failed > 0:
            print(f"  Failed: {self.failed}")

        for outcome in ("identical", "similar", "different"):
            if self.breakdown.get(outcome):
                print(f"  {outcome.capitalize()}: {len(self.breakdown[outcome])} scenarios")
        if self.breakdown.get("errors"):
            print(f"  Errors: {len(self.breakdown['errors'])} scenarios")


class ScenarioRunner:
    """
    Runs comparison scenarios with a shared engine configuration.

    Usage:
        runner = ScenarioRunner(EngineConfig.from_file("domdiff.yaml"))
        report = runner.run_folder("scenarios")
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def run_scenario(self, scenario: Scenario) -> ScenarioResult:
        """Run a single scenario; errors are recorded, not raised."""
        try:
            config = self.config.merged(scenario.config)
            report = compare(scenario.control, scenario.test, config)
        except Exception as e:
            logger.warning("Scenario %s failed with %s: %s",
                           scenario.name, type(e).__name__, e)
            return ScenarioResult(
                name=scenario.name,
                scenario_path=scenario.path,
                passed=False,
                expected=scenario.expected,
                error=f"{type(e).__name__}: {e}"
            )

        actual = classify(report.result)
        passed = actual == scenario.expected
        logger.info("Scenario %s: %s in %dms", scenario.name, actual,
                    report.execution.duration_ms)
        if not passed:
            logger.warning("Scenario %s expected %s but was %s",
                           scenario.name, scenario.expected, actual)
        return ScenarioResult(
            name=scenario.name,
            scenario_path=scenario.path,
            passed=passed,
            expected=scenario.expected,
            actual=actual,
            diff_report=report.to_dict()
        )

    def run_file(self, path: str | Path) -> ScenarioResult:
        """Load and run one scenario file."""
        try:
            scenario = Scenario.from_file(path)
        except (ScenarioError, FileNotFoundError) as e:
            logger.warning("Skipping %s: %s", path, e)
            return ScenarioResult(
                name=Path(path).stem,
                scenario_path=str(path),
                passed=False,
                expected="identical",
                error=str(e)
            )
        return self.run_scenario(scenario)

    def run_folder(self, folder: str | Path, print_report: bool = True) -> GlobalReport:
        """Run every scenario file in a folder, in file name order."""
        folder_path = Path(folder)
        if not folder_path.exists():
            raise FileNotFoundError(f"Scenario folder not found: {folder_path}")

        files = sorted({p for pattern in SCENARIO_PATTERNS for p in folder_path.glob(pattern)})
        logger.info("Running %d scenarios from %s", len(files), folder_path)

        report = GlobalReport()
        for scenario_file in files:
            result = self.run_file(scenario_file)
            report.add(result)
            if print_report:
                print(f"{'PASS' if result.passed else 'FAIL'}: {result.name}")

        if print_report:
            report.print_summary()

        return report


def run_scenarios(
    folder: str,
    config_path: Optional[str] = None,
    print_report: bool = True
) -> GlobalReport:
    """
    Run all scenarios in a folder.

        from domdiff.runner import run_scenarios
        report = run_scenarios("scenarios", "domdiff.yaml")

    Args:
        folder: Folder containing scenario YAML/JSON files
        config_path: Optional YAML/JSON engine configuration file
        print_report: Whether to print the summary report

    Returns:
        GlobalReport with all results
    """
    config = EngineConfig.from_file(config_path) if config_path else EngineConfig()
    return ScenarioRunner(config).run_folder(folder, print_report)
