#!/usr/bin/env python
"""Run domdiff comparison scenarios from the command line."""

import argparse
import json
import logging
import sys
from pathlib import Path

from domdiff import ConfigError, EngineConfig, ScenarioRunner


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run domdiff comparison scenarios",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_scenarios.py scenarios/ report.json
  python run_scenarios.py -d scenarios/ -r report.json -c domdiff.yaml
  python run_scenarios.py --scenarios scenarios/ --report report.json --log-level DEBUG
        """
    )

    parser.add_argument(
        "scenarios",
        nargs="?",
        help="Path to folder containing scenario YAML/JSON files"
    )
    parser.add_argument(
        "report",
        nargs="?",
        help="Path to output JSON report file"
    )

    # Also support named arguments
    parser.add_argument("-d", "--scenarios", dest="scenarios_named", help="Path to scenarios folder")
    parser.add_argument("-r", "--report", dest="report_named", help="Path to output report")
    parser.add_argument("-c", "--config", help="Path to YAML/JSON engine configuration")
    parser.add_argument("-l", "--log-level", help="Override the configured log level")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress console output")

    args = parser.parse_args(argv)

    scenarios_path = args.scenarios or args.scenarios_named
    report_path = args.report or args.report_named

    if not scenarios_path:
        parser.error("Scenarios path is required")
    if not report_path:
        parser.error("Report path is required")

    if not Path(scenarios_path).exists():
        print(f"Error: Scenarios folder not found: {scenarios_path}", file=sys.stderr)
        return 1

    try:
        config = EngineConfig.from_file(args.config) if args.config else EngineConfig()
        if args.log_level:
            config = config.merged({"log_level": args.log_level})
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level.logging_name,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    if not args.quiet:
        print(f"Scenarios: {scenarios_path}")
        print(f"Report: {report_path}\n")

    report = ScenarioRunner(config).run_folder(scenarios_path, print_report=not args.quiet)

    with open(report_path, 'w') as f:
        json.dump(report.to_dict(), indent=2, fp=f)

    if not args.quiet:
        print(f"\nReport saved to: {report_path}")

    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
