"""
paintshop_cli.py

Command line entry point for the Paint Shop solver.

Usage:
    paintshop [-h] [-v] [--explain] [--branching {single,exhaustive}]
              [--parallel] [--config FILE] [--log-level LEVEL] FILE

Exit codes:
    0  solution printed
    1  usage error
    2  input file missing or unreadable
    3  input file malformed
    4  no solution ("No solution" is still printed)
"""

import argparse
import sys
from enum import IntEnum
from typing import List, Optional

from component_6_solution_formatter import format_result, format_statistics
from component_7_search_explanation import format_search_tree
from component_8_logging_config import setup_logging
from paintshop_config import get_config
from paintshop_driver import PaintshopDriver, SolverSettings
from paintshop_exceptions import (
    ConfigurationException,
    MalformedInputError,
    SourceUnavailableError,
    get_user_friendly_message,
)


class ExitCode(IntEnum):
    SUCCESS = 0
    USAGE = 1
    SOURCE_UNAVAILABLE = 2
    PARSE_FAILURE = 3
    NO_SOLUTION = 4


class _ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on usage errors; that code means 'input not found' here."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(ExitCode.USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="paintshop",
        description="Paint Shop: choose Glossy/Matte finishes satisfying every "
        "customer with as few Matte batches as possible.",
    )
    parser.add_argument("file", help="Input file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show the time taken and search counters"
    )
    parser.add_argument(
        "--explain", action="store_true", help="Print the search trace after the solution"
    )
    parser.add_argument(
        "--branching",
        choices=["single", "exhaustive"],
        default=None,
        help="Branch on one free position per step (default) or on every free position",
    )
    parser.add_argument(
        "--parallel", action="store_true", help="Explore Matte branches on a thread pool"
    )
    parser.add_argument("--config", default=None, help="YAML file with a 'solver:' section")
    parser.add_argument(
        "--log-level", default=None, help="Console log level (default from config)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = get_config()

    try:
        setup_logging(
            console_level=args.log_level or cfg.get("console_log_level", "WARNING"),
            file_level=cfg.get("file_log_level", "DEBUG"),
            enable_file_logging=bool(cfg.get("file_logging_enabled", False)),
            performance_logging=bool(cfg.get("performance_logging", True)),
        )
    except ValueError as e:
        print(f"Invalid log level: {e}", file=sys.stderr)
        return ExitCode.USAGE

    try:
        settings = SolverSettings.from_config(cfg)
        overrides = {}
        if args.branching:
            overrides["branching"] = args.branching
        if args.parallel:
            overrides["parallel"] = True
        if args.explain:
            overrides["enable_trace"] = True
        settings = settings.with_overrides(overrides)
        driver = PaintshopDriver(settings=settings, config_path=args.config)
    except ConfigurationException as e:
        print(get_user_friendly_message(e), file=sys.stderr)
        return ExitCode.USAGE

    try:
        _, report = driver.solve_file(args.file)
    except SourceUnavailableError as e:
        print(get_user_friendly_message(e), file=sys.stderr)
        return ExitCode.SOURCE_UNAVAILABLE
    except MalformedInputError as e:
        print(f"Error parsing input file: {args.file}", file=sys.stderr)
        print(f"  {get_user_friendly_message(e)}", file=sys.stderr)
        return ExitCode.PARSE_FAILURE

    print(format_result(report.result))
    if args.verbose:
        print(format_statistics(report.elapsed_ms, report.statistics))
    if args.explain and report.trace is not None:
        print(format_search_tree(report.trace))

    return ExitCode.SUCCESS if report.is_found else ExitCode.NO_SOLUTION


if __name__ == "__main__":
    sys.exit(main())
