# paintshop_driver.py
"""
Paintshop Driver - connects parsing, search and caching

Builds the solver from configuration, hands it (width, clauses), times the
search and caches results per problem. Rendering is left to the caller.

Features:
- Settings from the global JSON config, optionally overridden by a YAML file
- LRU result cache (solving is a pure function of width and clause set)
- Performance logging of every solve
- Optional search trace
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Hashable, Optional, Sequence, Tuple, Union

from cachetools import LRUCache

from component_1_clause_model import Assignment, Clause
from component_4_branch_and_bound import (
    BranchAndBoundSolver,
    BranchingStrategy,
    SearchResult,
)
from component_5_problem_parser import PaintshopProblem, parse_problem_file
from component_7_search_explanation import SearchTree
from component_8_logging_config import PerformanceLogger, get_logger
from paintshop_config import PaintshopConfig, get_config
from paintshop_exceptions import (
    ConfigurationException,
    NoSolutionError,
    wrap_exception,
)

logger = get_logger(__name__)


def _is_positive_int(value: Any) -> bool:
    # bool is an int subclass
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


@dataclass(frozen=True)
class SolverSettings:
    """Effective settings of one driver."""

    branching: BranchingStrategy = BranchingStrategy.SINGLE_POSITION
    parallel: bool = False
    max_workers: Optional[int] = None
    parallel_depth: int = 4
    enable_trace: bool = False
    max_trace_steps: int = 5000
    result_caching: bool = True
    result_cache_size: int = 128
    max_width: int = 100000

    @classmethod
    def from_config(cls, config: PaintshopConfig) -> "SolverSettings":
        """
        Read settings from the global configuration.

        Raises:
            ConfigurationException: A stored value has the wrong type
        """
        try:
            values = {
                "branching": config.branching_strategy,
                "parallel": config.parallel_search_enabled,
                "max_workers": config.parallel_max_workers,
                "parallel_depth": config.parallel_depth,
                "enable_trace": config.search_explanation_enabled,
                "max_trace_steps": config.max_explanation_steps,
                "result_caching": config.result_caching_enabled,
                "result_cache_size": config.result_cache_size,
                "max_width": config.max_width,
            }
        except (TypeError, ValueError) as e:
            raise wrap_exception(
                e,
                ConfigurationException,
                "Invalid value in configuration file",
                file=str(config._config_file),
            )
        return cls().with_overrides(values)

    def with_overrides(self, overrides: Dict[str, Any]) -> "SolverSettings":
        """
        Return a copy with `overrides` applied and validated.

        Raises:
            ConfigurationException: Unknown key or invalid value
        """
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationException(
                f"Unknown solver settings: {', '.join(sorted(unknown))}",
                context={"known": sorted(known)},
            )

        values = dict(overrides)
        if "branching" in values and not isinstance(values["branching"], BranchingStrategy):
            try:
                values["branching"] = BranchingStrategy.from_name(str(values["branching"]))
            except (KeyError, ValueError) as e:
                raise wrap_exception(
                    e,
                    ConfigurationException,
                    f"Unknown branching strategy: {values['branching']}",
                    branching=values["branching"],
                )

        for key in ("parallel", "enable_trace", "result_caching"):
            if key in values and not isinstance(values[key], bool):
                raise ConfigurationException(
                    f"Setting '{key}' must be true or false",
                    context={key: values[key]},
                )

        for key in ("parallel_depth", "max_trace_steps", "result_cache_size", "max_width"):
            if key in values and not _is_positive_int(values[key]):
                raise ConfigurationException(
                    f"Setting '{key}' must be a positive integer",
                    context={key: values[key]},
                )
        if values.get("max_workers") is not None and not _is_positive_int(
            values["max_workers"]
        ):
            raise ConfigurationException(
                "Setting 'max_workers' must be a positive integer or null",
                context={"max_workers": values["max_workers"]},
            )

        return replace(self, **values)


@dataclass
class SolveReport:
    """
    Outcome of one driver solve.

    Attributes:
        width: Problem width
        result: FOUND / UNSATISFIABLE search result
        elapsed_ms: Wall time of the solve (or cache lookup)
        statistics: Search counters (empty for cache hits of untimed runs)
        trace: Search trace, if enabled
        cached: Result came from the cache
    """

    width: int
    result: SearchResult
    elapsed_ms: float
    statistics: Dict[str, int] = field(default_factory=dict)
    trace: Optional[SearchTree] = None
    cached: bool = False

    @property
    def is_found(self) -> bool:
        return self.result.is_found


class PaintshopDriver:
    """
    Runs the branch-and-bound search for parsed problems.

    Args:
        settings: Explicit settings (default: from global config)
        config_path: Optional YAML file whose `solver:` section overrides settings
    """

    def __init__(
        self,
        settings: Optional[SolverSettings] = None,
        config_path: Optional[Union[str, Path]] = None,
    ):
        if settings is None:
            settings = SolverSettings.from_config(get_config())
        if config_path:
            settings = self._load_config(config_path, settings)
        self.settings = settings

        self.solver = BranchAndBoundSolver(
            branching=settings.branching,
            enable_trace=settings.enable_trace,
            max_trace_steps=settings.max_trace_steps,
            parallel=settings.parallel,
            max_workers=settings.max_workers,
            parallel_depth=settings.parallel_depth,
        )

        self._result_cache: Optional[LRUCache] = (
            LRUCache(maxsize=settings.result_cache_size)
            if settings.result_caching
            else None
        )

        logger.info(
            "PaintshopDriver initialised",
            extra={
                "branching": settings.branching.value,
                "parallel": settings.parallel,
                "caching": settings.result_caching,
                "trace": settings.enable_trace,
            },
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @staticmethod
    def _load_config(config_path: Union[str, Path], settings: SolverSettings) -> SolverSettings:
        """
        Apply the `solver:` section of a YAML file.

        A missing file is logged and ignored.
        """
        import yaml

        config_file = Path(config_path)
        if not config_file.exists():
            logger.warning(
                "Config file not found, using defaults", extra={"file": str(config_file)}
            )
            return settings

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise wrap_exception(
                e, ConfigurationException, "Cannot read solver config", file=str(config_file)
            )

        if not isinstance(data, dict):
            raise ConfigurationException(
                "Solver config must be a mapping", context={"file": str(config_file)}
            )
        section = data.get("solver", {})
        if not isinstance(section, dict):
            raise ConfigurationException(
                "'solver' section must be a mapping", context={"file": str(config_file)}
            )

        logger.info(
            "Solver config loaded",
            extra={"file": str(config_file), "keys": sorted(section.keys())},
        )
        return settings.with_overrides(section)

    # ------------------------------------------------------------------
    # Solving
    # ------------------------------------------------------------------

    def _cache_key(self, width: int, clauses: Sequence[Clause]) -> Hashable:
        return (width, frozenset(clauses), self.settings.branching.value)

    def solve(self, width: int, clauses: Sequence[Clause]) -> SolveReport:
        """
        Solve a (width, clauses) problem.

        Args:
            width: Number of positions
            clauses: Deduplicated customer clauses

        Returns:
            SolveReport with the FOUND / UNSATISFIABLE result
        """
        cache_key = self._cache_key(width, clauses)
        if self._result_cache is not None and cache_key in self._result_cache:
            result, statistics, trace = self._result_cache[cache_key]
            logger.debug("[Cache Hit] Returning cached result", extra={"width": width})
            return SolveReport(
                width=width,
                result=result,
                elapsed_ms=0.0,
                statistics=dict(statistics),
                trace=trace,
                cached=True,
            )

        with PerformanceLogger(
            logger.logger, "branch_and_bound_solve", width=width, customers=len(clauses)
        ) as perf:
            result, context = self.solver.solve_with_context(width, clauses)

        trace = context.build_trace(f"{width} positions, {len(clauses)} customers")
        statistics = context.stats.to_dict()

        if self._result_cache is not None:
            self._result_cache[cache_key] = (result, statistics, trace)

        return SolveReport(
            width=width,
            result=result,
            elapsed_ms=perf.elapsed_ms,
            statistics=statistics,
            trace=trace,
        )

    def solve_problem(self, problem: PaintshopProblem) -> SolveReport:
        """Solve a parsed problem."""
        return self.solve(problem.width, problem.clauses)

    def load_problem(self, path: Union[str, Path]) -> PaintshopProblem:
        """Parse a problem file with the configured width limit."""
        return parse_problem_file(path, max_width=self.settings.max_width)

    def solve_file(self, path: Union[str, Path]) -> Tuple[PaintshopProblem, SolveReport]:
        """Parse and solve a problem file."""
        problem = self.load_problem(path)
        return problem, self.solve_problem(problem)

    def clear_cache(self) -> None:
        if self._result_cache is not None:
            self._result_cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._result_cache) if self._result_cache is not None else 0


def require_solution(report: SolveReport) -> Assignment:
    """
    Return the assignment of a report.

    Raises:
        NoSolutionError: The search found no valid assignment
    """
    if not report.is_found:
        raise NoSolutionError(
            "No assignment satisfies every customer", context={"width": report.width}
        )
    return report.result.assignment
