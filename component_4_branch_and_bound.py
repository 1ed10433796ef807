"""
component_4_branch_and_bound.py

Branch-and-Bound Search Engine - minimum-Matte assignment

This module provides the solver the rest of Paintshop is built around:
- SearchResult: tagged outcome (FOUND with an assignment, or UNSATISFIABLE)
- SearchContext: per-solve incumbent, statistics and optional search trace
- BranchAndBoundSolver: recursive search with forced fill, unit propagation,
  incumbent pruning and two branching strategies
- solve(): convenience wrapper

Each recursive step:
1. prune if the node cannot beat the incumbent
2. forced fill (component_2)
3. reduce the active clauses, drop satisfied ones
4. no clause left -> solution; an emptied clause -> contradiction
5. force the first unit clause (component_3)
6. otherwise branch GLOSSY / MATTE on the lowest UNSET position
"""

import itertools
import os
import sys
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from component_1_clause_model import (
    Assignment,
    Clause,
    Finish,
    deduplicate,
    is_satisfied,
    reduce,
)
from component_2_forced_fill import default_fill
from component_3_unit_propagation import propagate_unit
from component_7_search_explanation import (
    MAX_TRACE_NESTING,
    SearchStep,
    SearchTree,
    StepType,
)
from component_8_logging_config import get_logger

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


class SearchStatus(Enum):
    """Outcome of a (sub)search."""

    FOUND = "found"
    UNSATISFIABLE = "unsatisfiable"


class BranchingStrategy(Enum):
    """How a step branches once no deduction applies."""

    SINGLE_POSITION = "single"  # lowest UNSET position, both finishes
    EXHAUSTIVE = "exhaustive"  # every UNSET position, both finishes

    @classmethod
    def from_name(cls, name: str) -> "BranchingStrategy":
        """Accept enum values ('single') as well as member names."""
        try:
            return cls(name.lower())
        except ValueError:
            return cls[name.upper()]


@dataclass(frozen=True)
class SearchResult:
    """
    Result of a search: FOUND with an assignment, or UNSATISFIABLE.

    UNSATISFIABLE is a regular outcome, not an error.
    """

    status: SearchStatus
    assignment: Optional[Assignment] = None

    @classmethod
    def found(cls, assignment: Assignment) -> "SearchResult":
        return cls(SearchStatus.FOUND, assignment)

    @classmethod
    def unsatisfiable(cls) -> "SearchResult":
        return _UNSATISFIABLE

    @property
    def is_found(self) -> bool:
        return self.status is SearchStatus.FOUND

    @property
    def matte_weight(self) -> Optional[int]:
        return self.assignment.matte_weight() if self.assignment is not None else None


_UNSATISFIABLE = SearchResult(SearchStatus.UNSATISFIABLE)


@dataclass
class SearchStatistics:
    """Counters collected during one solve."""

    nodes: int = 0
    pruned: int = 0
    forced_fills: int = 0
    unit_propagations: int = 0
    contradictions: int = 0
    branches: int = 0
    solutions: int = 0
    incumbent_updates: int = 0
    max_depth: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class SearchContext:
    """
    State shared by all branches of one top-level solve.

    The incumbent is read without locking (a stale read only costs a missed
    prune); writes go through offer(), which holds the lock and only ever
    lowers the recorded Matte-weight.

    Thread Safety:
        Safe for the parallel branches of a single solve. Every solve creates
        its own context.
    """

    def __init__(self, record_trace: bool = False, max_trace_steps: int = 5000):
        self.incumbent: Optional[Assignment] = None
        self.stats = SearchStatistics()
        self.record_trace = record_trace
        self.max_trace_steps = max_trace_steps
        self.trace_truncated = False
        self.root_step: Optional[SearchStep] = None
        self._incumbent_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._step_ids = itertools.count()
        self._nesting: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Incumbent
    # ------------------------------------------------------------------

    def should_prune(self, assignment: Assignment) -> bool:
        """True if `assignment` can no longer beat the incumbent."""
        incumbent = self.incumbent
        return (
            incumbent is not None
            and assignment.matte_weight() >= incumbent.matte_weight()
        )

    def offer(self, assignment: Assignment) -> bool:
        """Record `assignment` if it strictly improves the incumbent."""
        with self._incumbent_lock:
            if (
                self.incumbent is None
                or assignment.matte_weight() < self.incumbent.matte_weight()
            ):
                self.incumbent = assignment
                improved = True
            else:
                improved = False
        if improved:
            self.count("incumbent_updates")
            logger.debug(
                "Incumbent improved",
                extra={
                    "assignment": str(assignment),
                    "matte_weight": assignment.matte_weight(),
                },
            )
        return improved

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def count(self, counter: str, amount: int = 1) -> None:
        with self._stats_lock:
            setattr(self.stats, counter, getattr(self.stats, counter) + amount)

    def visit(self, depth: int) -> None:
        with self._stats_lock:
            self.stats.nodes += 1
            if depth > self.stats.max_depth:
                self.stats.max_depth = depth

    # ------------------------------------------------------------------
    # Trace
    # ------------------------------------------------------------------

    def record(
        self,
        parent: Optional[SearchStep],
        step_type: StepType,
        explanation: str,
        assignment: Optional[Assignment] = None,
        depth: int = 0,
        bindings: Optional[Dict[str, str]] = None,
        **metadata,
    ) -> Optional[SearchStep]:
        """
        Append a step below `parent` (or as root).

        Returns None when tracing is off, the step budget is used up or the
        step would nest deeper than MAX_TRACE_NESTING.
        """
        if not self.record_trace:
            return None
        level = 0 if parent is None else self._nesting[parent.step_id] + 1
        if level > MAX_TRACE_NESTING:
            self.trace_truncated = True
            return None
        step_number = next(self._step_ids)
        if step_number >= self.max_trace_steps:
            self.trace_truncated = True
            return None

        step = SearchStep(
            step_id=f"search_step_{step_number}",
            step_type=step_type,
            explanation_text=explanation,
            assignment=str(assignment) if assignment is not None else "",
            depth=depth,
            bindings=bindings or {},
            metadata=metadata,
        )
        self._nesting[step.step_id] = level
        if parent is not None:
            parent.add_subgoal(step)
        elif self.root_step is None:
            self.root_step = step
        return step

    def build_trace(self, query: str) -> Optional[SearchTree]:
        """Wrap the recorded steps in a SearchTree (None if tracing was off)."""
        if not self.record_trace or self.root_step is None:
            return None
        return SearchTree(
            query=query,
            root_steps=[self.root_step],
            metadata={
                "truncated": self.trace_truncated,
                "statistics": self.stats.to_dict(),
            },
        )


# ============================================================================
# Solver
# ============================================================================


def _better(first: SearchResult, second: SearchResult) -> SearchResult:
    """Pick the FOUND result with lower Matte-weight (first one on a tie)."""
    if first.is_found and second.is_found:
        if second.matte_weight < first.matte_weight:
            return second
        return first
    if first.is_found:
        return first
    return second


def _positions_label(positions: Iterable[int]) -> str:
    return ",".join(str(p + 1) for p in positions)


class BranchAndBoundSolver:
    """
    Minimum-Matte solver: forced fill, unit propagation and incumbent pruning.

    Configuration is fixed per instance; all per-solve state lives in a
    SearchContext, so one instance can serve repeated or concurrent solves.

    Args:
        branching: SINGLE_POSITION (default) or EXHAUSTIVE
        enable_trace: Record a SearchTree of the decisions taken
        max_trace_steps: Upper bound on recorded steps
        parallel: Evaluate the MATTE branch on a thread pool
        max_workers: Pool size (None = CPU count, at most 8)
        parallel_depth: Only fork branches at recursion depth below this
    """

    def __init__(
        self,
        branching: BranchingStrategy = BranchingStrategy.SINGLE_POSITION,
        enable_trace: bool = False,
        max_trace_steps: int = 5000,
        parallel: bool = False,
        max_workers: Optional[int] = None,
        parallel_depth: int = 4,
    ):
        self.branching = branching
        self.enable_trace = enable_trace
        self.max_trace_steps = max_trace_steps
        self.parallel = parallel
        if max_workers is None:
            max_workers = min(os.cpu_count() or 1, 8)
        self.max_workers = max_workers
        self.parallel_depth = parallel_depth

    def solve(self, width: int, clauses: Sequence[Clause]) -> SearchResult:
        """
        Find a minimum-Matte assignment satisfying every clause.

        Args:
            width: Number of positions W (> 0)
            clauses: Clauses of length W with at most one MATTE entry each

        Returns:
            SearchResult FOUND with a complete assignment, or UNSATISFIABLE
        """
        result, _ = self.solve_with_context(width, clauses)
        return result

    def solve_with_context(
        self, width: int, clauses: Sequence[Clause]
    ) -> Tuple[SearchResult, SearchContext]:
        """Like solve(), also returning the SearchContext (statistics, trace)."""
        assert width > 0, "width must be positive"
        for clause in clauses:
            assert clause.width == width, f"clause {clause} does not have width {width}"
            assert clause.matte_weight() <= 1, f"clause {clause} requires more than one Matte"

        active = deduplicate(clauses)
        context = SearchContext(
            record_trace=self.enable_trace, max_trace_steps=self.max_trace_steps
        )

        logger.info(
            "Starting branch-and-bound search",
            extra={
                "width": width,
                "num_clauses": len(active),
                "branching": self.branching.value,
                "parallel": self.parallel,
            },
        )

        # Each level costs a few frames; depth is bounded by the width
        needed_frames = 4 * width + 200
        if sys.getrecursionlimit() < needed_frames:
            sys.setrecursionlimit(needed_frames)

        root = context.record(
            None,
            StepType.PREMISE,
            f"Find a minimum-Matte assignment for {width} positions "
            f"and {len(active)} customers",
            Assignment.unset(width),
        )

        executor: Optional[Executor] = None
        if self.parallel and self.max_workers > 1:
            executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="paintshop-search"
            )
        try:
            top = self._search(active, Assignment.unset(width), context, 0, root, executor)
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        if top.is_found:
            # Every FOUND result was offered; the incumbent is the best of them
            result = SearchResult.found(context.incumbent)
            context.record(
                root,
                StepType.CONCLUSION,
                f"Optimal assignment with {result.matte_weight} Matte",
                result.assignment,
            )
        else:
            result = SearchResult.unsatisfiable()
            context.record(root, StepType.CONCLUSION, "No assignment satisfies every customer")

        logger.info(
            "Branch-and-bound search finished",
            extra={"result": result.status.value, **context.stats.to_dict()},
        )
        return result, context

    # ------------------------------------------------------------------
    # Recursion
    # ------------------------------------------------------------------

    def _search(
        self,
        active: List[Clause],
        assignment: Assignment,
        context: SearchContext,
        depth: int,
        parent: Optional[SearchStep],
        executor: Optional[Executor],
    ) -> SearchResult:
        context.visit(depth)

        if context.should_prune(assignment):
            context.count("pruned")
            context.record(
                parent,
                StepType.PRUNED,
                f"Cannot beat incumbent with {context.incumbent.matte_weight()} Matte",
                assignment,
                depth,
            )
            return SearchResult.unsatisfiable()

        filled = default_fill(active, assignment)
        if filled is not assignment:
            context.count("forced_fills")
            newly_fixed = [
                p
                for p, (old, new) in enumerate(zip(assignment.values, filled.values))
                if old is None and new is not None
            ]
            context.record(
                parent,
                StepType.FORCED_FILL,
                f"No customer needs Matte at positions {_positions_label(newly_fixed)}",
                filled,
                depth,
            )
            assignment = filled

        reduced = deduplicate(
            reduce(assignment, clause)
            for clause in active
            if not is_satisfied(assignment, clause)
        )

        if not reduced:
            solution = assignment.completed(Finish.GLOSSY)
            context.count("solutions")
            context.offer(solution)
            context.record(
                parent,
                StepType.SOLUTION,
                f"All customers satisfied with {solution.matte_weight()} Matte",
                solution,
                depth,
            )
            return SearchResult.found(solution)

        # An unsatisfied clause without open positions can never hold
        if assignment.is_complete() or any(clause.is_empty() for clause in reduced):
            context.count("contradictions")
            context.record(
                parent,
                StepType.CONTRADICTION,
                "A customer can no longer be satisfied",
                assignment,
                depth,
            )
            return SearchResult.unsatisfiable()

        forced = propagate_unit(reduced, assignment)
        if forced is not None:
            forced_assignment, position, finish = forced
            context.count("unit_propagations")
            # Forced steps are siblings: a propagation chain adds no nesting
            context.record(
                parent,
                StepType.UNIT_PROPAGATION,
                f"Customer accepts only {finish.name.title()} at position {position + 1}",
                forced_assignment,
                depth,
                bindings={str(position + 1): finish.value},
            )
            return self._search(
                reduced, forced_assignment, context, depth + 1, parent, executor
            )

        if self.branching is BranchingStrategy.EXHAUSTIVE:
            positions = assignment.unset_positions()
        else:
            positions = [assignment.first_unset()]

        best = SearchResult.unsatisfiable()
        for position in positions:
            context.count("branches")
            outcome = self._branch(
                reduced, assignment, position, context, depth, parent, executor
            )
            best = _better(best, outcome)

        if best.is_found:
            context.offer(best.assignment)
        return best

    def _branch(
        self,
        active: List[Clause],
        assignment: Assignment,
        position: int,
        context: SearchContext,
        depth: int,
        parent: Optional[SearchStep],
        executor: Optional[Executor],
    ) -> SearchResult:
        """Explore `position` = GLOSSY and = MATTE; return the better outcome."""
        glossy = assignment.with_finish(position, Finish.GLOSSY)
        matte = assignment.with_finish(position, Finish.MATTE)
        label = str(position + 1)

        glossy_step = context.record(
            parent,
            StepType.ASSUMPTION,
            f"Assume position {label} = Glossy",
            glossy,
            depth,
            bindings={label: Finish.GLOSSY.value},
        )
        matte_step = context.record(
            parent,
            StepType.ASSUMPTION,
            f"Assume position {label} = Matte",
            matte,
            depth,
            bindings={label: Finish.MATTE.value},
        )

        def explore_matte() -> SearchResult:
            return self._search(
                active, matte, context, depth + 1, matte_step or parent, executor
            )

        if executor is None or depth >= self.parallel_depth:
            glossy_result = self._search(
                active, glossy, context, depth + 1, glossy_step or parent, executor
            )
            matte_result = explore_matte()
            return _better(glossy_result, matte_result)

        future = executor.submit(explore_matte)
        glossy_result = self._search(
            active, glossy, context, depth + 1, glossy_step or parent, executor
        )
        # Never wait on a task that has not started: take it back instead
        if future.cancel():
            matte_result = explore_matte()
        else:
            matte_result = future.result()
        return _better(glossy_result, matte_result)


# ============================================================================
# Convenience
# ============================================================================


def solve(
    width: int,
    clauses: Sequence[Clause],
    branching: BranchingStrategy = BranchingStrategy.SINGLE_POSITION,
    parallel: bool = False,
) -> SearchResult:
    """Solve with a fresh BranchAndBoundSolver."""
    return BranchAndBoundSolver(branching=branching, parallel=parallel).solve(width, clauses)


# ============================================================================
# Public API
# ============================================================================

__all__ = [
    "SearchStatus",
    "BranchingStrategy",
    "SearchResult",
    "SearchStatistics",
    "SearchContext",
    "BranchAndBoundSolver",
    "solve",
]
