"""
component_6_solution_formatter.py

Rendering of search results for the command line.
"""

from typing import Dict, Optional

from component_1_clause_model import Assignment
from component_4_branch_and_bound import SearchResult

NO_SOLUTION_MESSAGE = "No solution"


def format_assignment(assignment: Assignment) -> str:
    """Finishes in position order, space-separated: 'G M G'."""
    return " ".join(finish.value for finish in assignment.finishes())


def format_result(result: SearchResult) -> str:
    """Solution line, or the literal no-solution message."""
    if not result.is_found:
        return NO_SOLUTION_MESSAGE
    return format_assignment(result.assignment)


def format_statistics(
    elapsed_ms: float, statistics: Optional[Dict[str, int]] = None
) -> str:
    """Verbose footer: time taken plus search counters."""
    lines = [f"Time: {int(round(elapsed_ms))} milliseconds"]
    if statistics:
        counters = ", ".join(f"{key}={value}" for key, value in statistics.items())
        lines.append(f"Search: {counters}")
    return "\n".join(lines)
