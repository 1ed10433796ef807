"""
component_3_unit_propagation.py

Unit Propagation

A reduced clause with a single specified entry has exactly one way left to
hold, so its position is forced. Only the first such clause is applied per
step; the next recursive step re-derives the remaining ones against the
updated assignment.
"""

from typing import Optional, Sequence, Tuple

from component_1_clause_model import Assignment, Clause, Finish


def find_unit_clause(active_clauses: Sequence[Clause]) -> Optional[Clause]:
    """First clause of weight 1 in list order, or None."""
    for clause in active_clauses:
        if clause.is_unit():
            return clause
    return None


def propagate_unit(
    active_clauses: Sequence[Clause], assignment: Assignment
) -> Optional[Tuple[Assignment, int, Finish]]:
    """
    Force the first unit clause onto `assignment`.

    Returns:
        (new_assignment, position, finish) or None if there is no unit clause
    """
    clause = find_unit_clause(active_clauses)
    if clause is None:
        return None
    position, finish = clause.get_unit_literal()
    return assignment.with_finish(position, finish), position, finish
