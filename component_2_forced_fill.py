"""
component_2_forced_fill.py

Forced-Fill Deduction

Glossy costs nothing. Any UNSET position that no active clause wants Matte
can be fixed to GLOSSY without raising the achievable Matte-weight and
without breaking a clause, so the solver applies this at the start of every
step.
"""

from typing import Iterable, Set

from component_1_clause_model import Assignment, Clause, Finish


def matte_demanded_positions(active_clauses: Iterable[Clause]) -> Set[int]:
    """Positions at which at least one active clause requires MATTE."""
    demanded = set()
    for clause in active_clauses:
        for position, finish in clause.literals():
            if finish is Finish.MATTE:
                demanded.add(position)
    return demanded


def default_fill(active_clauses: Iterable[Clause], assignment: Assignment) -> Assignment:
    """
    Fix every UNSET position without Matte demand to GLOSSY.

    Positions some active clause requires to be MATTE stay UNSET. Returns the
    input instance unchanged if nothing can be filled.
    """
    demanded = matte_demanded_positions(active_clauses)
    values = tuple(
        Finish.GLOSSY if value is None and position not in demanded else value
        for position, value in enumerate(assignment.values)
    )
    if values == assignment.values:
        return assignment
    return Assignment(values)
