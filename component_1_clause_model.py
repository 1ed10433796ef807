"""
component_1_clause_model.py

Clause Model - finishes, customer clauses and (partial) assignments

This module provides the data structures the search engine works on:
- Finish enum (GLOSSY / MATTE)
- Clause: one customer's requirement over W positions
- Assignment: a search node, i.e. a partial or complete choice of finishes
- Pure primitives: is_satisfied, reduce, weight, matte_weight

Both Clause and Assignment are immutable tuples of Optional[Finish]. `None`
stands for UNSPECIFIED (clause) or UNSET (assignment). Immutability gives
structural equality and hashing for deduplication, and lets sibling branches
share their parent's state safely.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

# ============================================================================
# Data Structures
# ============================================================================


class Finish(Enum):
    """Finish of a single position. MATTE is the costlier one."""

    GLOSSY = "G"
    MATTE = "M"

    @classmethod
    def from_letter(cls, letter: str) -> "Finish":
        """Map 'G' / 'M' to a Finish (raises ValueError otherwise)."""
        return cls(letter)

    def __str__(self):
        return self.value


# Placeholder letter for UNSPECIFIED / UNSET entries in the compact form
UNSET_LETTER = "_"

Entry = Optional[Finish]


def _entries_from_letters(text: str) -> Tuple[Entry, ...]:
    entries = []
    for letter in text:
        if letter == UNSET_LETTER:
            entries.append(None)
        else:
            entries.append(Finish.from_letter(letter))
    return tuple(entries)


def _entries_to_letters(entries: Iterable[Entry]) -> str:
    return "".join(UNSET_LETTER if e is None else e.value for e in entries)


@dataclass(frozen=True)
class Clause:
    """
    A customer's disjunctive requirement.

    entries[p] is the finish the customer accepts at position p, or None if
    the customer does not care about p. The clause holds if ANY specified
    entry matches the assignment. At most one entry may be MATTE.
    """

    entries: Tuple[Entry, ...]

    @classmethod
    def from_literals(cls, width: int, literals: Dict[int, Finish]) -> "Clause":
        """
        Build a clause from {position: finish} (0-based positions).

        Example:
            >>> Clause.from_literals(3, {0: Finish.GLOSSY, 2: Finish.MATTE})
            Clause('G_M')
        """
        entries: List[Entry] = [None] * width
        for position, finish in literals.items():
            entries[position] = finish
        return cls(tuple(entries))

    @classmethod
    def from_string(cls, text: str) -> "Clause":
        """Parse the compact form, e.g. '_GM_G'."""
        return cls(_entries_from_letters(text))

    @property
    def width(self) -> int:
        return len(self.entries)

    def weight(self) -> int:
        """Number of specified entries (clause size)."""
        return weight(self)

    def matte_weight(self) -> int:
        """Number of MATTE entries."""
        return matte_weight(self.entries)

    def is_empty(self) -> bool:
        """No specified entry left."""
        return self.weight() == 0

    def is_unit(self) -> bool:
        """Exactly one specified entry."""
        return self.weight() == 1

    def literals(self) -> Iterator[Tuple[int, Finish]]:
        """Yield (position, finish) for every specified entry, in position order."""
        for position, entry in enumerate(self.entries):
            if entry is not None:
                yield position, entry

    def get_unit_literal(self) -> Optional[Tuple[int, Finish]]:
        """Return the sole (position, finish) if this is a unit clause."""
        if not self.is_unit():
            return None
        return next(self.literals())

    def __str__(self):
        return _entries_to_letters(self.entries)

    def __repr__(self):
        return f"Clause({str(self)!r})"


@dataclass(frozen=True)
class Assignment:
    """
    A search node: a partial (or complete) choice of finishes.

    values[p] is the chosen finish or None while still UNSET. Fixing a
    position returns a new Assignment; existing instances never change.
    """

    values: Tuple[Entry, ...]

    @classmethod
    def unset(cls, width: int) -> "Assignment":
        """All positions UNSET."""
        return cls((None,) * width)

    @classmethod
    def from_string(cls, text: str) -> "Assignment":
        """Parse the compact form, e.g. 'GM_'."""
        return cls(_entries_from_letters(text))

    @property
    def width(self) -> int:
        return len(self.values)

    def matte_weight(self) -> int:
        """Number of MATTE positions (the objective)."""
        return matte_weight(self.values)

    def is_complete(self) -> bool:
        """No UNSET position left."""
        return None not in self.values

    def unset_positions(self) -> List[int]:
        return [p for p, value in enumerate(self.values) if value is None]

    def first_unset(self) -> Optional[int]:
        """Lowest UNSET index, or None if complete."""
        try:
            return self.values.index(None)
        except ValueError:
            return None

    def with_finish(self, position: int, finish: Finish) -> "Assignment":
        """Return a copy with `position` fixed to `finish`."""
        assert self.values[position] is None, f"position {position} already fixed"
        values = list(self.values)
        values[position] = finish
        return Assignment(tuple(values))

    def completed(self, default: Finish = Finish.GLOSSY) -> "Assignment":
        """Fill every UNSET position with `default`."""
        return Assignment(tuple(default if v is None else v for v in self.values))

    def finishes(self) -> List[Finish]:
        """Finishes in position order (complete assignments only)."""
        assert self.is_complete(), "assignment still has UNSET positions"
        return list(self.values)

    def __str__(self):
        return _entries_to_letters(self.values)

    def __repr__(self):
        return f"Assignment({str(self)!r})"


# ============================================================================
# Primitives
# ============================================================================


def is_satisfied(assignment: Assignment, clause: Clause) -> bool:
    """True iff some fixed position of `assignment` matches `clause`."""
    for value, entry in zip(assignment.values, clause.entries):
        if value is not None and value is entry:
            return True
    return False


def reduce(assignment: Assignment, clause: Clause) -> Clause:
    """
    Clear every entry of `clause` whose position is fixed in `assignment`.

    The result never regains a cleared entry, so reduce(a, reduce(a, c))
    equals reduce(a, c).
    """
    return Clause(
        tuple(
            entry if value is None else None
            for value, entry in zip(assignment.values, clause.entries)
        )
    )


def weight(clause: Clause) -> int:
    """Number of non-UNSPECIFIED entries."""
    return sum(1 for entry in clause.entries if entry is not None)


def matte_weight(entries: Iterable[Entry]) -> int:
    """Number of MATTE entries in a clause or assignment sequence."""
    return sum(1 for entry in entries if entry is Finish.MATTE)


def deduplicate(clauses: Iterable[Clause]) -> List[Clause]:
    """Drop structural duplicates, keeping first-occurrence order."""
    seen = set()
    unique = []
    for clause in clauses:
        if clause not in seen:
            seen.add(clause)
            unique.append(clause)
    return unique


# ============================================================================
# Public API
# ============================================================================

__all__ = [
    "Finish",
    "Clause",
    "Assignment",
    "UNSET_LETTER",
    "is_satisfied",
    "reduce",
    "weight",
    "matte_weight",
    "deduplicate",
]
