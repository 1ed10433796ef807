# conftest.py
"""
Shared pytest fixtures and helpers for the Paintshop tests.
These fixtures are loaded automatically by pytest and available in every test file.
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import itertools
import random
from typing import List, Optional, Sequence

import pytest

from component_1_clause_model import Assignment, Clause, Finish, is_satisfied
from paintshop_config import PaintshopConfig, get_config

G = Finish.GLOSSY
M = Finish.MATTE


def brute_force_min_matte(width: int, clauses: Sequence[Clause]) -> Optional[int]:
    """Minimum Matte-weight over all 2^W complete assignments (None if unsat)."""
    best = None
    for values in itertools.product((G, M), repeat=width):
        candidate = Assignment(tuple(values))
        if all(is_satisfied(candidate, clause) for clause in clauses):
            weight = candidate.matte_weight()
            if best is None or weight < best:
                best = weight
    return best


def random_problem(rng: random.Random, max_width: int = 8, max_clauses: int = 8):
    """Random (width, clauses) with at most one Matte per clause."""
    width = rng.randint(1, max_width)
    clauses: List[Clause] = []
    for _ in range(rng.randint(1, max_clauses)):
        size = rng.randint(1, min(3, width))
        positions = rng.sample(range(width), size)
        matte_at = rng.choice(positions + [None])
        literals = {p: (M if p == matte_at else G) for p in positions}
        clause = Clause.from_literals(width, literals)
        if clause not in clauses:
            clauses.append(clause)
    return width, clauses


def random_problems(seed: int, count: int, **kwargs):
    rng = random.Random(seed)
    return [random_problem(rng, **kwargs) for _ in range(count)]


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the config singleton at a temporary file."""
    cfg = get_config()
    monkeypatch.setattr(PaintshopConfig, "_config_file", tmp_path / "paintshop_config.json")
    cfg.reload()
    yield cfg
    monkeypatch.undo()
    cfg.reload()


@pytest.fixture
def problem_file(tmp_path):
    """Factory writing problem text to a temporary file."""

    def _write(text: str, name: str = "problem.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def brute_force():
    """Exhaustive oracle: minimum Matte-weight over all 2^W assignments."""
    return brute_force_min_matte


@pytest.fixture
def problem_generator():
    """Factory for seeded random problems."""
    return random_problems


def implication_chain_clauses(width: int) -> List[Clause]:
    """[M@0] plus [G@p or M@p+1]: every position is forced Matte in turn."""
    clauses = [Clause.from_literals(width, {0: M})]
    for position in range(width - 1):
        clauses.append(Clause.from_literals(width, {position: G, position + 1: M}))
    return clauses


@pytest.fixture
def implication_chain():
    """Factory for implication chains of a given width."""
    return implication_chain_clauses
