"""
tests/test_clause_model.py
==========================
Tests for the clause model (component_1).

Tests:
- Finish parsing
- Clause construction, weights and unit detection
- Assignment immutability and completion
- is_satisfied / reduce / weight primitives
"""

import pytest

from component_1_clause_model import (
    Assignment,
    Clause,
    Finish,
    deduplicate,
    is_satisfied,
    matte_weight,
    reduce,
    weight,
)

G = Finish.GLOSSY
M = Finish.MATTE


class TestFinish:
    """Test Finish enum."""

    def test_from_letter(self):
        """Test mapping letters to finishes."""
        assert Finish.from_letter("G") is G
        assert Finish.from_letter("M") is M

    def test_invalid_letter(self):
        """Test unknown letters are rejected."""
        with pytest.raises(ValueError):
            Finish.from_letter("g")
        with pytest.raises(ValueError):
            Finish.from_letter("X")


class TestClause:
    """Test Clause class."""

    def test_from_literals(self):
        """Test building a clause from a position map."""
        clause = Clause.from_literals(5, {1: G, 2: M, 4: G})
        assert clause.entries == (None, G, M, None, G)
        assert str(clause) == "_GM_G"
        assert clause.width == 5

    def test_from_string(self):
        """Test compact form parsing."""
        assert Clause.from_string("_GM_G") == Clause.from_literals(5, {1: G, 2: M, 4: G})

    def test_weights(self):
        """Test clause size and Matte count."""
        clause = Clause.from_string("_GM_G")
        assert clause.weight() == 3
        assert weight(clause) == 3
        assert clause.matte_weight() == 1

    def test_unit_clause(self):
        """Test unit clause detection and literal extraction."""
        clause = Clause.from_string("__M")
        assert clause.is_unit()
        assert clause.get_unit_literal() == (2, M)

        not_unit = Clause.from_string("G_M")
        assert not not_unit.is_unit()
        assert not_unit.get_unit_literal() is None

    def test_empty_clause(self):
        """Test clause without specified entries."""
        clause = Clause.from_string("___")
        assert clause.is_empty()
        assert not clause.is_unit()

    def test_literals_in_position_order(self):
        """Test literal iteration."""
        clause = Clause.from_string("M_G")
        assert list(clause.literals()) == [(0, M), (2, G)]

    def test_hash_and_equality(self):
        """Test structural equality (needed for deduplication)."""
        a = Clause.from_string("G_M")
        b = Clause.from_literals(3, {0: G, 2: M})
        c = Clause.from_string("G__")
        assert a == b
        assert len({a, b, c}) == 2


class TestAssignment:
    """Test Assignment class."""

    def test_unset(self):
        """Test all-UNSET assignment."""
        assignment = Assignment.unset(3)
        assert assignment.values == (None, None, None)
        assert not assignment.is_complete()
        assert assignment.first_unset() == 0
        assert assignment.matte_weight() == 0

    def test_with_finish_creates_new_instance(self):
        """Test branching never mutates the parent."""
        parent = Assignment.unset(3)
        child = parent.with_finish(1, M)
        assert parent.values == (None, None, None)
        assert child.values == (None, M, None)
        assert child.matte_weight() == 1

    def test_first_unset_and_unset_positions(self):
        """Test UNSET lookups."""
        assignment = Assignment.from_string("G_M_")
        assert assignment.first_unset() == 1
        assert assignment.unset_positions() == [1, 3]
        assert Assignment.from_string("GM").first_unset() is None

    def test_completed(self):
        """Test filling remaining positions with Glossy."""
        assignment = Assignment.from_string("_M_").completed()
        assert str(assignment) == "GMG"
        assert assignment.is_complete()
        assert assignment.finishes() == [G, M, G]


class TestPrimitives:
    """Test is_satisfied, reduce and friends."""

    def test_is_satisfied(self):
        """Test satisfaction requires a fixed matching position."""
        clause = Clause.from_string("G_M")
        assert is_satisfied(Assignment.from_string("G__"), clause)
        assert is_satisfied(Assignment.from_string("M_M"), clause)
        assert not is_satisfied(Assignment.from_string("MGG"), clause)
        assert not is_satisfied(Assignment.unset(3), clause)

    def test_reduce_clears_fixed_positions(self):
        """Test reduction against a partial assignment."""
        clause = Clause.from_string("GGM")
        reduced = reduce(Assignment.from_string("M__"), clause)
        assert str(reduced) == "_GM"

    def test_reduce_is_idempotent(self):
        """Test reduce(a, reduce(a, c)) == reduce(a, c)."""
        assignment = Assignment.from_string("M_G_")
        for text in ("GGMG", "_G__", "M__M", "G___"):
            clause = Clause.from_string(text)
            once = reduce(assignment, clause)
            assert reduce(assignment, once) == once

    def test_reduce_never_adds_entries(self):
        """Test monotonicity of reduce."""
        clause = Clause.from_string("G__M")
        reduced = reduce(Assignment.from_string("_G__"), clause)
        assert reduced == clause

    def test_matte_weight_of_sequences(self):
        """Test Matte counting on raw sequences."""
        assert matte_weight((M, None, G, M)) == 2
        assert matte_weight(()) == 0

    def test_deduplicate_keeps_first_occurrence_order(self):
        """Test deduplication."""
        a = Clause.from_string("G_")
        b = Clause.from_string("_M")
        assert deduplicate([a, b, a, b, a]) == [a, b]
