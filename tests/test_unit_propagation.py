"""
tests/test_unit_propagation.py
==============================
Tests for unit propagation (component_3).
"""

from component_1_clause_model import Assignment, Clause, Finish
from component_3_unit_propagation import find_unit_clause, propagate_unit


class TestUnitPropagation:
    """Test find_unit_clause and propagate_unit."""

    def test_finds_first_unit_clause(self):
        """Test the first weight-1 clause in list order wins."""
        clauses = [
            Clause.from_string("GM_"),
            Clause.from_string("__M"),
            Clause.from_string("G__"),
        ]
        assert find_unit_clause(clauses) == Clause.from_string("__M")

    def test_no_unit_clause(self):
        """Test lists without singletons."""
        assert find_unit_clause([Clause.from_string("GM")]) is None
        assert find_unit_clause([]) is None

    def test_propagate_sets_required_finish(self):
        """Test forcing the sole literal."""
        clauses = [Clause.from_string("G_M"), Clause.from_string("_M_")]
        assignment, position, finish = propagate_unit(clauses, Assignment.unset(3))
        assert (position, finish) == (1, Finish.MATTE)
        assert str(assignment) == "_M_"

    def test_propagate_only_one_clause_per_call(self):
        """Test remaining singletons are left for the next step."""
        clauses = [Clause.from_string("G__"), Clause.from_string("__M")]
        assignment, position, _ = propagate_unit(clauses, Assignment.unset(3))
        assert position == 0
        assert str(assignment) == "G__"

    def test_propagate_without_unit_clause(self):
        """Test None when nothing is forced."""
        assert propagate_unit([Clause.from_string("GM")], Assignment.unset(2)) is None
