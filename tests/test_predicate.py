# tests/test_predicate.py
"""Predicate kinds, duals and concrete checks."""

import pytest

from statemachine_core.predicate import Predicate, PredicateKind, dual


class TestPredicateKind:

    @pytest.mark.parametrize("kind", list(PredicateKind))
    def test_dual_is_involution(self, kind):
        assert kind.dual().dual() is kind

    def test_dual_pairs(self):
        assert PredicateKind.EQ.dual() is PredicateKind.NE
        assert PredicateKind.LT.dual() is PredicateKind.GE
        assert PredicateKind.LE.dual() is PredicateKind.GT
        assert PredicateKind.ELEM.dual() is PredicateKind.NOT_ELEM

    def test_families(self):
        assert PredicateKind.ELEM.is_membership
        assert not PredicateKind.EQ.is_membership
        assert PredicateKind.GE.is_ordering
        assert not PredicateKind.NE.is_ordering


class TestPredicate:

    @pytest.mark.parametrize("kind,lhs,rhs", [
        (PredicateKind.EQ, 1, 1),
        (PredicateKind.NE, 1, 2),
        (PredicateKind.LT, 1, 2),
        (PredicateKind.LE, 2, 2),
        (PredicateKind.GT, 3, 2),
        (PredicateKind.GE, 2, 2),
        (PredicateKind.ELEM, "a", ["a", "b"]),
        (PredicateKind.NOT_ELEM, "c", ["a", "b"]),
    ])
    def test_holds_and_dual_fails(self, kind, lhs, rhs):
        p = Predicate(kind, lhs, rhs)
        assert p.holds()
        assert not p.dual().holds()

    def test_dual_keeps_operands(self):
        p = Predicate(PredicateKind.LT, 3, 2)
        d = dual(p)
        assert d.kind is PredicateKind.GE
        assert (d.lhs, d.rhs) == (3, 2)

    def test_membership_rhs_frozen(self):
        p = Predicate(PredicateKind.ELEM, 1, [1, 2])
        assert p.rhs == (1, 2)
        assert p.holds()

    def test_empty_membership(self):
        assert not Predicate(PredicateKind.ELEM, 1, []).holds()
        assert Predicate(PredicateKind.NOT_ELEM, 1, []).holds()

    def test_equality_by_kind_only(self):
        a = Predicate(PredicateKind.EQ, 1, 2)
        b = Predicate(PredicateKind.EQ, "x", "y")
        assert a == b
        assert hash(a) == hash(b)
        assert not a.same_operands(b)
        assert a != Predicate(PredicateKind.NE, 1, 2)

    def test_same_operands(self):
        a = Predicate(PredicateKind.ELEM, 1, [1, 2])
        assert a.same_operands(Predicate(PredicateKind.ELEM, 1, (1, 2)))

    def test_pretty(self):
        assert Predicate(PredicateKind.GE, 3, 2).pretty() == "3 >= 2"
        assert (Predicate(PredicateKind.NOT_ELEM, "a", ["a"]).pretty()
                == "'a' not in ['a']")

    def test_incomparable_operands_raise(self):
        with pytest.raises(TypeError):
            Predicate(PredicateKind.LT, 1, "a").holds()
