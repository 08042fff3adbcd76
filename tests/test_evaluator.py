# tests/test_evaluator.py
"""Evaluation results and the shape of counterexamples."""

import pytest

from statemachine_core.counterexample import (
    AnnotateWitness,
    BooleanWitness,
    BottomWitness,
    Either,
    Fst,
    ImpliesWitness,
    NotWitness,
    PredicateWitness,
    Snd,
    VFalse,
    VTrue,
    labels,
    witnesses,
)
from statemachine_core.evaluator import boolean, evaluate, evaluate_predicate
from statemachine_core.logic import (
    Boolean,
    Bot,
    Logic,
    Not,
    Top,
    elem,
    eq,
    gt,
    lt,
    ne,
)
from statemachine_core.predicate import Predicate, PredicateKind


class _Exploding(Logic):
    """A formula that fails the test if it is ever evaluated."""

    def negate(self):
        return self

    def pretty(self):
        return "boom"


def _witness_predicate(value):
    assert isinstance(value, VFalse)
    ce = value.counterexample
    assert isinstance(ce, PredicateWitness)
    return ce.predicate


class TestConstants:

    def test_top(self):
        assert evaluate(Top()) == VTrue()

    def test_bot(self):
        assert evaluate(Bot()) == VFalse(BottomWitness())

    def test_boolean(self):
        assert evaluate(Boolean(True)).is_true
        assert evaluate(Boolean(False)) == VFalse(BooleanWitness())

    def test_value_truthiness(self):
        assert bool(evaluate(Top()))
        assert not bool(evaluate(Bot()))
        assert evaluate(Top()).counterexample is None


class TestPredicates:

    def test_failed_predicate_reports_dual(self):
        p = _witness_predicate(evaluate(lt(3, 2)))
        assert p.kind is PredicateKind.GE
        assert (p.lhs, p.rhs) == (3, 2)

    def test_evaluate_predicate(self):
        assert evaluate_predicate(Predicate(PredicateKind.EQ, 1, 1)).is_true
        p = _witness_predicate(
            evaluate_predicate(Predicate(PredicateKind.EQ, 1, 2)))
        assert p.same_operands(Predicate(PredicateKind.NE, 1, 2))

    def test_membership_dual(self):
        p = _witness_predicate(evaluate(elem(3, [1, 2])))
        assert p.kind is PredicateKind.NOT_ELEM
        assert p.rhs == (1, 2)


class TestConnectives:

    def test_and_right_fails(self):
        value = evaluate(eq(1, 1) & lt(3, 2))
        ce = value.counterexample
        assert isinstance(ce, Snd)
        assert ce.inner.predicate.same_operands(
            Predicate(PredicateKind.GE, 3, 2))

    def test_and_left_fails_short_circuits(self):
        value = evaluate(Bot() & _Exploding())
        assert value.counterexample == Fst(BottomWitness())

    def test_or_both_fail(self):
        value = evaluate(Bot() | Boolean(False))
        assert value.counterexample == Either(BottomWitness(), BooleanWitness())

    def test_or_short_circuits(self):
        assert evaluate(Top() | _Exploding()).is_true

    def test_implies_vacuous(self):
        assert evaluate(Bot() >> _Exploding()).is_true

    def test_implies_fails(self):
        value = evaluate(Top() >> Bot())
        assert value.counterexample == ImpliesWitness(BottomWitness())

    def test_implies_holds(self):
        assert evaluate(Top() >> Top()).is_true

    def test_not_fails_with_negated_witness(self):
        value = evaluate(~eq(1, 1))
        ce = value.counterexample
        assert isinstance(ce, NotWitness)
        # ~(1 == 1) is evaluated as 1 != 1, whose failure reports its dual.
        assert ce.inner.predicate.same_operands(
            Predicate(PredicateKind.EQ, 1, 1))

    def test_not_holds(self):
        assert evaluate(~lt(3, 2)).is_true

    def test_double_not(self):
        value = evaluate(Not(Not(Bot())))
        assert value.counterexample == NotWitness(BottomWitness())

    def test_unknown_node(self):
        with pytest.raises(TypeError):
            evaluate("not a formula")


class TestAnnotations:

    def test_label_wraps_failure(self):
        value = evaluate(gt(1, 2) // "positive")
        ce = value.counterexample
        assert isinstance(ce, AnnotateWitness)
        assert ce.label == "positive"

    def test_label_on_success(self):
        assert evaluate(Top() // "never shown").is_true

    def test_labels_outermost_first(self):
        value = evaluate((ne(1, 1) // "inner") // "outer")
        assert labels(value.counterexample) == ["outer", "inner"]

    def test_witnesses_left_to_right(self):
        value = evaluate(lt(2, 1) | eq(1, 2))
        found = witnesses(value.counterexample)
        assert [p.kind for p in found] == [PredicateKind.GE, PredicateKind.NE]


class TestPretty:

    def test_pretty_tree(self):
        value = evaluate(eq(1, 1) & lt(3, 2))
        assert value.counterexample.pretty() == (
            "and: right side failed\n"
            "  expected: 3 >= 2"
        )

    def test_pretty_nested(self):
        value = evaluate(Bot() | (lt(3, 2) // "order"))
        assert value.counterexample.pretty() == (
            "or: both sides failed\n"
            "  bottom\n"
            "  label: order\n"
            "    expected: 3 >= 2"
        )


class TestBoolean:

    @pytest.mark.parametrize("formula,expected", [
        (Top(), True),
        (Bot(), False),
        (eq(1, 1) & lt(1, 2), True),
        (eq(1, 1) & lt(3, 2), False),
        (~(Bot() >> Top()), False),
    ])
    def test_boolean(self, formula, expected):
        assert boolean(formula) is expected
