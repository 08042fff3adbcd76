"""
evaluator.py — Formula evaluation with counterexamples
======================================================

:func:`evaluate` reduces a :class:`~statemachine_core.logic.Logic` tree to a
:class:`~statemachine_core.counterexample.Value` by structural recursion.
Conjunction, disjunction and implication short-circuit exactly like Python's
``and``/``or``: a subformula that is not needed is never evaluated, so a
right-hand side may rely on the left-hand side having held.

Falsity is an ordinary return value, never an exception.
"""

from __future__ import annotations

from .counterexample import (
    AnnotateWitness,
    BooleanWitness,
    BottomWitness,
    Either,
    Fst,
    ImpliesWitness,
    NotWitness,
    PredicateWitness,
    Snd,
    Value,
    VFalse,
    VTrue,
)
from .logic import (
    And,
    Annotate,
    Boolean,
    Bot,
    Implies,
    Logic,
    Not,
    Or,
    Pred,
    Top,
)
from .predicate import Predicate

_TRUE = VTrue()


def evaluate_predicate(p: Predicate) -> Value:
    """Run *p*; on failure the witness is the dual of *p*."""
    if p.holds():
        return _TRUE
    return VFalse(PredicateWitness(p.dual()))


def evaluate(logic: Logic) -> Value:
    """Evaluate *logic*, producing a counterexample if it is false."""
    if isinstance(logic, Bot):
        return VFalse(BottomWitness())
    if isinstance(logic, Top):
        return _TRUE

    if isinstance(logic, And):
        left = evaluate(logic.lhs)
        if not left.is_true:
            return VFalse(Fst(left.counterexample))
        right = evaluate(logic.rhs)
        if not right.is_true:
            return VFalse(Snd(right.counterexample))
        return _TRUE

    if isinstance(logic, Or):
        left = evaluate(logic.lhs)
        if left.is_true:
            return _TRUE
        right = evaluate(logic.rhs)
        if right.is_true:
            return _TRUE
        # Both witnesses are kept: the disjunction failed on both sides.
        return VFalse(Either(left.counterexample, right.counterexample))

    if isinstance(logic, Implies):
        antecedent = evaluate(logic.antecedent)
        if not antecedent.is_true:
            return _TRUE
        consequent = evaluate(logic.consequent)
        if consequent.is_true:
            return _TRUE
        return VFalse(ImpliesWitness(consequent.counterexample))

    if isinstance(logic, Not):
        negated = evaluate(logic.inner.negate())
        if negated.is_true:
            return _TRUE
        return VFalse(NotWitness(negated.counterexample))

    if isinstance(logic, Pred):
        return evaluate_predicate(logic.predicate)

    if isinstance(logic, Boolean):
        return _TRUE if logic.value else VFalse(BooleanWitness())

    if isinstance(logic, Annotate):
        inner = evaluate(logic.inner)
        if inner.is_true:
            return inner
        return VFalse(AnnotateWitness(logic.label, inner.counterexample))

    raise TypeError(f"not a Logic formula: {logic!r}")


def boolean(logic: Logic) -> bool:
    """Truth value of *logic*, discarding any counterexample."""
    return evaluate(logic).is_true


__all__ = [
    "evaluate",
    "evaluate_predicate",
    "boolean",
]
