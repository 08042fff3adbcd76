"""
logic.py — Propositional formulas over predicates
=================================================

Formulas are immutable trees built by pre/postcondition authors and consumed
once by :func:`statemachine_core.evaluator.evaluate`.  Besides the usual
connectives the language has a boolean lift (:class:`Boolean`) for checks
computed in plain Python and an annotation node (:class:`Annotate`) that
attaches a label to whatever counterexample its subformula produces.

Building formulas
-----------------
>>> from statemachine_core.logic import eq, lt, elem
>>> f = (eq(1, 1) & lt(2, 3)) >> elem("a", ["a", "b"]) // "membership"
>>> f.pretty()
"(((1 == 1) ∧ (2 < 3)) ⇒ ('a' in ['a', 'b']) // 'membership')"

Operators: ``&`` (and), ``|`` (or), ``>>`` (implies), ``~`` (not) and
``// "label"`` (annotate).  ``~`` builds a :class:`Not` node; negation is
only pushed to the leaves when the formula is evaluated.

The operators keep Python's precedence, tightest first: ``~``, ``//``,
``>>``, ``&``, ``|``.  Implication therefore binds *tighter* than the
other connectives, not looser as in written logic: ``a & b >> c`` is
``a & (b >> c)``.  Parenthesise the antecedent, as above, and note that
``// "label"`` annotates only its nearest operand.

Strong negation
---------------
:func:`strong_negate` pushes a negation through the tree with De Morgan's
laws until it reaches the leaves, where predicates flip to their dual and
booleans invert (Gurevich, "Intuitionistic logic with strong negation",
1977).  The evaluator uses it for :class:`Not`, so a counterexample never
contains an unresolved double negation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

from .predicate import Predicate, PredicateKind


# ===================================================================
#  PART 1 — FORMULA AST
# ===================================================================

class Logic(ABC):
    """Base class for all formula nodes."""

    @abstractmethod
    def negate(self) -> "Logic":
        """Return the strong negation of this formula."""
        ...

    @abstractmethod
    def pretty(self) -> str:
        """Human-readable representation."""
        ...

    def __str__(self) -> str:
        return self.pretty()

    # Connectives (syntactic sugar)
    def __and__(self, other: "Logic") -> "Logic":
        return And(self, other)

    def __or__(self, other: "Logic") -> "Logic":
        return Or(self, other)

    def __rshift__(self, other: "Logic") -> "Logic":
        return Implies(self, other)

    def __invert__(self) -> "Logic":
        return Not(self)

    def __floordiv__(self, label: str) -> "Logic":
        return Annotate(label, self)


@dataclass(frozen=True)
class Bot(Logic):
    """Always false (⊥)."""
    def negate(self):
        return Top()
    def pretty(self):
        return "⊥"


@dataclass(frozen=True)
class Top(Logic):
    """Always true (⊤)."""
    def negate(self):
        return Bot()
    def pretty(self):
        return "⊤"


@dataclass(frozen=True)
class And(Logic):
    """Conjunction; the right side is only evaluated if the left holds."""
    lhs: Logic
    rhs: Logic

    def negate(self):
        return Or(self.lhs.negate(), self.rhs.negate())
    def pretty(self):
        return f"({self.lhs.pretty()} ∧ {self.rhs.pretty()})"


@dataclass(frozen=True)
class Or(Logic):
    """Disjunction; the right side is only evaluated if the left fails."""
    lhs: Logic
    rhs: Logic

    def negate(self):
        return And(self.lhs.negate(), self.rhs.negate())
    def pretty(self):
        return f"({self.lhs.pretty()} ∨ {self.rhs.pretty()})"


@dataclass(frozen=True)
class Implies(Logic):
    """Implication; vacuously true when the antecedent fails."""
    antecedent: Logic
    consequent: Logic

    def negate(self):
        return And(self.antecedent, self.consequent.negate())
    def pretty(self):
        return f"({self.antecedent.pretty()} ⇒ {self.consequent.pretty()})"


@dataclass(frozen=True)
class Not(Logic):
    """Negation, resolved by strong negation at evaluation time."""
    inner: Logic

    def negate(self):
        return self.inner
    def pretty(self):
        return f"¬{self.inner.pretty()}"


@dataclass(frozen=True)
class Pred(Logic):
    """An atomic predicate."""
    predicate: Predicate

    def negate(self):
        return Pred(self.predicate.dual())
    def pretty(self):
        return f"({self.predicate.pretty()})"


@dataclass(frozen=True)
class Boolean(Logic):
    """A plain Python boolean lifted into the logic."""
    value: bool

    def negate(self):
        return Boolean(not self.value)
    def pretty(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Annotate(Logic):
    """Attach *label* to any counterexample produced by *inner*."""
    label: str
    inner: Logic

    def negate(self):
        return Annotate(self.label, self.inner.negate())
    def pretty(self):
        return f"{self.inner.pretty()} // {self.label!r}"


def strong_negate(logic: Logic) -> Logic:
    """Push a negation through *logic* down to its leaves."""
    return logic.negate()


# ===================================================================
#  PART 2 — BUILDERS
# ===================================================================

def eq(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.EQ, x, y))


def ne(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.NE, x, y))


def lt(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.LT, x, y))


def le(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.LE, x, y))


def gt(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.GT, x, y))


def ge(x: Any, y: Any) -> Logic:
    return Pred(Predicate(PredicateKind.GE, x, y))


def elem(x: Any, xs: Iterable[Any]) -> Logic:
    return Pred(Predicate(PredicateKind.ELEM, x, tuple(xs)))


def not_elem(x: Any, xs: Iterable[Any]) -> Logic:
    return Pred(Predicate(PredicateKind.NOT_ELEM, x, tuple(xs)))


def annotate(logic: Logic, label: str) -> Logic:
    return Annotate(label, logic)


# -------------------------------------------------------------------
# Formula utilities
# -------------------------------------------------------------------

def formula_size(logic: Logic) -> int:
    """Count the number of nodes in a formula."""
    if isinstance(logic, (And, Or)):
        return 1 + formula_size(logic.lhs) + formula_size(logic.rhs)
    if isinstance(logic, Implies):
        return 1 + formula_size(logic.antecedent) + formula_size(logic.consequent)
    if isinstance(logic, (Not, Annotate)):
        return 1 + formula_size(logic.inner)
    return 1


__all__ = [
    "Logic",
    "Bot",
    "Top",
    "And",
    "Or",
    "Implies",
    "Not",
    "Pred",
    "Boolean",
    "Annotate",
    "strong_negate",
    "eq",
    "ne",
    "lt",
    "le",
    "gt",
    "ge",
    "elem",
    "not_elem",
    "annotate",
    "formula_size",
]
