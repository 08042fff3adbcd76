"""
predicate.py — Atomic comparisons and membership tests
======================================================

A :class:`Predicate` is the leaf of a :mod:`statemachine_core.logic` formula:
one comparison between two operands, or one membership test of a value in a
finite sequence.  Every predicate has a *dual* in the same family (``==``
and ``!=``, ``<`` and ``>=``, ``in`` and ``not in`` …), which is what the
evaluator reports when the predicate fails: the counterexample names the
fact that would have made the check pass.

Predicates compare equal when their *kind* matches, regardless of operands.
That makes them usable as lookup keys (``{Predicate: count}`` tallies of
failure kinds); use :meth:`Predicate.same_operands` for a semantic check.
"""

from __future__ import annotations

import enum
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict


# ===================================================================
#  PART 1 — PREDICATE KINDS
# ===================================================================

class PredicateKind(enum.Enum):
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    ELEM = "in"
    NOT_ELEM = "not in"

    def dual(self) -> "PredicateKind":
        """The logically negated kind within the same family."""
        return _DUALS[self]

    @property
    def is_membership(self) -> bool:
        return self in (PredicateKind.ELEM, PredicateKind.NOT_ELEM)

    @property
    def is_ordering(self) -> bool:
        return self in (PredicateKind.LT, PredicateKind.LE,
                        PredicateKind.GT, PredicateKind.GE)


_DUALS: Dict[PredicateKind, PredicateKind] = {
    PredicateKind.EQ: PredicateKind.NE,
    PredicateKind.NE: PredicateKind.EQ,
    PredicateKind.LT: PredicateKind.GE,
    PredicateKind.LE: PredicateKind.GT,
    PredicateKind.GT: PredicateKind.LE,
    PredicateKind.GE: PredicateKind.LT,
    PredicateKind.ELEM: PredicateKind.NOT_ELEM,
    PredicateKind.NOT_ELEM: PredicateKind.ELEM,
}

_TESTS: Dict[PredicateKind, Callable[[Any, Any], bool]] = {
    PredicateKind.EQ: operator.eq,
    PredicateKind.NE: operator.ne,
    PredicateKind.LT: operator.lt,
    PredicateKind.LE: operator.le,
    PredicateKind.GT: operator.gt,
    PredicateKind.GE: operator.ge,
    PredicateKind.ELEM: lambda x, xs: x in xs,
    PredicateKind.NOT_ELEM: lambda x, xs: x not in xs,
}


# ===================================================================
#  PART 2 — PREDICATE
# ===================================================================

@dataclass(frozen=True, eq=False)
class Predicate:
    """One comparison ``lhs <kind> rhs``.

    For membership kinds *rhs* is the finite sequence searched; it is frozen
    into a tuple at construction so the predicate stays immutable.
    """
    kind: PredicateKind
    lhs: Any
    rhs: Any

    def __post_init__(self) -> None:
        if self.kind.is_membership and not isinstance(self.rhs, tuple):
            object.__setattr__(self, "rhs", tuple(self.rhs))

    # Equality is by kind only.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Predicate):
            return NotImplemented
        return self.kind is other.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def same_operands(self, other: "Predicate") -> bool:
        """True if *other* has the same kind and equal operands."""
        return (self.kind is other.kind
                and self.lhs == other.lhs
                and self.rhs == other.rhs)

    def dual(self) -> "Predicate":
        return Predicate(self.kind.dual(), self.lhs, self.rhs)

    def holds(self) -> bool:
        """Run the concrete comparison."""
        return bool(_TESTS[self.kind](self.lhs, self.rhs))

    def pretty(self) -> str:
        if self.kind.is_membership:
            items = ", ".join(repr(x) for x in self.rhs)
            return f"{self.lhs!r} {self.kind.value} [{items}]"
        return f"{self.lhs!r} {self.kind.value} {self.rhs!r}"

    def __repr__(self) -> str:
        return f"Predicate({self.pretty()})"


def dual(p: Predicate) -> Predicate:
    return p.dual()


__all__ = [
    "PredicateKind",
    "Predicate",
    "dual",
]
