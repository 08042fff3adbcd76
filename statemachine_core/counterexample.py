"""
counterexample.py — Structured witnesses for false formulas
===========================================================

When a formula evaluates to false the evaluator returns
``VFalse(counterexample)``, where the counterexample mirrors the shape of the
part of the formula that failed:

========================  ==================================================
``BottomWitness``         ``Bot`` was reached
``Fst(ce)``               the left side of a conjunction failed
``Snd(ce)``               the left side held, the right side failed
``Either(l, r)``          both sides of a disjunction failed
``ImpliesWitness(ce)``    the antecedent held, the consequent failed
``NotWitness(ce)``        the strongly negated subformula failed
``PredicateWitness(p)``   a predicate failed; *p* is its **dual**, the fact
                          that would have made it pass
``BooleanWitness``        a lifted ``False``
``AnnotateWitness(l, ce)`` the failure happened under label *l*
========================  ==================================================

Counterexamples are produced once and only read by reporting code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from .predicate import Predicate


# ===================================================================
#  PART 1 — COUNTEREXAMPLE AST
# ===================================================================

class Counterexample(ABC):
    """Base class for counterexample nodes."""

    @abstractmethod
    def children(self) -> List["Counterexample"]:
        ...

    @abstractmethod
    def describe(self) -> str:
        """One-line description of this node (without children)."""
        ...

    def pretty(self, indent: int = 0) -> str:
        """Indented multi-line rendering of the whole witness tree."""
        lines = ["  " * indent + self.describe()]
        for child in self.children():
            lines.append(child.pretty(indent + 1))
        return "\n".join(lines)


@dataclass(frozen=True)
class BottomWitness(Counterexample):
    def children(self):
        return []
    def describe(self):
        return "bottom"


@dataclass(frozen=True)
class Fst(Counterexample):
    inner: Counterexample

    def children(self):
        return [self.inner]
    def describe(self):
        return "and: left side failed"


@dataclass(frozen=True)
class Snd(Counterexample):
    inner: Counterexample

    def children(self):
        return [self.inner]
    def describe(self):
        return "and: right side failed"


@dataclass(frozen=True)
class Either(Counterexample):
    left: Counterexample
    right: Counterexample

    def children(self):
        return [self.left, self.right]
    def describe(self):
        return "or: both sides failed"


@dataclass(frozen=True)
class ImpliesWitness(Counterexample):
    inner: Counterexample

    def children(self):
        return [self.inner]
    def describe(self):
        return "implies: antecedent held, consequent failed"


@dataclass(frozen=True)
class NotWitness(Counterexample):
    inner: Counterexample

    def children(self):
        return [self.inner]
    def describe(self):
        return "not: negated formula failed"


@dataclass(frozen=True)
class PredicateWitness(Counterexample):
    """*predicate* is the dual of the failed check."""
    predicate: Predicate

    def children(self):
        return []
    def describe(self):
        return f"expected: {self.predicate.pretty()}"


@dataclass(frozen=True)
class BooleanWitness(Counterexample):
    def children(self):
        return []
    def describe(self):
        return "boolean: false"


@dataclass(frozen=True)
class AnnotateWitness(Counterexample):
    label: str
    inner: Counterexample

    def children(self):
        return [self.inner]
    def describe(self):
        return f"label: {self.label}"


# -------------------------------------------------------------------
# Reporting helpers
# -------------------------------------------------------------------

def labels(ce: Counterexample) -> List[str]:
    """Annotation labels found in *ce*, outermost first."""
    found: List[str] = []
    stack = [ce]
    while stack:
        node = stack.pop()
        if isinstance(node, AnnotateWitness):
            found.append(node.label)
        stack.extend(reversed(node.children()))
    return found


def witnesses(ce: Counterexample) -> List[Predicate]:
    """The dual predicates in *ce*, left to right: the missing facts."""
    found: List[Predicate] = []
    stack = [ce]
    while stack:
        node = stack.pop()
        if isinstance(node, PredicateWitness):
            found.append(node.predicate)
        stack.extend(reversed(node.children()))
    return found


# ===================================================================
#  PART 2 — EVALUATION RESULT
# ===================================================================

class Value(ABC):
    """Result of evaluating a formula.  ``bool(value)`` is its truth."""

    @property
    @abstractmethod
    def is_true(self) -> bool:
        ...

    @property
    def counterexample(self) -> Optional[Counterexample]:
        return None

    def __bool__(self) -> bool:
        return self.is_true


@dataclass(frozen=True)
class VTrue(Value):
    @property
    def is_true(self) -> bool:
        return True


@dataclass(frozen=True)
class VFalse(Value):
    witness: Counterexample

    @property
    def is_true(self) -> bool:
        return False

    @property
    def counterexample(self) -> Optional[Counterexample]:
        return self.witness


__all__ = [
    "Counterexample",
    "BottomWitness",
    "Fst",
    "Snd",
    "Either",
    "ImpliesWitness",
    "NotWitness",
    "PredicateWitness",
    "BooleanWitness",
    "AnnotateWitness",
    "labels",
    "witnesses",
    "Value",
    "VTrue",
    "VFalse",
]
