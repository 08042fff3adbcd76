"""Bounded quantifiers over explicit finite sequences.

Both are plain right folds, so evaluation short-circuits on the first
failing (``forall``) or holding (``exists``) element and the counterexample
position encodes the element index: element *k* of a failed ``forall`` is
reported as ``Snd`` applied *k* times around ``Fst(ce)``.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from .logic import And, Bot, Logic, Or, Top

T = TypeVar("T")


def forall(xs: Iterable[T], fn: Callable[[T], Logic]) -> Logic:
    """Conjunction of ``fn(x)`` over *xs*; ``Top`` for an empty sequence."""
    result: Logic = Top()
    for term in reversed([fn(x) for x in xs]):
        result = And(term, result)
    return result


def exists(xs: Iterable[T], fn: Callable[[T], Logic]) -> Logic:
    """Disjunction of ``fn(x)`` over *xs*; ``Bot`` for an empty sequence."""
    result: Logic = Bot()
    for term in reversed([fn(x) for x in xs]):
        result = Or(term, result)
    return result


__all__ = ["forall", "exists"]
