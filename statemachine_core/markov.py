"""
markov.py — Weighted command generation over abstract coverage states
=====================================================================

A :class:`Markov` chain maps an abstract *coverage state* (any hashable
value, typically a small tuple of enums) to an ordered sequence of weighted
alternatives.  Each alternative either stops generation (:data:`STOP`) or
names a transition (:class:`Continue`) carrying a label, a generator that
produces a concrete action from the current model, and the next abstract
state.

Generation walks the chain from an initial state.  At each step a uniform
integer in ``[0, 100)`` is drawn and the alternative whose cumulative weight
first exceeds the draw is taken.  Randomness is injected as a :data:`Draw`
callable so that a run is replayable from a seed or a recorded draw
sequence.

The walk does not bound itself.  Termination is guaranteed only for chains
that pass :func:`statemachine_core.validation.validate`; an unvalidated
chain may loop forever.

Example
-------
>>> chain = Markov({
...     "empty": [(90, Continue("push", lambda m: "push", "one")), (10, STOP)],
...     "one":   [(100, STOP)],
... })
>>> walk(chain, "empty", None, draws_from([5, 0]))
['push']
"""

from __future__ import annotations

import logging
import random
from collections import Counter as _Tally
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Hashable)   # abstract coverage state
M = TypeVar("M")                   # model
A = TypeVar("A")                   # action / command

#: Weights at every state must sum to exactly this value.
TOTAL_WEIGHT = 100

#: ``draw(n)`` returns a uniform integer in ``[0, n)``.
Draw = Callable[[int], int]


# ===================================================================
#  PART 1 — CHAIN MODEL
# ===================================================================

@dataclass(frozen=True)
class Stop:
    """Terminal alternative: generation ends."""

    @property
    def label(self) -> str:
        return "Stop"

    def __repr__(self) -> str:
        return "STOP"


STOP = Stop()


@dataclass(frozen=True)
class Continue(Generic[M, S, A]):
    """Named transition: run *generator* on the model, move to *next_state*."""
    label: str
    generator: Callable[[M], A]
    next_state: S

    def __repr__(self) -> str:
        return f"Continue({self.label!r}, -> {self.next_state!r})"


Alternative = Union[Stop, Continue]


class Choice(NamedTuple):
    weight: int
    alternative: Alternative


Transitions = Union[
    Mapping[Any, Sequence[Tuple[int, Alternative]]],
    Callable[[Any], Sequence[Tuple[int, Alternative]]],
]


class Markov(Generic[S, M, A]):
    """A finite-domain function from abstract state to weighted alternatives.

    *transitions* is either a mapping or a callable; either way it is queried
    per state.  A state for which it yields nothing (missing key, empty
    sequence) is outside the chain's domain.
    """

    def __init__(self, transitions: Transitions) -> None:
        if isinstance(transitions, Mapping):
            table = dict(transitions)
            self._lookup: Callable[[Any], Sequence[Tuple[int, Alternative]]] = (
                lambda state: table.get(state, ())
            )
            self._declared: Optional[Tuple[Any, ...]] = tuple(table)
        elif callable(transitions):
            self._lookup = transitions
            self._declared = None
        else:
            raise TypeError(
                "Markov expects a mapping or a callable, got "
                f"{type(transitions).__name__}"
            )

    def alternatives(self, state: S) -> Tuple[Choice, ...]:
        return tuple(Choice(w, alt) for w, alt in (self._lookup(state) or ()))

    __call__ = alternatives

    def is_defined(self, state: S) -> bool:
        return bool(self.alternatives(state))

    @property
    def declared_states(self) -> Optional[Tuple[Any, ...]]:
        """States listed in a mapping-backed chain, ``None`` for callables."""
        return self._declared

    def successors(self, state: S) -> List[Tuple[int, S]]:
        """``(weight, next_state)`` for every ``Continue`` at *state*."""
        return [
            (choice.weight, choice.alternative.next_state)
            for choice in self.alternatives(state)
            if isinstance(choice.alternative, Continue)
        ]


# ===================================================================
#  PART 2 — RANDOMNESS
# ===================================================================

def seeded_draw(seed: Optional[int] = None) -> Draw:
    """A :data:`Draw` backed by its own ``random.Random`` instance."""
    return random.Random(seed).randrange


def draws_from(values: Iterable[int]) -> Draw:
    """Replay a fixed sequence of draws.

    Raises ``ValueError`` when the sequence runs out or a recorded value does
    not fit the requested range.
    """
    it = iter(values)

    def draw(n: int) -> int:
        try:
            value = next(it)
        except StopIteration:
            raise ValueError("draw sequence exhausted") from None
        if not 0 <= value < n:
            raise ValueError(f"recorded draw {value} outside [0, {n})")
        return value

    return draw


def select(choices: Sequence[Choice], draw_value: int) -> Optional[Alternative]:
    """Weighted roulette: first alternative whose cumulative weight exceeds
    *draw_value*.  ``None`` if the weights never get there."""
    cumulative = 0
    for weight, alternative in choices:
        cumulative += weight
        if draw_value < cumulative:
            return alternative
    return None


# ===================================================================
#  PART 3 — WALK
# ===================================================================

@dataclass(frozen=True)
class Step(Generic[S, A]):
    """One generated command and the abstract transition that produced it."""
    source: S
    label: str
    action: A
    target: S

    def __str__(self) -> str:
        return f"{self.source!r} --[{self.label}]--> {self.target!r}"


def iter_walk(
    chain: Markov,
    initial: S,
    model: M,
    draw: Draw,
    *,
    next_model: Optional[Callable[[M, A], M]] = None,
) -> Iterator[Step]:
    """Lazily walk *chain* from *initial*, yielding one :class:`Step` per
    generated action until ``Stop`` is sampled."""
    state = initial
    while True:
        choices = chain.alternatives(state)
        if not choices:
            logger.debug("state %r is outside the chain; walk ends", state)
            return
        draw_value = draw(TOTAL_WEIGHT)
        alternative = select(choices, draw_value)
        if alternative is None:
            logger.warning(
                "draw %d exceeds the total weight at state %r; walk ends",
                draw_value, state,
            )
            return
        if isinstance(alternative, Stop):
            logger.debug("stop sampled at state %r", state)
            return
        action = alternative.generator(model)
        yield Step(state, alternative.label, action, alternative.next_state)
        if next_model is not None:
            model = next_model(model, action)
        state = alternative.next_state


def walk_steps(
    chain: Markov,
    initial: S,
    model: M,
    draw: Draw,
    *,
    next_model: Optional[Callable[[M, A], M]] = None,
) -> List[Step]:
    return list(iter_walk(chain, initial, model, draw, next_model=next_model))


def walk(
    chain: Markov,
    initial: S,
    model: M,
    draw: Draw,
    *,
    next_model: Optional[Callable[[M, A], M]] = None,
) -> List[A]:
    """Generate a command sequence: the actions of :func:`iter_walk`."""
    return [step.action
            for step in iter_walk(chain, initial, model, draw,
                                  next_model=next_model)]


def tabulate(steps: Iterable[Step]) -> Dict[Tuple[Any, str, Any], int]:
    """Count how often each ``(source, label, target)`` transition was taken."""
    tally: _Tally = _Tally()
    for step in steps:
        tally[(step.source, step.label, step.target)] += 1
    return dict(tally)


__all__ = [
    "TOTAL_WEIGHT",
    "Draw",
    "Stop",
    "STOP",
    "Continue",
    "Alternative",
    "Choice",
    "Markov",
    "seeded_draw",
    "draws_from",
    "select",
    "Step",
    "iter_walk",
    "walk_steps",
    "walk",
    "tabulate",
]
