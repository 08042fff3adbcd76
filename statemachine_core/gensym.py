"""Fresh symbolic references for command generation.

Generators run before any command executes, so a command that creates a
resource (a process, a file handle) can only refer to its result through a
placeholder.  :func:`gen_sym` hands out such placeholders from a monotonic
:class:`Counter`; no index is ever reused within one counter lineage.

>>> gs = GenSym()
>>> gs.gen_sym(), gs.gen_sym()
($0, $1)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class Var:
    index: int


@dataclass(frozen=True, order=True)
class Symbolic:
    """Placeholder for a value that will exist once the command runs."""
    var: Var

    def __repr__(self) -> str:
        return f"${self.var.index}"

    __str__ = __repr__


@dataclass(frozen=True)
class Counter:
    value: int = 0

    def next(self) -> "Counter":
        return Counter(self.value + 1)


def new_counter() -> Counter:
    return Counter(0)


def gen_sym(counter: Counter) -> Tuple[Symbolic, Counter]:
    """Allocate one reference, returning it with the advanced counter."""
    return Symbolic(Var(counter.value)), counter.next()


class GenSym:
    """Stateful wrapper threading a :class:`Counter` through generation."""

    def __init__(self, counter: Optional[Counter] = None):
        self._counter = counter if counter is not None else new_counter()

    @property
    def counter(self) -> Counter:
        return self._counter

    def gen_sym(self) -> Symbolic:
        ref, self._counter = gen_sym(self._counter)
        return ref


def run_gen_sym(fn: Callable[[GenSym], T],
                counter: Optional[Counter] = None) -> Tuple[T, Counter]:
    """Run *fn* with a fresh :class:`GenSym` seeded from *counter*."""
    gs = GenSym(counter)
    result = fn(gs)
    return result, gs.counter


__all__ = [
    "Var",
    "Symbolic",
    "Counter",
    "new_counter",
    "gen_sym",
    "GenSym",
    "run_gen_sym",
]
