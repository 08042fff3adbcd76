"""
validation.py — Static checks for Markov chains
===============================================

Two structural checks run once, ahead of generation, and never execute a
generator:

* **Stochastic well-formedness.**  Every weight at a checked state is
  non-negative and the weights sum to exactly
  :data:`~statemachine_core.markov.TOTAL_WEIGHT`.
* **Liveness.**  From every reachable state some path of strictly positive
  weight edges leads to a state that stops with positive weight.

The states checked are those reachable from the initial state by
breadth-first search over every ``Continue`` edge, zero-weight edges
included.  A state the chain yields no alternatives for is outside its
domain: it is not checked for weights and counts as terminal for liveness.

All violations of a run are collected and returned together.  Weights
must be ``int``; any other type is a malformed chain and raises
``TypeError`` instead of being reported.

Usage::

    violations = validate(chain, initial)
    for v in violations:
        print(v.pretty())
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from .markov import TOTAL_WEIGHT, Alternative, Continue, Markov, Stop

logger = logging.getLogger(__name__)


# ===================================================================
#  PART 1 — VIOLATIONS
# ===================================================================

class ViolationKind(enum.Enum):
    NEGATIVE_WEIGHT = "negative-weight"
    WEIGHT_SUM_MISMATCH = "weight-sum-mismatch"
    DEADLOCK = "deadlock"
    UNREACHABLE = "unreachable"


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (tuple, list, frozenset, set)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


class Violation(ABC):
    """Base class for validator findings.  Every finding names a state."""

    state: Any

    @property
    @abstractmethod
    def kind(self) -> ViolationKind:
        ...

    @abstractmethod
    def pretty(self) -> str:
        ...

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind.value, "state": _jsonable(self.state)}

    def __str__(self) -> str:
        return self.pretty()


@dataclass(frozen=True)
class NegativeWeight(Violation):
    state: Any
    alternative: Alternative
    weight: int

    @property
    def kind(self) -> ViolationKind:
        return ViolationKind.NEGATIVE_WEIGHT

    def pretty(self) -> str:
        return (f"negative weight {self.weight} at {self.state!r} "
                f"for {self.alternative.label!r}")

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["alternative"] = self.alternative.label
        d["weight"] = self.weight
        return d


@dataclass(frozen=True)
class WeightSumMismatch(Violation):
    state: Any
    actual_sum: int

    @property
    def kind(self) -> ViolationKind:
        return ViolationKind.WEIGHT_SUM_MISMATCH

    def pretty(self) -> str:
        return (f"weights at {self.state!r} sum to {self.actual_sum}, "
                f"expected {TOTAL_WEIGHT}")

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["actual_sum"] = self.actual_sum
        d["expected_sum"] = TOTAL_WEIGHT
        return d


@dataclass(frozen=True)
class Deadlock(Violation):
    state: Any

    @property
    def kind(self) -> ViolationKind:
        return ViolationKind.DEADLOCK

    def pretty(self) -> str:
        return f"deadlock: no positive-weight path from {self.state!r} to Stop"


@dataclass(frozen=True)
class Unreachable(Violation):
    state: Any

    @property
    def kind(self) -> ViolationKind:
        return ViolationKind.UNREACHABLE

    def pretty(self) -> str:
        return f"state {self.state!r} is defined but unreachable"


# ===================================================================
#  PART 2 — CHECKS
# ===================================================================

def reachable_states(chain: Markov, initial: Any) -> List[Any]:
    """States reachable from *initial*, in breadth-first order.

    Every ``Continue`` edge is followed regardless of its weight.
    """
    seen: Set[Any] = {initial}
    order: List[Any] = []
    worklist: deque = deque([initial])
    while worklist:
        state = worklist.popleft()
        order.append(state)
        for _weight, target in chain.successors(state):
            if target not in seen:
                seen.add(target)
                worklist.append(target)
    return order


def check_stochastic(chain: Markov, states: Iterable[Any]) -> List[Violation]:
    """Negative weights and weight sums other than ``TOTAL_WEIGHT``.

    Raises ``TypeError`` for a weight that is not an ``int`` (``bool``
    included); such a chain is malformed rather than mis-weighted.
    """
    violations: List[Violation] = []
    for state in states:
        choices = chain.alternatives(state)
        if not choices:
            continue
        total = 0
        for weight, alternative in choices:
            if isinstance(weight, bool) or not isinstance(weight, int):
                raise TypeError(
                    f"weight {weight!r} at {state!r} is not an integer")
            if weight < 0:
                violations.append(NegativeWeight(state, alternative, weight))
            total += weight
        if total != TOTAL_WEIGHT:
            violations.append(WeightSumMismatch(state, total))
    return violations


def _is_terminal(chain: Markov, state: Any) -> bool:
    choices = chain.alternatives(state)
    if not choices:
        return True
    return any(isinstance(alt, Stop) and weight > 0 for weight, alt in choices)


def check_liveness(chain: Markov, states: Sequence[Any]) -> List[Violation]:
    """A :class:`Deadlock` for each state in *states* that cannot stop.

    Only strictly positive edges count.  *states* should be closed under
    successors (e.g. the output of :func:`reachable_states`); targets outside
    it are looked up on the chain as needed.
    """
    # Reverse adjacency over positive edges.
    predecessors: Dict[Any, List[Any]] = {}
    live: Set[Any] = set()
    worklist: deque = deque()
    universe = list(states)
    known = set(universe)
    i = 0
    while i < len(universe):
        state = universe[i]
        i += 1
        if _is_terminal(chain, state):
            live.add(state)
            worklist.append(state)
        for weight, target in chain.successors(state):
            if weight <= 0:
                continue
            predecessors.setdefault(target, []).append(state)
            if target not in known:
                known.add(target)
                universe.append(target)

    while worklist:
        state = worklist.popleft()
        for pred in predecessors.get(state, ()):
            if pred not in live:
                live.add(pred)
                worklist.append(pred)

    return [Deadlock(state) for state in states if state not in live]


def validate(chain: Markov, initial: Any, *,
             domain: Optional[Iterable[Any]] = None) -> List[Violation]:
    """Run every check and return all violations (empty list when valid).

    With *domain*, states in it that the chain defines are checked for
    weights as well, and the defined ones that cannot be reached from
    *initial* are reported as :class:`Unreachable`.
    """
    return validate_report(chain, initial, domain=domain).violations


# ===================================================================
#  PART 3 — REPORT
# ===================================================================

@dataclass
class ValidationReport:
    """Outcome of one validation run."""
    initial: Any
    states_checked: List[Any] = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def by_kind(self, kind: ViolationKind) -> List[Violation]:
        return [v for v in self.violations if v.kind is kind]

    def summary(self) -> str:
        lines = [
            f"initial state  : {self.initial!r}",
            f"states checked : {len(self.states_checked)}",
            f"violations     : {len(self.violations)}",
        ]
        for v in self.violations:
            lines.append(f"  {v.pretty()}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "initial": _jsonable(self.initial),
            "states_checked": len(self.states_checked),
            "ok": self.ok,
            "violations": [v.to_dict() for v in self.violations],
        }


def validate_report(chain: Markov, initial: Any, *,
                    domain: Optional[Iterable[Any]] = None) -> ValidationReport:
    reachable = reachable_states(chain, initial)
    checked = list(reachable)
    unreachable: List[Violation] = []
    if domain is not None:
        seen = set(reachable)
        for state in domain:
            if state in seen or not chain.is_defined(state):
                continue
            seen.add(state)
            checked.append(state)
            unreachable.append(Unreachable(state))

    violations: List[Violation] = []
    violations.extend(check_stochastic(chain, checked))
    violations.extend(check_liveness(chain, reachable))
    violations.extend(unreachable)

    report = ValidationReport(initial, checked, violations)
    logger.info("validated %d state(s) from %r: %d violation(s)",
                len(checked), initial, len(violations))
    for v in violations:
        logger.debug("  %s", v.pretty())
    return report


__all__ = [
    "ViolationKind",
    "Violation",
    "NegativeWeight",
    "WeightSumMismatch",
    "Deadlock",
    "Unreachable",
    "reachable_states",
    "check_stochastic",
    "check_liveness",
    "validate",
    "ValidationReport",
    "validate_report",
]
