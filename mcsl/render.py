"""Text, JSON and S-expression renderings of counterexamples and violations."""

from __future__ import annotations

import enum
import json
from typing import Any, List, Sequence

from statemachine_core.counterexample import (
    AnnotateWitness,
    BooleanWitness,
    BottomWitness,
    Counterexample,
    Either,
    Fst,
    ImpliesWitness,
    NotWitness,
    PredicateWitness,
    Snd,
    labels,
)
from statemachine_core.validation import Violation

from .sexp import Symbol, dumps, is_symbol_text


# -------------------------------------------------------------------
# Counterexamples
# -------------------------------------------------------------------

def render_counterexample(ce: Counterexample) -> str:
    """Indented witness tree, preceded by the labels it passed through."""
    found = labels(ce)
    lines = []
    if found:
        lines.append("labels: " + ", ".join(found))
    lines.append(ce.pretty())
    return "\n".join(lines)


def _value_to_sexp(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_value_to_sexp(v) for v in value]
    if isinstance(value, enum.Enum):
        return Symbol(value.name)
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return repr(value)


def counterexample_to_sexp(ce: Counterexample) -> list:
    """Nested-list form of *ce*, one tagged form per node."""
    if isinstance(ce, BottomWitness):
        return [Symbol("bottom")]
    if isinstance(ce, Fst):
        return [Symbol("fst"), counterexample_to_sexp(ce.inner)]
    if isinstance(ce, Snd):
        return [Symbol("snd"), counterexample_to_sexp(ce.inner)]
    if isinstance(ce, Either):
        return [Symbol("either"), counterexample_to_sexp(ce.left),
                counterexample_to_sexp(ce.right)]
    if isinstance(ce, ImpliesWitness):
        return [Symbol("implies"), counterexample_to_sexp(ce.inner)]
    if isinstance(ce, NotWitness):
        return [Symbol("not"), counterexample_to_sexp(ce.inner)]
    if isinstance(ce, PredicateWitness):
        p = ce.predicate
        return [Symbol("expected"),
                [Symbol(p.kind.value.replace(" ", "-")),
                 _value_to_sexp(p.lhs), _value_to_sexp(p.rhs)]]
    if isinstance(ce, BooleanWitness):
        return [Symbol("boolean")]
    if isinstance(ce, AnnotateWitness):
        return [Symbol("annotate"), ce.label, counterexample_to_sexp(ce.inner)]
    raise TypeError(f"not a counterexample: {ce!r}")


def dumps_counterexample(ce: Counterexample) -> str:
    return dumps(counterexample_to_sexp(ce))


# -------------------------------------------------------------------
# Violations
# -------------------------------------------------------------------

def render_violations(violations: Sequence[Violation]) -> str:
    if not violations:
        return "chain is valid: no violations"
    lines = [f"{len(violations)} violation(s):"]
    for v in violations:
        lines.append(f"  [{v.kind.value}] {v.pretty()}")
    return "\n".join(lines)


def violations_to_json(violations: Sequence[Violation], **extra: Any) -> str:
    """JSON document ``{"ok": ..., "violations": [...]}`` plus *extra* keys."""
    doc = dict(extra)
    doc["ok"] = not violations
    doc["violations"] = [v.to_dict() for v in violations]
    return json.dumps(doc, indent=2)


def _state_to_sexp(state: Any) -> Any:
    if isinstance(state, tuple):
        return [_state_to_sexp(s) for s in state]
    if isinstance(state, str) and is_symbol_text(state):
        return Symbol(state)
    return _value_to_sexp(state)


def violations_to_sexp(violations: Sequence[Violation]) -> str:
    """``(violations (KIND STATE (FIELD VALUE)...)...)``, one field per line."""
    if not violations:
        return "(violations)"
    lines: List[str] = ["(violations"]
    for v in violations:
        d = v.to_dict()
        kind = d.pop("kind")
        del d["state"]
        head = f"  ({kind} {dumps(_state_to_sexp(v.state))}"
        if not d:
            lines.append(head + ")")
            continue
        lines.append(head)
        for key, value in d.items():
            lines.append(f"    ({key.replace('_', '-')} {dumps(_value_to_sexp(value))})")
        lines[-1] += ")"
    lines[-1] += ")"
    return "\n".join(lines)


__all__ = [
    "render_counterexample",
    "counterexample_to_sexp",
    "dumps_counterexample",
    "render_violations",
    "violations_to_json",
    "violations_to_sexp",
]
