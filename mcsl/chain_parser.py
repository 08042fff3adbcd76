"""
mcsl/chain_parser.py — MCSL chain files
=======================================

A chain file declares one Markov chain as an S-expression::

    ; process registry usage model
    (chain registry
      (initial (zero zero))
      (state (zero zero)
        (90 "Spawn" (one zero))
        (10 "BadKill" (zero zero)))
      (state (one zero)
        (100 stop)))

Forms
-----
``(chain NAME CLAUSE...)``
    The only top-level form.  Clauses are ``initial`` (exactly one) and
    ``state`` (any number, each state at most once).
``(initial STATE)``
    The state generation starts from.
``(state STATE ALTERNATIVE...)``
    The ordered weighted alternatives of one state.
``(WEIGHT stop)`` / ``(WEIGHT LABEL NEXT-STATE)``
    ``Stop`` and ``Continue`` alternatives.  *WEIGHT* is an integer;
    *LABEL* a string or symbol.

State terms map to Python values: symbols and strings to ``str``, numbers
to ``int``/``float``, forms to ``tuple`` (recursively).

Weights are not checked here; run
:func:`statemachine_core.validation.validate` on the result of
:meth:`ChainSpec.to_markov`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from statemachine_core.markov import STOP, Continue, Markov

from .errors import ChainParseError, ChainSemanticError, ErrorCode, SourceSpan
from .sexp import (
    SexpSyntaxError,
    SList,
    Symbol,
    dumps,
    is_symbol,
    is_symbol_text,
    loads_all,
    symbol_name,
)

logger = logging.getLogger(__name__)

STOP_KEYWORD = "stop"


# ===================================================================
#  PART 1 — CHAIN DESCRIPTION
# ===================================================================

@dataclass(frozen=True)
class AlternativeSpec:
    """One weighted alternative; *label* and *target* are ``None`` for stop."""
    weight: int
    label: Optional[str] = None
    target: Any = None

    @property
    def is_stop(self) -> bool:
        return self.label is None


@dataclass
class ChainSpec:
    """A parsed chain file."""
    name: str
    initial: Any
    states: Dict[Any, Tuple[AlternativeSpec, ...]] = field(default_factory=dict)
    filename: Optional[str] = field(default=None, compare=False)
    spans: Dict[Any, SourceSpan] = field(default_factory=dict, compare=False,
                                         repr=False)

    def labels(self) -> List[str]:
        """Distinct transition labels in declaration order."""
        seen: List[str] = []
        for alternatives in self.states.values():
            for alt in alternatives:
                if alt.label is not None and alt.label not in seen:
                    seen.append(alt.label)
        return seen

    def to_markov(
        self,
        generators: Optional[Mapping[str, Callable[[Any], Any]]] = None,
    ) -> Markov:
        """Build the :class:`Markov` chain.

        *generators* maps labels to ``callable(model)``.  A label without a
        generator produces its own label as the action.
        """
        generators = generators or {}
        table: Dict[Any, List[Tuple[int, Any]]] = {}
        for state, alternatives in self.states.items():
            row: List[Tuple[int, Any]] = []
            for alt in alternatives:
                if alt.is_stop:
                    row.append((alt.weight, STOP))
                else:
                    gen = generators.get(alt.label) or _label_generator(alt.label)
                    row.append((alt.weight, Continue(alt.label, gen, alt.target)))
            table[state] = row
        return Markov(table)


def _label_generator(label: str) -> Callable[[Any], str]:
    def generate(model: Any) -> str:
        return label
    generate.__name__ = f"generate_{label}"
    return generate


# ===================================================================
#  PART 2 — PARSER
# ===================================================================

class _Reader:
    """Checks the shape of parsed forms and reports errors with positions."""

    def __init__(self, text: str, filename: Optional[str]):
        self.text = text
        self.filename = filename or ""

    def span(self, form: Any) -> Optional[SourceSpan]:
        if isinstance(form, SList):
            return SourceSpan.from_offset(self.text, form.offset, self.filename)
        return None

    def fail(self, message: str, form: Any = None, *,
             code: ErrorCode = ErrorCode.CHAIN_SHAPE) -> ChainParseError:
        return ChainParseError(message, code=code, span=self.span(form))

    def state_term(self, s: Any, context: Any) -> Any:
        if isinstance(s, list):
            return tuple(self.state_term(x, context) for x in s)
        name = symbol_name(s)
        if name is not None:
            return name
        if isinstance(s, bool) or not isinstance(s, (str, int, float)):
            raise self.fail(f"invalid state term {s!r}", context)
        return str(s) if isinstance(s, str) else s

    def alternative(self, s: Any, owner: Any) -> AlternativeSpec:
        if not isinstance(s, list) or len(s) not in (2, 3):
            raise self.fail(
                "alternative must be (WEIGHT stop) or (WEIGHT LABEL NEXT-STATE), "
                f"got {dumps(s)}", s if isinstance(s, SList) else owner)
        weight = s[0]
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise self.fail(f"weight must be an integer, got {dumps(weight)}", s)
        if len(s) == 2:
            if not is_symbol(s[1], STOP_KEYWORD):
                raise self.fail(f"expected 'stop', got {dumps(s[1])}", s)
            return AlternativeSpec(weight)
        label = symbol_name(s[1])
        if label is None and isinstance(s[1], str):
            label = str(s[1])
        if label is None:
            raise self.fail(f"label must be a string or symbol, got {dumps(s[1])}", s)
        return AlternativeSpec(weight, label, self.state_term(s[2], s))

    def chain(self, form: Any) -> ChainSpec:
        if not (isinstance(form, list) and form and is_symbol(form[0], "chain")):
            raise self.fail("expected (chain NAME ...)", form)
        name = symbol_name(form[1]) if len(form) > 1 else None
        if name is None and len(form) > 1 and isinstance(form[1], str):
            name = str(form[1])
        if name is None:
            raise self.fail("chain needs a name", form)

        initial: Any = None
        have_initial = False
        states: Dict[Any, Tuple[AlternativeSpec, ...]] = {}
        spans: Dict[Any, SourceSpan] = {}

        for clause in form[2:]:
            head = symbol_name(clause[0]) if isinstance(clause, list) and clause else None
            if head is None:
                raise self.fail(f"expected a clause, got {dumps(clause)}",
                                clause if isinstance(clause, SList) else form)
            if head == "initial":
                if len(clause) != 2:
                    raise self.fail("expected (initial STATE)", clause)
                if have_initial:
                    raise ChainSemanticError("initial state declared twice",
                                             code=ErrorCode.DUPLICATE_INITIAL,
                                             span=self.span(clause))
                initial = self.state_term(clause[1], clause)
                have_initial = True
            elif head == "state":
                if len(clause) < 2:
                    raise self.fail("expected (state STATE ALTERNATIVE...)", clause)
                state = self.state_term(clause[1], clause)
                if state in states:
                    raise ChainSemanticError(
                        f"state {dumps(clause[1])} declared twice",
                        code=ErrorCode.DUPLICATE_STATE, span=self.span(clause),
                        hint=f"first declared at {spans[state]}",
                    )
                states[state] = tuple(self.alternative(a, clause)
                                      for a in clause[2:])
                spans[state] = self.span(clause)
            else:
                raise self.fail(f"unknown clause ({head} ...)", clause)

        if not have_initial:
            raise ChainSemanticError(f"chain {name!r} has no (initial STATE)",
                                     code=ErrorCode.MISSING_INITIAL,
                                     span=self.span(form))
        logger.debug("parsed chain %s: %d state(s), initial %r",
                     name, len(states), initial)
        return ChainSpec(name, initial, states, self.filename or None, spans)


def parse_chain(text: str, *, filename: Optional[str] = None) -> ChainSpec:
    """Parse chain file *text* into a :class:`ChainSpec`."""
    reader = _Reader(text, filename)
    try:
        forms = loads_all(text)
    except SexpSyntaxError as e:
        span = SourceSpan.from_offset(text, e.offset, filename or "")
        raise ChainParseError(str(e),
                              code=ErrorCode.CHAIN_SYNTAX, span=span) from e
    if len(forms) != 1:
        raise ChainParseError(
            f"expected exactly one (chain ...) form, found {len(forms)}",
            code=ErrorCode.CHAIN_SHAPE,
            span=reader.span(forms[1]) if len(forms) > 1 else None,
        )
    return reader.chain(forms[0])


def parse_chain_file(path) -> ChainSpec:
    """Read and parse a chain file."""
    p = Path(path)
    return parse_chain(p.read_text(encoding="utf-8"), filename=str(p))


# ===================================================================
#  PART 3 — WRITER
# ===================================================================

def _term_to_sexp(term: Any) -> Any:
    if isinstance(term, tuple):
        return [_term_to_sexp(x) for x in term]
    if isinstance(term, str) and is_symbol_text(term):
        return Symbol(term)
    return term


def dump_chain(spec: ChainSpec) -> str:
    """Canonical text of *spec*; parsing it back gives an equal spec."""
    name = Symbol(spec.name) if is_symbol_text(spec.name) else spec.name
    lines = [f"(chain {dumps(name)}",
             f"  (initial {dumps(_term_to_sexp(spec.initial))})"]
    for state, alternatives in spec.states.items():
        lines.append(f"  (state {dumps(_term_to_sexp(state))}")
        for alt in alternatives:
            if alt.is_stop:
                lines.append(f"    ({alt.weight} stop)")
            else:
                lines.append(f"    ({alt.weight} {dumps(alt.label)} "
                             f"{dumps(_term_to_sexp(alt.target))})")
        lines[-1] += ")"
    lines[-1] += ")"
    return "\n".join(lines) + "\n"


__all__ = [
    "AlternativeSpec",
    "ChainSpec",
    "parse_chain",
    "parse_chain_file",
    "dump_chain",
]
