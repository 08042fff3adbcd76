"""
mcsl/formula.py — Infix formula language
========================================

A text syntax for :mod:`statemachine_core.logic` formulas, used by the
``mcsl check`` command and by tests that prefer reading conditions over
building them.

Syntax, loosest binding first::

    F => G                  implication (right-associative)
    F or G     F || G       disjunction
    F and G    F && G       conjunction
    not F      !F           negation
    F // "label"            annotation
    (F)
    forall x in TERM: F     bounded quantifiers over a finite TERM
    exists x in TERM: F
    T == U  T != U  T < U  T <= U  T > U  T >= U  T in U  T not in U
    top  bottom  true  false
    name                    a name bound to a bool (or to a Logic formula)

Terms are integers, floats, double-quoted strings, ``true``/``false``,
lists ``[T, ...]`` and names bound in the environment.

Parsing and compiling are separate steps: :func:`parse_formula` returns a
:class:`FormulaNode` tree independent of any environment, and
:meth:`FormulaNode.to_logic` resolves names against one.

>>> compile_formula("x < 3 and x in [1, 2]", {"x": 2}).pretty()
'((2 < 3) ∧ (2 in [1, 2]))'
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from statemachine_core.logic import (
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
from statemachine_core.predicate import Predicate, PredicateKind
from statemachine_core.quantifiers import exists, forall

from .errors import ErrorCode, FormulaNameError, FormulaParseError, SourceSpan

logger = logging.getLogger(__name__)

Env = Mapping[str, Any]

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def unescape(body: str) -> str:
    """Resolve backslash escapes in the body of a string literal."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


# ===================================================================
#  PART 1 — FORMULA GRAMMAR (Parsimonious PEG)
# ===================================================================

FORMULA_GRAMMAR = Grammar(r'''
    formula      = _ implication _
    term_text    = _ term _

    # Connectives
    implication  = disjunction implies_tail?
    implies_tail = _ "=>" _ implication
    disjunction  = conjunction or_tail*
    or_tail      = _ or_op _ conjunction
    conjunction  = negation and_tail*
    and_tail     = _ and_op _ negation
    negation     = negated / annotated
    negated      = not_op _ negation
    annotated    = primary label_tail*
    label_tail   = _ "//" _ string

    # Atoms
    primary      = quantified / group / comparison / constant / bare_name
    group        = "(" _ implication _ ")"
    quantified   = quantifier _ identifier _ in_kw _ term _ ":" _ implication
    comparison   = term _ comp_op _ term
    comp_op      = "==" / "!=" / "<=" / ">=" / "<" / ">" / not_in / in_kw
    constant     = ~r"(top|bottom|true|false)\b"
    bare_name    = identifier

    # Terms
    term         = list_term / number / string / bool_lit / name_term
    list_term    = "[" _ term_items? _ "]"
    term_items   = term more_items*
    more_items   = _ "," _ term
    bool_lit     = ~r"(true|false)\b"
    name_term    = identifier
    number       = ~r"[-+]?[0-9]+(\.[0-9]+)?([eE][-+]?[0-9]+)?"
    string       = ~r'"(?:[^"\\]|\\.)*"'

    # Lexical
    identifier   = !keyword ~r"[A-Za-z_][A-Za-z0-9_]*"
    keyword      = ~r"(and|or|not|in|forall|exists|top|bottom|true|false)\b"
    quantifier   = ~r"(forall|exists)\b"
    or_op        = ~r"or\b" / "||"
    and_op       = ~r"and\b" / "&&"
    not_op       = ~r"not\b" / ~r"!(?!=)"
    not_in       = ~r"not\s+in\b"
    in_kw        = ~r"in\b"
    _            = ~r"\s*"
''')


# ===================================================================
#  PART 2 — FORMULA AST
# ===================================================================

class Term(ABC):
    @abstractmethod
    def resolve(self, env: Env) -> Any:
        ...


@dataclass(frozen=True)
class Lit(Term):
    value: Any

    def resolve(self, env):
        return self.value


@dataclass(frozen=True)
class NameTerm(Term):
    name: str

    def resolve(self, env):
        if self.name not in env:
            raise FormulaNameError(self.name)
        return env[self.name]


@dataclass(frozen=True)
class ListTerm(Term):
    items: Tuple[Term, ...]

    def resolve(self, env):
        return [item.resolve(env) for item in self.items]


class FormulaNode(ABC):
    """Unresolved formula syntax tree."""

    @abstractmethod
    def to_logic(self, env: Env) -> Logic:
        """Resolve names against *env* and build the formula."""
        ...


_CONSTANTS = {
    "top": Top(),
    "bottom": Bot(),
    "true": Boolean(True),
    "false": Boolean(False),
}


@dataclass(frozen=True)
class Constant(FormulaNode):
    name: str

    def to_logic(self, env):
        return _CONSTANTS[self.name]


@dataclass(frozen=True)
class BareName(FormulaNode):
    name: str

    def to_logic(self, env):
        if self.name not in env:
            raise FormulaNameError(self.name)
        value = env[self.name]
        if isinstance(value, Logic):
            return value
        if isinstance(value, bool):
            return Boolean(value)
        raise FormulaParseError(
            f"{self.name!r} is bound to a {type(value).__name__}, "
            "not a bool; compare it to something",
            code=ErrorCode.FORMULA_SYNTAX,
        )


@dataclass(frozen=True)
class Compare(FormulaNode):
    kind: PredicateKind
    lhs: Term
    rhs: Term

    def to_logic(self, env):
        lhs, rhs = self.lhs.resolve(env), self.rhs.resolve(env)
        if self.kind.is_membership and not isinstance(rhs, Iterable):
            raise FormulaParseError(
                f"right side of {self.kind.value!r} must be a list or string, "
                f"got {type(rhs).__name__} {rhs!r}",
                code=ErrorCode.FORMULA_SYNTAX,
            )
        return Pred(Predicate(self.kind, lhs, rhs))


@dataclass(frozen=True)
class Connective(FormulaNode):
    op: str                # "and", "or", "=>"
    lhs: FormulaNode
    rhs: FormulaNode

    def to_logic(self, env):
        lhs, rhs = self.lhs.to_logic(env), self.rhs.to_logic(env)
        if self.op == "and":
            return And(lhs, rhs)
        if self.op == "or":
            return Or(lhs, rhs)
        return Implies(lhs, rhs)


@dataclass(frozen=True)
class Negation(FormulaNode):
    inner: FormulaNode

    def to_logic(self, env):
        return Not(self.inner.to_logic(env))


@dataclass(frozen=True)
class Labelled(FormulaNode):
    inner: FormulaNode
    label: str

    def to_logic(self, env):
        return Annotate(self.label, self.inner.to_logic(env))


@dataclass(frozen=True)
class Quantified(FormulaNode):
    quantifier: str        # "forall" or "exists"
    var: str
    domain: Term
    body: FormulaNode

    def to_logic(self, env):
        xs = self.domain.resolve(env)
        fold = forall if self.quantifier == "forall" else exists
        return fold(xs, lambda x: self.body.to_logic({**env, self.var: x}))


# ===================================================================
#  PART 3 — AST VISITOR (Parse Tree → AST)
# ===================================================================

def _many(visited: Any) -> list:
    return visited if isinstance(visited, list) else []


class FormulaBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into :class:`FormulaNode`."""

    unwrapped_exceptions = (FormulaParseError,)

    def generic_visit(self, node, visited_children):
        return visited_children or node

    def visit_formula(self, node, visited_children):
        _, formula, _ = visited_children
        return formula

    def visit_term_text(self, node, visited_children):
        _, term, _ = visited_children
        return term

    # Connectives

    def visit_implication(self, node, visited_children):
        lhs, tail = visited_children
        tail = _many(tail)
        return Connective("=>", lhs, tail[0]) if tail else lhs

    def visit_implies_tail(self, node, visited_children):
        return visited_children[-1]

    def visit_disjunction(self, node, visited_children):
        result, rest = visited_children
        for rhs in _many(rest):
            result = Connective("or", result, rhs)
        return result

    def visit_or_tail(self, node, visited_children):
        return visited_children[-1]

    def visit_conjunction(self, node, visited_children):
        result, rest = visited_children
        for rhs in _many(rest):
            result = Connective("and", result, rhs)
        return result

    def visit_and_tail(self, node, visited_children):
        return visited_children[-1]

    def visit_negation(self, node, visited_children):
        return visited_children[0]

    def visit_negated(self, node, visited_children):
        _, _, inner = visited_children
        return Negation(inner)

    def visit_annotated(self, node, visited_children):
        result, labels = visited_children
        for label in _many(labels):
            result = Labelled(result, label)
        return result

    def visit_label_tail(self, node, visited_children):
        return visited_children[-1].value

    # Atoms

    # ``bare_name = identifier`` is the identifier rule itself to
    # Parsimonious, so a name reaches here as the plain string.
    def visit_primary(self, node, visited_children):
        child = visited_children[0]
        return BareName(child) if isinstance(child, str) else child

    def visit_group(self, node, visited_children):
        _, _, inner, _, _ = visited_children
        return inner

    def visit_quantified(self, node, visited_children):
        (quantifier, _, var, _, _, _, domain, _, _, _, body) = visited_children
        return Quantified(quantifier, var, domain, body)

    def visit_quantifier(self, node, visited_children):
        return node.text

    def visit_comparison(self, node, visited_children):
        lhs, _, kind, _, rhs = visited_children
        return Compare(kind, lhs, rhs)

    def visit_comp_op(self, node, visited_children):
        return PredicateKind(" ".join(node.text.split()))

    def visit_constant(self, node, visited_children):
        return Constant(node.text)

    # Terms

    def visit_term(self, node, visited_children):
        child = visited_children[0]
        return NameTerm(child) if isinstance(child, str) else child

    def visit_list_term(self, node, visited_children):
        _, _, items, _, _ = visited_children
        items = _many(items)
        return ListTerm(tuple(items[0]) if items else ())

    def visit_term_items(self, node, visited_children):
        first, rest = visited_children
        return [first] + _many(rest)

    def visit_more_items(self, node, visited_children):
        return visited_children[-1]

    def visit_bool_lit(self, node, visited_children):
        return Lit(node.text == "true")

    def visit_number(self, node, visited_children):
        text = node.text
        if any(c in text for c in ".eE"):
            return Lit(float(text))
        return Lit(int(text))

    def visit_string(self, node, visited_children):
        return Lit(unescape(node.text[1:-1]))

    def visit_identifier(self, node, visited_children):
        return node.text.strip()


def _parse(rule: str, text: str) -> Any:
    try:
        tree = FORMULA_GRAMMAR[rule].parse(text)
    except ParseError as e:
        pos = getattr(e, "pos", 0) or 0
        near = text[pos:pos + 12] or "end of input"
        raise FormulaParseError(
            f"cannot parse formula near {near!r}",
            span=SourceSpan.from_offset(text, pos, "<formula>"),
        ) from e
    return FormulaBuilder().visit(tree)


def parse_formula(text: str) -> FormulaNode:
    """Parse *text* into a :class:`FormulaNode` tree."""
    return _parse("formula", text)


def compile_formula(text: str, env: Optional[Env] = None) -> Logic:
    """Parse *text* and build the formula with names bound from *env*."""
    logic = parse_formula(text).to_logic(dict(env or {}))
    logger.debug("compiled %r to %s", text, logic.pretty())
    return logic


def parse_term(text: str) -> Any:
    """Parse a single term into a Python value.

    Bare words read as strings, so ``--var state=zero`` binds ``"zero"``.
    """
    term = _parse("term_text", text)
    if isinstance(term, NameTerm):
        return term.name
    return term.resolve({})


__all__ = [
    "FORMULA_GRAMMAR",
    "Term",
    "Lit",
    "NameTerm",
    "ListTerm",
    "FormulaNode",
    "Constant",
    "BareName",
    "Compare",
    "Connective",
    "Negation",
    "Labelled",
    "Quantified",
    "FormulaBuilder",
    "parse_formula",
    "compile_formula",
    "parse_term",
]
