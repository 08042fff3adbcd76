# tests/test_render.py
"""Counterexample and violation renderers."""

import json

from mcsl.render import (
    counterexample_to_sexp,
    dumps_counterexample,
    render_counterexample,
    render_violations,
    violations_to_json,
    violations_to_sexp,
)
from mcsl.sexp import Symbol, loads_all
from statemachine_core.evaluator import evaluate
from statemachine_core.logic import Boolean, Bot, Top, elem, eq, lt
from statemachine_core.markov import STOP
from statemachine_core.validation import (
    Deadlock,
    NegativeWeight,
    WeightSumMismatch,
)


def _ce(formula):
    return evaluate(formula).counterexample


class TestCounterexampleText:

    def test_with_labels(self):
        text = render_counterexample(_ce(eq(1, 1) & (lt(3, 2) // "ord")))
        assert text == (
            "labels: ord\n"
            "and: right side failed\n"
            "  label: ord\n"
            "    expected: 3 >= 2"
        )

    def test_without_labels(self):
        assert render_counterexample(_ce(Bot())) == "bottom"


class TestCounterexampleSexp:

    def test_and(self):
        assert dumps_counterexample(_ce(eq(1, 1) & lt(3, 2))) == (
            "(snd (expected (>= 3 2)))")
        assert dumps_counterexample(_ce(Bot() & Top())) == "(fst (bottom))"

    def test_or(self):
        assert dumps_counterexample(_ce(Bot() | Boolean(False))) == (
            "(either (bottom) (boolean))")

    def test_implies_and_not(self):
        assert dumps_counterexample(_ce(Top() >> Bot())) == "(implies (bottom))"
        assert dumps_counterexample(_ce(~Top())) == "(not (bottom))"

    def test_membership(self):
        assert dumps_counterexample(_ce(elem(3, [1, 2]))) == (
            "(expected (not-in 3 (1 2)))")

    def test_annotation_and_strings(self):
        text = dumps_counterexample(_ce(eq("a", "b") // "names"))
        assert text == '(annotate "names" (expected (!= "a" "b")))'

    def test_reads_back(self):
        form = counterexample_to_sexp(_ce(lt(3, 2) // "x"))
        assert loads_all(dumps_counterexample(_ce(lt(3, 2) // "x"))) == [form]
        assert form[0] == Symbol("annotate")


class TestViolations:

    VIOLATIONS = [WeightSumMismatch("S0", 90), Deadlock(("one", "zero"))]

    def test_text(self):
        assert render_violations([]) == "chain is valid: no violations"
        assert render_violations(self.VIOLATIONS) == (
            "2 violation(s):\n"
            "  [weight-sum-mismatch] weights at 'S0' sum to 90, expected 100\n"
            "  [deadlock] deadlock: no positive-weight path from "
            "('one', 'zero') to Stop"
        )

    def test_json(self):
        doc = json.loads(violations_to_json(self.VIOLATIONS, chain="c"))
        assert doc["chain"] == "c"
        assert doc["ok"] is False
        assert doc["violations"][1] == {"kind": "deadlock",
                                        "state": ["one", "zero"]}

    def test_json_valid(self):
        assert json.loads(violations_to_json([])) == {"ok": True,
                                                      "violations": []}

    def test_sexp(self):
        assert violations_to_sexp(self.VIOLATIONS) == (
            "(violations\n"
            "  (weight-sum-mismatch S0\n"
            "    (actual-sum 90)\n"
            "    (expected-sum 100))\n"
            "  (deadlock (one zero)))"
        )

    def test_sexp_negative_weight(self):
        text = violations_to_sexp([NegativeWeight("s", STOP, -10)])
        assert text == (
            "(violations\n"
            "  (negative-weight s\n"
            "    (alternative \"Stop\")\n"
            "    (weight -10)))"
        )

    def test_sexp_empty(self):
        assert violations_to_sexp([]) == "(violations)"
