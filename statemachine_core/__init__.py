"""
statemachine_core — Logic and command generation for model-based testing
========================================================================

The pure core of a state-machine property-testing engine: a small logic for
writing pre/postconditions whose failures explain themselves, and weighted
Markov chains that drive command generation over abstract coverage states.

Core modules
------------
predicate
    Atomic binary predicates and their duals.
logic
    Propositional formulas with strong negation and builder operators.
counterexample
    Witness trees describing why a formula is false.
evaluator
    ``evaluate`` and ``boolean``.
quantifiers
    Bounded ``forall`` / ``exists`` over finite sequences.
markov
    Weighted chains and the roulette walk with injected randomness.
validation
    Stochastic and liveness checks for chains.
gensym
    Fresh symbolic references for generated commands.

Addon modules
-------------
export
    Table and Graphviz views of a chain.

Quick start
-----------
>>> from statemachine_core import eq, lt, evaluate
>>> v = evaluate(eq(1, 1) & lt(3, 2))
>>> v.is_true
False
>>> print(v.counterexample.pretty())
and: right side failed
  expected: 3 >= 2
"""

from __future__ import annotations

import importlib
import logging
import sys
import warnings
from typing import List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__all__: List[str] = []          # populated incrementally below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
#
#   CORE  — always imported; failure is fatal
#   ADDON — failure only warns (package still usable)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "predicate": [
        "PredicateKind",
        "Predicate",
        "dual",
    ],
    "logic": [
        "Logic",
        "Bot",
        "Top",
        "And",
        "Or",
        "Implies",
        "Not",
        "Pred",
        "Boolean",
        "Annotate",
        "strong_negate",
        "eq",
        "ne",
        "lt",
        "le",
        "gt",
        "ge",
        "elem",
        "not_elem",
        "annotate",
    ],
    "counterexample": [
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
    ],
    "evaluator": [
        "evaluate",
        "evaluate_predicate",
        "boolean",
    ],
    "quantifiers": [
        "forall",
        "exists",
    ],
    "markov": [
        "TOTAL_WEIGHT",
        "Stop",
        "STOP",
        "Continue",
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
    ],
    "validation": [
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
    ],
    "gensym": [
        "Var",
        "Symbolic",
        "Counter",
        "new_counter",
        "gen_sym",
        "GenSym",
        "run_gen_sym",
    ],
}

_ADDON_MODULES = {
    "export": [
        "TableRow",
        "to_table",
        "to_dot_source",
        "to_dot",
    ],
}


def _import_names(
    module_rel_name: str,
    names: List[str],
    *,
    fatal: bool = True,
) -> None:
    """Import *names* from a submodule and bind them in the package namespace.

    If *fatal* is false a failed import only warns and the names are skipped.
    """
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        if fatal:
            raise ImportError(
                f"statemachine_core: required submodule '{module_rel_name}' "
                f"failed to import: {exc}"
            ) from exc
        warnings.warn(
            f"statemachine_core: optional submodule '{module_rel_name}' "
            f"could not be imported ({exc}); related symbols will be unavailable.",
            ImportWarning,
            stacklevel=2,
        )
        _log.debug("Skipped optional module %s: %s", module_rel_name, exc)
        return

    current_module = sys.modules[__name__]
    for name in names:
        if not hasattr(mod, name):
            msg = f"statemachine_core.{module_rel_name} does not export '{name}'"
            if fatal:
                raise AttributeError(msg)
            _log.warning(msg)
            continue
        setattr(current_module, name, getattr(mod, name))
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names, fatal=True)

for _mod, _names in _ADDON_MODULES.items():
    _import_names(_mod, _names, fatal=False)

del _mod, _names


__all__ += ["__version__"]
