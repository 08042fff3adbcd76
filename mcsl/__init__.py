"""mcsl — Markov Chain Specification Language.

This package provides file formats and command-line tools on top of
:mod:`statemachine_core`: chain files written as S-expressions, an infix
formula language, and renderers for counterexamples and chain violations.

Submodules
----------
errors
    Structured error codes (``MCSL-XXXX``), ``SourceSpan`` and the
    ``MCSLError`` hierarchy.

sexp
    sexpdata reader with comments and form offsets; writer.

chain_parser
    ``(chain ...)`` files → ``ChainSpec`` → ``Markov``; ``dump_chain``.

formula
    Infix formula grammar compiled to ``statemachine_core.logic``.

render
    Text, JSON and S-expression output for counterexamples and violations.

config
    ``WalkConfig`` and generator-table loading.

main
    CLI entry-point with subcommands: ``validate``, ``walk``, ``table``,
    ``dot``, ``dump-sexp``, ``check``.

Usage
-----
Command-line::

    python -m mcsl validate registry.mcsl
    python -m mcsl walk registry.mcsl --seed 7 --count 5
    python -m mcsl --help

Programmatic::

    from mcsl.chain_parser import parse_chain_file
    from statemachine_core.validation import validate

    spec = parse_chain_file("registry.mcsl")
    violations = validate(spec.to_markov(), spec.initial)

"""

from __future__ import annotations

from statemachine_core import __version__

__all__: list[str] = [
    "__version__",
    "errors",
    "sexp",
    "chain_parser",
    "formula",
    "render",
    "config",
    "main",
]
