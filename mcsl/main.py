#!/usr/bin/env python3
"""mcsl/main.py — CLI entry-point for the MCSL tool-suite.

Usage examples
--------------
    # Check a chain file for weight and liveness problems
    mcsl validate registry.mcsl

    # Sample five command sequences, reproducibly
    mcsl walk registry.mcsl --seed 7 --count 5 --stats

    # Use real generators from a Python module exposing GENERATORS
    mcsl walk registry.mcsl --generators myproject.registry_gens

    # Show the transition table / Graphviz source
    mcsl table registry.mcsl
    mcsl dot registry.mcsl -o registry.dot

    # Print the canonical form of a chain file
    mcsl dump-sexp registry.mcsl

    # Evaluate a formula and explain why it is false
    mcsl check 'x < 3 and x in [1, 2] // "range"' --var x=5

Exit codes
----------
    0   Success (valid chain, true formula).
    1   Bad input: malformed chain file or formula.
    2   Infrastructure failure (missing file, missing package, bad
        generator module).
    3   Violation: invalid chain or false formula.

The module doubles as ``python -m mcsl`` via the companion
``mcsl/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import itertools
import logging
import os
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, TextIO

from statemachine_core import __version__
from statemachine_core.evaluator import evaluate
from statemachine_core.export import format_table, state_label, to_dot, to_dot_source, to_table
from statemachine_core.markov import iter_walk, seeded_draw, tabulate
from statemachine_core.validation import validate, validate_report

from .chain_parser import ChainSpec, dump_chain, parse_chain_file
from .config import WalkConfig, load_generators
from .errors import FormulaParseError, GeneratorLoadError, MCSLError
from .formula import compile_formula, parse_term
from .render import (
    dumps_counterexample,
    render_counterexample,
    render_violations,
    violations_to_json,
    violations_to_sexp,
)

_log = logging.getLogger("mcsl")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2
EXIT_VIOLATION: int = 3

_LOGGER_NAMES = ("mcsl", "statemachine_core")


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``mcsl`` and ``statemachine_core`` loggers.

    0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    handler._mcsl_cli = True  # type: ignore[attr-defined]
    for name in _LOGGER_NAMES:
        log = logging.getLogger(name)
        for old in [h for h in log.handlers if getattr(h, "_mcsl_cli", False)]:
            log.removeHandler(old)
        log.setLevel(level)
        log.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _open_output(dest: Optional[str]) -> TextIO:
    """``None`` or ``"-"`` → ``sys.stdout``; otherwise open *dest* for writing."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _load_chain(raw: str) -> ChainSpec:
    path = _resolve_path(raw, "chain file")
    _log.info("Parsing chain file: %s", path)
    try:
        return parse_chain_file(path)
    except OSError as exc:
        _log.error("Cannot read chain file: %s", exc)
        raise SystemExit(EXIT_INFRA)


# ===========================================================================
# Sub-command implementations
# ===========================================================================

# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------

def cmd_validate(args: argparse.Namespace) -> int:
    """Run the stochastic and liveness checks on a chain file."""
    spec = _load_chain(args.chain)
    chain = spec.to_markov()
    domain = list(spec.states) if args.all_states else None
    report = validate_report(chain, spec.initial, domain=domain)

    out = sys.stdout
    if args.format == "json":
        out.write(violations_to_json(
            report.violations,
            chain=spec.name,
            states_checked=len(report.states_checked),
        ) + "\n")
    elif args.format == "sexp":
        out.write(violations_to_sexp(report.violations) + "\n")
    else:
        out.write(f"chain {spec.name}: {len(report.states_checked)} "
                  f"state(s) checked\n")
        out.write(render_violations(report.violations) + "\n")

    return EXIT_OK if report.ok else EXIT_VIOLATION


# ---------------------------------------------------------------------------
# walk
# ---------------------------------------------------------------------------

def cmd_walk(args: argparse.Namespace) -> int:
    """Sample command sequences from a chain file."""
    config = WalkConfig(
        seed=args.seed,
        count=args.count,
        max_steps=args.max_steps,
        validate_first=not args.no_validate,
    )
    for warning in config.validate():
        _log.warning("walk config: %s", warning)
    if config.count <= 0 or config.max_steps <= 0:
        return EXIT_ERROR

    spec = _load_chain(args.chain)
    generators = load_generators(args.generators) if args.generators else None
    chain = spec.to_markov(generators)

    if config.validate_first:
        violations = validate(chain, spec.initial)
        if violations:
            sys.stderr.write(render_violations(violations) + "\n")
            _log.error("Refusing to walk an invalid chain "
                       "(use --no-validate to force).")
            return EXIT_VIOLATION

    draw = seeded_draw(config.seed)
    out = sys.stdout
    taken = []
    for i in range(config.count):
        steps = list(itertools.islice(
            iter_walk(chain, spec.initial, None, draw), config.max_steps))
        if len(steps) == config.max_steps:
            _log.warning("walk %d reached --max-steps (%d) and was cut short",
                         i + 1, config.max_steps)
        taken.extend(steps)
        actions = " ".join(str(step.action) for step in steps) or "(empty)"
        out.write(f"{i + 1}: {actions}\n")

    if args.stats:
        out.write("\ntransition counts:\n")
        counts = tabulate(taken)
        for (source, label, target), n in sorted(counts.items(),
                                                 key=lambda kv: -kv[1]):
            out.write(f"{n:6d}  {state_label(source)} --[{label}]--> "
                      f"{state_label(target)}\n")
    return EXIT_OK


# ---------------------------------------------------------------------------
# table / dot / dump-sexp
# ---------------------------------------------------------------------------

def cmd_table(args: argparse.Namespace) -> int:
    """Print the transition table of a chain file."""
    spec = _load_chain(args.chain)
    rows = to_table(spec.to_markov(), spec.initial, domain=list(spec.states))
    sys.stdout.write(format_table(rows) + "\n")
    return EXIT_OK


def cmd_dot(args: argparse.Namespace) -> int:
    """Write Graphviz DOT source, or render it with ``--render``."""
    spec = _load_chain(args.chain)
    chain = spec.to_markov()
    domain = list(spec.states)

    if args.render:
        if not args.output or args.output == "-":
            _log.error("--render needs an output file (-o FILE).")
            return EXIT_ERROR
        try:
            graph = to_dot(chain, spec.initial, name=spec.name, domain=domain)
            data = graph.pipe(format=args.render)
        except ImportError as exc:
            _log.error("%s", exc)
            return EXIT_INFRA
        except Exception as exc:
            _log.error("Graphviz rendering failed: %s", exc)
            return EXIT_INFRA
        Path(args.output).expanduser().write_bytes(data)
        return EXIT_OK

    out = _open_output(args.output)
    try:
        out.write(to_dot_source(chain, spec.initial, name=spec.name,
                                domain=domain) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


def cmd_dump_sexp(args: argparse.Namespace) -> int:
    """Print the canonical S-expression form of a chain file."""
    spec = _load_chain(args.chain)
    sys.stdout.write(dump_chain(spec))
    return EXIT_OK


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------

def _parse_bindings(raw: Sequence[str]) -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    for item in raw:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise FormulaParseError(f"--var expects NAME=VALUE, got {item!r}")
        env[name.strip()] = parse_term(value)
    return env


def cmd_check(args: argparse.Namespace) -> int:
    """Evaluate a formula and print its counterexample if it is false."""
    env = _parse_bindings(args.var or [])
    logic = compile_formula(args.formula, env)
    try:
        value = evaluate(logic)
    except TypeError as exc:
        _log.error("Cannot evaluate %s: %s", logic.pretty(), exc)
        return EXIT_ERROR

    out = sys.stdout
    if value.is_true:
        out.write("true\n")
        return EXIT_OK
    if args.format == "sexp":
        out.write(dumps_counterexample(value.counterexample) + "\n")
    else:
        out.write("false\n")
        out.write(render_counterexample(value.counterexample) + "\n")
    return EXIT_VIOLATION


# ===========================================================================
# Argument parser construction
# ===========================================================================

def build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    parser = argparse.ArgumentParser(
        prog="mcsl",
        description=(
            "MCSL — Markov chain specification tools.\n\n"
            "Validates, samples and visualises weighted command-generation\n"
            "chains, and evaluates formulas with counterexamples."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              mcsl validate registry.mcsl --all-states
              mcsl walk registry.mcsl --seed 7 --count 5 --stats
              mcsl check 'forall x in [1, 2, 3]: x < 3'
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_chain_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "chain",
            metavar="CHAIN",
            help="MCSL chain file.",
        )

    # --- validate ----------------------------------------------------------
    p_validate = subparsers.add_parser(
        "validate",
        help="Check weights and liveness of a chain.",
        description=(
            "Check that weights at every reachable state are non-negative "
            "and sum to 100, and that every reachable state can stop."
        ),
    )
    _add_chain_arg(p_validate)
    p_validate.add_argument(
        "--all-states",
        action="store_true",
        help="Also check declared states not reachable from the initial one.",
    )
    p_validate.add_argument(
        "-f", "--format",
        choices=["text", "json", "sexp"],
        default="text",
        help="Output format (default: text).",
    )
    p_validate.set_defaults(func=cmd_validate)

    # --- walk --------------------------------------------------------------
    p_walk = subparsers.add_parser(
        "walk",
        help="Sample command sequences from a chain.",
        description=(
            "Walk the chain from its initial state, printing the generated "
            "actions of each walk on one line."
        ),
    )
    _add_chain_arg(p_walk)
    p_walk.add_argument(
        "-s", "--seed",
        type=int,
        default=None,
        metavar="N",
        help="Random seed (default: nondeterministic).",
    )
    p_walk.add_argument(
        "-n", "--count",
        type=int,
        default=1,
        metavar="K",
        help="Number of walks (default: 1).",
    )
    p_walk.add_argument(
        "--max-steps",
        type=int,
        default=1000,
        metavar="M",
        help="Cut each walk after M steps (default: 1000).",
    )
    p_walk.add_argument(
        "-g", "--generators",
        metavar="MODULE",
        default=None,
        help="Python module exposing a GENERATORS dict of label → callable(model).",
    )
    p_walk.add_argument(
        "--no-validate",
        action="store_true",
        help="Walk even if the chain fails validation.",
    )
    p_walk.add_argument(
        "--stats",
        action="store_true",
        help="Print how often each transition was taken.",
    )
    p_walk.set_defaults(func=cmd_walk)

    # --- table -------------------------------------------------------------
    p_table = subparsers.add_parser(
        "table",
        help="Print the transition table of a chain.",
    )
    _add_chain_arg(p_table)
    p_table.set_defaults(func=cmd_table)

    # --- dot ---------------------------------------------------------------
    p_dot = subparsers.add_parser(
        "dot",
        help="Export a chain as Graphviz DOT.",
        description=(
            "Write DOT source for the chain.  With --render, lay the graph "
            "out with Graphviz (needs the 'graphviz' package and binaries)."
        ),
    )
    _add_chain_arg(p_dot)
    p_dot.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Output file ("-" or omit for stdout).',
    )
    p_dot.add_argument(
        "--render",
        default=None,
        metavar="FORMAT",
        help="Render to FORMAT (svg, png, pdf, ...) instead of writing DOT.",
    )
    p_dot.set_defaults(func=cmd_dot)

    # --- dump-sexp ---------------------------------------------------------
    p_dump = subparsers.add_parser(
        "dump-sexp",
        help="Print the canonical S-expression form of a chain.",
    )
    _add_chain_arg(p_dump)
    p_dump.set_defaults(func=cmd_dump_sexp)

    # --- check -------------------------------------------------------------
    p_check = subparsers.add_parser(
        "check",
        help="Evaluate a formula and explain a false result.",
    )
    p_check.add_argument(
        "formula",
        metavar="FORMULA",
        help="Formula text, e.g. 'x < 3 and x in [1, 2]'.",
    )
    p_check.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="Bind NAME to a term (repeatable). Bare words bind strings.",
    )
    p_check.add_argument(
        "-f", "--format",
        choices=["text", "sexp"],
        default="text",
        help="Counterexample format (default: text).",
    )
    p_check.set_defaults(func=cmd_check)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the MCSL CLI and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_OK

    try:
        return args.func(args)
    except GeneratorLoadError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_INFRA
    except MCSLError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_ERROR
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except BrokenPipeError:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return EXIT_OK
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
