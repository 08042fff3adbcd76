#!/usr/bin/env python3
"""
mcsl/__main__.py
================

Entry point for the MCSL (Markov Chain Specification Language) tools.

Usage
-----
    python -m mcsl <command> [options]

Commands
--------
    validate    Check weights and liveness of a chain file
    walk        Sample command sequences from a chain file
    table       Print the transition table
    dot         Export Graphviz DOT (optionally rendered)
    dump-sexp   Print the canonical S-expression form of a chain file
    check       Evaluate a formula and print its counterexample

Pipeline
--------
    .mcsl source
        │
        ▼
    ┌──────────┐
    │  Reader   │   parsimonious → S-expression data
    └────┬─────┘
         │
         ▼
    ┌──────────────┐
    │  Chain        │   shape checks → ChainSpec
    │  parser       │
    └────┬─────────┘
         │
         ▼
    ┌──────────────┐
    │  Markov       │   validate / walk / table / dot
    └──────────────┘
"""

from __future__ import annotations

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
