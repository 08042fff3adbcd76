"""
export.py — Tabular and Graphviz views of a Markov chain
========================================================

Rows and graph nodes follow breadth-first state order from the initial
state, then alternative order within each state.  With an explicit
*domain*, defined states not reachable from the initial state are appended
after the reachable ones.

:func:`to_dot` needs the optional ``graphviz`` package
(``pip install statemachine-core[viz]``); :func:`to_dot_source` produces the
same graph as plain DOT text without it.
"""

from __future__ import annotations

from typing import Any, Iterable, List, NamedTuple, Optional, Tuple

from .markov import Continue, Markov, Stop
from .validation import reachable_states

try:
    import graphviz
except ImportError:  # viz extra not installed
    graphviz = None

_STOP_NODE = "stop"


class TableRow(NamedTuple):
    source: Any
    label: str
    weight: int
    target: Optional[Any]


def _states(chain: Markov, initial: Any,
            domain: Optional[Iterable[Any]]) -> List[Any]:
    states = reachable_states(chain, initial)
    if domain is not None:
        seen = set(states)
        for state in domain:
            if state not in seen and chain.is_defined(state):
                seen.add(state)
                states.append(state)
    return states


def state_label(state: Any) -> str:
    """Compact display form: ``(one, zero)`` rather than ``('one', 'zero')``."""
    if isinstance(state, tuple):
        return "(" + ", ".join(state_label(s) for s in state) + ")"
    return str(state)


def to_table(chain: Markov, initial: Any, *,
             domain: Optional[Iterable[Any]] = None) -> List[TableRow]:
    rows: List[TableRow] = []
    for state in _states(chain, initial, domain):
        for weight, alternative in chain.alternatives(state):
            if isinstance(alternative, Stop):
                rows.append(TableRow(state, "Stop", weight, None))
            else:
                rows.append(TableRow(state, alternative.label, weight,
                                     alternative.next_state))
    return rows


def format_table(rows: Iterable[TableRow]) -> str:
    """Fixed-width text rendering of :func:`to_table` output."""
    cells: List[Tuple[str, str, str, str]] = [("FROM", "LABEL", "WEIGHT", "TO")]
    for row in rows:
        cells.append((
            state_label(row.source),
            row.label,
            str(row.weight),
            "-" if row.target is None else state_label(row.target),
        ))
    widths = [max(len(c[i]) for c in cells) for i in range(4)]
    lines = []
    for c in cells:
        lines.append("  ".join(
            c[i].rjust(widths[i]) if i == 2 else c[i].ljust(widths[i])
            for i in range(4)
        ).rstrip())
    return "\n".join(lines)


def _edges(chain: Markov, states: List[Any]):
    """``(src_id, dst_id, edge_label)`` triples plus the node id map."""
    ids = {state: f"s{i}" for i, state in enumerate(states)}
    edges = []
    for state in states:
        for weight, alternative in chain.alternatives(state):
            if isinstance(alternative, Continue):
                target = alternative.next_state
                if target not in ids:
                    ids[target] = f"s{len(ids)}"
                edges.append((ids[state], ids[target],
                              f"{alternative.label} ({weight}%)"))
            else:
                edges.append((ids[state], _STOP_NODE, f"Stop ({weight}%)"))
    return ids, edges


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def to_dot_source(chain: Markov, initial: Any, *, name: str = "chain",
                  domain: Optional[Iterable[Any]] = None) -> str:
    """Export the chain in Graphviz DOT format."""
    ids, edges = _edges(chain, _states(chain, initial, domain))
    lines = [f'digraph "{_escape(name)}" {{', "  rankdir=LR;"]
    for state, node_id in ids.items():
        shape = "doublecircle" if state == initial else "circle"
        lines.append(f'  {node_id} [label="{_escape(state_label(state))}", '
                     f'shape={shape}];')
    if any(dst == _STOP_NODE for _, dst, _ in edges):
        lines.append(f"  {_STOP_NODE} [shape=point];")
    for src, dst, label in edges:
        lines.append(f'  {src} -> {dst} [label="{_escape(label)}"];')
    lines.append("}")
    return "\n".join(lines)


def to_dot(chain: Markov, initial: Any, *, name: str = "chain",
           domain: Optional[Iterable[Any]] = None):
    """Build a :class:`graphviz.Digraph` for the chain."""
    if graphviz is None:
        raise ImportError(
            "to_dot requires the 'graphviz' package; "
            "install it with: pip install statemachine-core[viz]"
        )
    ids, edges = _edges(chain, _states(chain, initial, domain))
    dot = graphviz.Digraph(name=name)
    dot.attr(rankdir="LR")
    for state, node_id in ids.items():
        shape = "doublecircle" if state == initial else "circle"
        dot.node(node_id, label=state_label(state), shape=shape)
    if any(dst == _STOP_NODE for _, dst, _ in edges):
        dot.node(_STOP_NODE, label="", shape="point")
    for src, dst, label in edges:
        dot.edge(src, dst, label=label)
    return dot


__all__ = [
    "TableRow",
    "state_label",
    "to_table",
    "format_table",
    "to_dot_source",
    "to_dot",
]
