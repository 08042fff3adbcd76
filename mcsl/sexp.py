"""
mcsl/sexp.py — S-expression layer over ``sexpdata``
===================================================

Chain files are read with :func:`sexpdata.loads`.  This module adds the two
things MCSL needs on top of it:

* ``;`` line comments are blanked out before parsing, so every offset in
  the text handed to ``sexpdata`` still points at the original character;
* every parenthesised form comes back as an :class:`SList`, a ``list`` that
  remembers the offset of its ``(`` so errors can name a line and column.

Reading produces:

=================  ============================================
``(a b c)``        :class:`SList`
``foo``            :class:`sexpdata.Symbol`
``"foo"``          ``str``
``42`` / ``-1.5``  ``int`` / ``float``
=================  ============================================

``t`` and ``nil`` are ordinary symbols.

>>> [symbol_name(x) for x in loads_all('(chain c (initial s0)) ; done')[0][:2]]
['chain', 'c']
>>> dumps([Symbol("state"), ["one", 2], "Spawn"])
'(state ("one" 2) "Spawn")'
"""

from __future__ import annotations

import re
from typing import Any, Iterator, List, Optional, Tuple

try:
    import sexpdata
    from sexpdata import Symbol
except ImportError:  # pragma: no cover
    raise ImportError(
        "The 'sexpdata' package is required for MCSL chain files. "
        "Install it with:  pip install sexpdata"
    )


class SList(list):
    """A parenthesised form; *offset* is the position of its ``(``."""

    def __init__(self, items=(), offset: int = 0):
        super().__init__(items)
        self.offset = offset


class SexpSyntaxError(ValueError):
    """Malformed S-expression text; *offset* is the best-known position."""

    def __init__(self, message: str, offset: int = 0):
        super().__init__(message)
        self.offset = offset


def symbol_name(obj: Any) -> Optional[str]:
    """The name of a ``sexpdata.Symbol``, or ``None`` for any other value."""
    if not isinstance(obj, Symbol):
        return None
    value = getattr(obj, "value", None)
    return str(value()) if callable(value) else str(obj)


def is_symbol(obj: Any, name: str) -> bool:
    return symbol_name(obj) == name


# -------------------------------------------------------------------
# Reading
# -------------------------------------------------------------------

def _scan(text: str) -> Tuple[str, List[int], Optional[int]]:
    """Blank out comments, collect ``(`` offsets, find the first imbalance.

    Returns the comment-free text, the offsets of every opening paren in
    order, and the offset of an unmatched paren or unterminated string.
    """
    chars = list(text)
    opens: List[int] = []
    stack: List[int] = []
    problem: Optional[int] = None
    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if c == '"':
            start = i
            i += 1
            while i < n and text[i] != '"':
                i += 2 if text[i] == "\\" else 1
            if i >= n and problem is None:
                problem = start
        elif c == ";":
            while i < n and text[i] != "\n":
                chars[i] = " "
                i += 1
            continue
        elif c == "(":
            opens.append(i)
            stack.append(i)
        elif c == ")":
            if stack:
                stack.pop()
            elif problem is None:
                problem = i
        i += 1
    if problem is None and stack:
        problem = stack[0]
    return "".join(chars), opens, problem


def _attach(obj: Any, offsets: Iterator[int]) -> Any:
    if isinstance(obj, list):
        offset = next(offsets, 0)
        return SList([_attach(x, offsets) for x in obj], offset=offset)
    return obj


def loads_all(text: str) -> List[Any]:
    """Parse every top-level form in *text*.

    Raises :class:`SexpSyntaxError` on malformed input; callers translate it
    into their own error type.
    """
    clean, opens, problem = _scan(text)
    if problem is not None:
        raise SexpSyntaxError("unbalanced parenthesis or unterminated string",
                              problem)
    # sexpdata reads a single form; wrap the document in one more list.
    try:
        raw = sexpdata.loads("(\n" + clean + "\n)",
                             nil=None, true=None, false=None)
    except Exception as e:
        raise SexpSyntaxError(f"S-expression syntax error: {e}") from e
    offsets = iter(opens)
    return [_attach(form, offsets) for form in raw]


# -------------------------------------------------------------------
# Writing
# -------------------------------------------------------------------

# sexpdata escapes these characters when it writes a symbol.
_SYMBOL_RE = re.compile(r"""[^\s()\[\]";'`,.?#\\]+\Z""")


def is_symbol_text(text: str) -> bool:
    """True if *text* reads back as a symbol rather than a number."""
    if not _SYMBOL_RE.match(text):
        return False
    try:
        float(text)
    except ValueError:
        return True
    return False


def dumps(obj: Any) -> str:
    """Serialise *obj* with ``sexpdata.dumps``.

    ``bool`` and ``None`` are written as the symbols ``t``/``nil`` and tuples
    as forms; everything else is left to ``sexpdata``.
    """
    return sexpdata.dumps(_prepare(obj))


def _prepare(obj: Any) -> Any:
    if isinstance(obj, bool):
        return Symbol("t" if obj else "nil")
    if obj is None:
        return Symbol("nil")
    if isinstance(obj, (list, tuple)):
        return [_prepare(x) for x in obj]
    if isinstance(obj, (Symbol, str, int, float)):
        return obj
    raise TypeError(f"cannot serialise {type(obj).__name__} as an S-expression")


__all__ = [
    "Symbol",
    "SList",
    "SexpSyntaxError",
    "symbol_name",
    "is_symbol",
    "loads_all",
    "is_symbol_text",
    "dumps",
]
