"""
mcsl/errors.py — Error types for the MCSL front-end
===================================================

Error hierarchy::

    MCSLError (base)
    ├── ChainParseError      - malformed chain file text or form shape
    ├── ChainSemanticError   - well-formed file that does not describe a chain
    ├── FormulaParseError    - formula text rejected by the grammar
    ├── FormulaNameError     - formula refers to an unbound identifier
    └── GeneratorLoadError   - --generators module unusable

Each error carries an :class:`ErrorCode` and an optional :class:`SourceSpan`
and renders as ``MCSL-NNNN: message (at file:line:col)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Error codes, ``MCSL-NNNN``.

    Ranges:
      - 1000-1999: chain files
      - 2000-2999: formulas
      - 3000-3999: generator loading
    """
    CHAIN_SYNTAX = 1001
    CHAIN_SHAPE = 1002
    DUPLICATE_STATE = 1101
    MISSING_INITIAL = 1102
    DUPLICATE_INITIAL = 1103
    FORMULA_SYNTAX = 2001
    UNBOUND_NAME = 2101
    GENERATOR_IMPORT = 3001
    GENERATOR_TABLE = 3002

    @property
    def code(self) -> str:
        return f"MCSL-{self.value:04d}"

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class SourceSpan:
    """A position in chain or formula text.  ``line``/``column`` are 1-based;
    0 means unknown."""
    file: str = ""
    line: int = 0
    column: int = 0

    @classmethod
    def from_offset(cls, text: str, offset: int, file: str = "") -> "SourceSpan":
        """Convert a character offset in *text* to line and column."""
        offset = max(0, min(offset, len(text)))
        line = text.count("\n", 0, offset) + 1
        column = offset - (text.rfind("\n", 0, offset) + 1) + 1
        return cls(file=file, line=line, column=column)

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))
        return ":".join(parts)


class MCSLError(Exception):
    """Base exception for all MCSL errors."""

    default_code: ErrorCode = ErrorCode.CHAIN_SYNTAX

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = span
        self.hint = hint

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d: Dict[str, Any] = {"code": self.code.code, "message": self.message}
        if self.span is not None:
            d["location"] = str(self.span)
        if self.hint:
            d["hint"] = self.hint
        return d

    def __str__(self) -> str:
        text = f"{self.code}: {self.message}"
        if self.span is not None:
            text += f" (at {self.span})"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text


class ChainParseError(MCSLError):
    default_code = ErrorCode.CHAIN_SYNTAX


class ChainSemanticError(MCSLError):
    default_code = ErrorCode.DUPLICATE_STATE


class FormulaParseError(MCSLError):
    default_code = ErrorCode.FORMULA_SYNTAX


class FormulaNameError(MCSLError):
    """Unbound identifier in a formula."""

    default_code = ErrorCode.UNBOUND_NAME

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(f"unbound name {name!r}", **kwargs)
        self.name = name


class GeneratorLoadError(MCSLError):
    default_code = ErrorCode.GENERATOR_IMPORT


__all__ = [
    "ErrorCode",
    "SourceSpan",
    "MCSLError",
    "ChainParseError",
    "ChainSemanticError",
    "FormulaParseError",
    "FormulaNameError",
    "GeneratorLoadError",
]
