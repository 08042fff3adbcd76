"""Settings for ``mcsl walk`` and the generator table it loads."""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .errors import ErrorCode, GeneratorLoadError

logger = logging.getLogger(__name__)

GENERATORS_ATTRIBUTE = "GENERATORS"


@dataclass
class WalkConfig:
    """Tuning knobs for sampling command sequences from a chain."""
    seed: Optional[int] = None
    count: int = 1
    max_steps: int = 1000
    validate_first: bool = True

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.count <= 0:
            warnings.append("count must be positive")
        if self.max_steps <= 0:
            warnings.append("max_steps must be positive")
        if not self.validate_first:
            warnings.append("walking an unvalidated chain may not terminate "
                            "before max_steps")
        return warnings


def load_generators(module_name: str) -> Dict[str, Callable[[Any], Any]]:
    """Import *module_name* and return its ``GENERATORS`` table.

    The table maps transition labels to ``callable(model)``.
    """
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise GeneratorLoadError(
            f"cannot import generator module {module_name!r}: {exc}",
            code=ErrorCode.GENERATOR_IMPORT,
        ) from exc
    table = getattr(module, GENERATORS_ATTRIBUTE, None)
    if not isinstance(table, dict):
        raise GeneratorLoadError(
            f"module {module_name!r} has no {GENERATORS_ATTRIBUTE} dict",
            code=ErrorCode.GENERATOR_TABLE,
        )
    bad = sorted(str(k) for k, v in table.items() if not callable(v))
    if bad:
        raise GeneratorLoadError(
            f"{module_name}.{GENERATORS_ATTRIBUTE} has non-callable "
            f"entries: {', '.join(bad)}",
            code=ErrorCode.GENERATOR_TABLE,
        )
    logger.debug("loaded %d generator(s) from %s", len(table), module_name)
    return table


__all__ = ["WalkConfig", "load_generators", "GENERATORS_ATTRIBUTE"]
