"""Typed spreadsheet cells and their coercion rules."""

import json
import math
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

# Sentinel for "key not present", distinct from an explicit JSON null
_MISSING = object()


def _is_finite(v: Union[int, float]) -> bool:
    # 1e400 decodes to inf and a 400-digit integer overflows float; neither is a metric
    try:
        return math.isfinite(v)
    except OverflowError:
        return False


class CellKind(str, Enum):
    """What a gviz cell actually carried."""

    NUMBER = "number"
    STRING = "string"
    NULL = "null"
    MISSING = "missing"


class Cell(BaseModel):
    """
    One value-bearing unit of a source row.
    Coercion is strict: only NUMBER cells count as numeric; strings are never parsed.
    """

    model_config = ConfigDict(frozen=True)

    kind: CellKind
    value: Union[float, int, str, None] = None

    @classmethod
    def missing(cls) -> "Cell":
        return cls(kind=CellKind.MISSING)

    @classmethod
    def from_raw(cls, raw: Any = _MISSING) -> "Cell":
        """
        Build a Cell from one entry of a gviz row's `c` array.
        Accepts the entry itself ({"v": ...}), None, or nothing at all.
        """
        if raw is _MISSING:
            return cls(kind=CellKind.MISSING)
        if raw is None:
            return cls(kind=CellKind.NULL)
        if not isinstance(raw, dict) or "v" not in raw:
            return cls(kind=CellKind.MISSING)
        v = raw["v"]
        if v is None:
            return cls(kind=CellKind.NULL)
        # bool is an int subclass; a checkbox cell is not a metric
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            if not _is_finite(v):
                return cls(kind=CellKind.NULL)
            return cls(kind=CellKind.NUMBER, value=v)
        if isinstance(v, str):
            return cls(kind=CellKind.STRING, value=v)
        return cls(kind=CellKind.STRING, value=json.dumps(v))

    @property
    def is_number(self) -> bool:
        return self.kind is CellKind.NUMBER

    def as_number(self) -> float:
        """Numeric value, or 0 for anything that is not a NUMBER cell."""
        if self.kind is CellKind.NUMBER:
            return self.value  # type: ignore[return-value]
        return 0

    def as_text(self) -> str:
        """Display text; empty for null/missing cells."""
        if self.kind in (CellKind.NULL, CellKind.MISSING):
            return ""
        if self.kind is CellKind.NUMBER and isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)
