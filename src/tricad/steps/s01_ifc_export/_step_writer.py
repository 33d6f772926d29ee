"""Sequential ISO-10303-21 record writer and literal formatting.

Records are numbered in allocation order and rendered as
``#N=TYPE(args);``. A record can only mention ids handed out before it,
so the DATA section never holds forward references.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Sequence

COORD_DECIMALS = 6


@dataclass(frozen=True)
class StepRecord:
    id: int
    type: str
    args: str

    @property
    def line(self) -> str:
        return f"#{self.id}={self.type}({self.args});"


class StepWriter:
    """Allocates record ids and keeps the ordered DATA section."""

    def __init__(self) -> None:
        self._next_id = 1
        self.records: list[StepRecord] = []
        self._type_counts: Counter[str] = Counter()

    def add(self, entity_type: str, args: str) -> int:
        record_id = self._next_id
        self._next_id += 1
        self.records.append(StepRecord(record_id, entity_type, args))
        self._type_counts[entity_type] += 1
        return record_id

    def count(self, entity_type: str) -> int:
        return self._type_counts[entity_type.upper()]

    def __len__(self) -> int:
        return len(self.records)

    def to_text(self) -> str:
        return "\n".join(r.line for r in self.records)


# ── Literals ──


def ref(record_id: int) -> str:
    return f"#{record_id}"


def ref_list(record_ids: Iterable[int]) -> str:
    return "(" + ",".join(ref(i) for i in record_ids) + ")"


def bool_literal(value: bool) -> str:
    return ".T." if value else ".F."


def format_real(value, ndigits: int | None = COORD_DECIMALS) -> str:
    """Render a STEP REAL; non-finite or non-numeric input is written as zero."""
    try:
        v = float(value)
    except (TypeError, ValueError, OverflowError):
        v = 0.0
    if not math.isfinite(v):
        v = 0.0
    if ndigits is not None:
        v = round(v, ndigits)
    if v == 0:
        return "0."

    mantissa, _, exponent = repr(v).upper().partition("E")
    if "." not in mantissa:
        mantissa += "."
    elif mantissa.endswith(".0"):
        mantissa = mantissa[:-1]
    return mantissa + (f"E{exponent}" if exponent else "")


def point_literal(coords: Sequence[float]) -> str:
    """``(x,y,z)`` with each component rounded to 6 decimals."""
    return "(" + ",".join(format_real(c) for c in coords) + ")"


def step_string(value) -> str:
    """Quoted STEP string; quotes and backslashes doubled, non-ASCII as \\X2\\ / \\X4\\."""
    out = []
    for ch in str(value):
        code = ord(ch)
        if ch == "'":
            out.append("''")
        elif ch == "\\":
            out.append("\\\\")
        elif 32 <= code < 127:
            out.append(ch)
        elif code <= 0xFFFF:
            out.append(f"\\X2\\{code:04X}\\X0\\")
        else:
            out.append(f"\\X4\\{code:08X}\\X0\\")
    return "'" + "".join(out) + "'"
