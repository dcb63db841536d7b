"""Cell typing helpers for uploaded tabular rows.

Rows arrive from the file-decoding collaborator as plain mappings of column
name to value. Columns are not statically typed, so every cell is classified
on its own as a number, a piece of text, or missing.

This module is intentionally:
- pure (no Django imports),
- defensive (never raises on unexpected cell values).
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from enum import Enum
from typing import Final

Row = Mapping[str, object]

MISSING_GROUP_LABEL: Final[str] = "(missing)"

_DECIMAL_RE: Final[re.Pattern[str]] = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INFINITY_RE: Final[re.Pattern[str]] = re.compile(r"^([+-]?)Infinity$")
_PREFIXED_INT_RE: Final[re.Pattern[str]] = re.compile(r"^0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")


class CellKind(Enum):
    """Classification of a single row cell."""

    number = "number"
    text = "text"
    missing = "missing"


def classify_cell(value: object) -> CellKind:
    """Classify a raw cell value.

    Args:
        value: The value stored in a row for some column (or None when absent).

    Returns:
        CellKind for the value. Booleans are treated as text.
    """

    if value is None:
        return CellKind.missing
    if isinstance(value, bool):
        return CellKind.text
    if isinstance(value, (int, float, Decimal)):
        return CellKind.number
    return CellKind.text


def cell_number(value: object) -> float | None:
    """Coerce a cell to a float, or return None when it is not numeric.

    Numbers pass through (NaN is rejected). Text is trimmed and accepted when
    it is a plain decimal literal (optional sign, fraction, exponent),
    `Infinity`, or a `0x`/`0o`/`0b` integer literal. Blank text is rejected.

    Args:
        value: Raw cell value.

    Returns:
        The numeric value, or None when coercion fails.
    """

    kind = classify_cell(value)
    if kind is CellKind.missing:
        return None
    if kind is CellKind.number:
        number = float(value)  # type: ignore[arg-type]
        return None if math.isnan(number) else number
    if isinstance(value, bool):
        return None

    text = str(value).strip()
    if not text:
        return None
    if _DECIMAL_RE.match(text):
        return float(text)
    infinity = _INFINITY_RE.match(text)
    if infinity:
        return -math.inf if infinity.group(1) == "-" else math.inf
    if _PREFIXED_INT_RE.match(text):
        return float(int(text, 0))
    return None


def format_number(value: float | int | Decimal) -> str:
    """Render a number the way group keys expect (`5.0` -> `"5"`)."""

    if isinstance(value, int):
        return str(value)
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def cell_group_key(value: object) -> str:
    """Return the string used to bucket a cell into a group.

    Two cells that stringify identically (the number 5 and the text "5")
    share a group.
    """

    kind = classify_cell(value)
    if kind is CellKind.missing:
        return MISSING_GROUP_LABEL
    if kind is CellKind.number:
        return format_number(value)  # type: ignore[arg-type]
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def columns_from_rows(rows: Sequence[Row]) -> tuple[str, ...]:
    """Derive the ordered column set from the first row of a dataset."""

    if not rows:
        return ()
    return tuple(str(key) for key in rows[0].keys())
