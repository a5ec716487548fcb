# src/pcapmetrics/parsing/fields.py
"""Strict conversion of tool-output cells to typed field values.

Python's int() and float() are more forgiving than the metric wire formats
downstream: they accept surrounding whitespace and digit-group underscores,
and float() silently overflows to infinity. The converters here reject all
of that so a cell either means exactly one number or fails.

Every converter raises ValueError with a short reason on failure.
"""

import math
import re
from collections.abc import Callable

from pcapmetrics.contracts.metrics import FieldValue
from pcapmetrics.contracts.schema import ColumnType

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DECIMAL_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT_RE = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")
# A sign is allowed before inf/infinity but not before nan
_SPECIAL_FLOATS = frozenset({"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity", "nan"})

_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_int(value: str) -> int:
    """Parse a base-10 signed 64-bit integer."""
    if _INT_RE.fullmatch(value) is None:
        raise ValueError("invalid syntax")
    parsed = int(value)
    if not INT64_MIN <= parsed <= INT64_MAX:
        raise ValueError("value out of range")
    return parsed


def parse_float(value: str) -> float:
    """Parse a 64-bit float, decimal or hexadecimal, including inf/nan spellings."""
    if value.lower() in _SPECIAL_FLOATS:
        return float(value)
    if _DECIMAL_FLOAT_RE.fullmatch(value) is not None:
        parsed = float(value)
    elif _HEX_FLOAT_RE.fullmatch(value) is not None:
        try:
            parsed = float.fromhex(value)
        except OverflowError as e:
            raise ValueError("value out of range") from e
    else:
        raise ValueError("invalid syntax")
    if math.isinf(parsed):
        raise ValueError("value out of range")
    return parsed


def parse_bool(value: str) -> bool:
    """Parse one of the canonical boolean literals (1/t/true/0/f/false and case variants)."""
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    raise ValueError("invalid syntax")


def _keep_string(value: str) -> str:
    return value


# Declared column type -> (converter, name used in diagnostics)
CONVERTERS: dict[ColumnType, tuple[Callable[[str], FieldValue], str]] = {
    ColumnType.INT: (parse_int, "int"),
    ColumnType.FLOAT: (parse_float, "float64"),
    ColumnType.BOOL: (parse_bool, "bool"),
    ColumnType.STRING: (_keep_string, "string"),
}
