"""
Scalar value helpers shared by the profiling engine.

Parsed datasets hold loosely typed cells (str, int, float, bool or None), and
the profiler's rules are phrased in terms of value *kinds* rather than Python
truthiness. The helpers here pin those rules down in one place:

- missing:        None or the empty string (NaN is a number, not missing)
- numeric kind:   int / float / numpy numbers, never bool
- falsy:          None, False, "", 0 and NaN
- canonical form: the shortest decimal rendering of a float, integral values
                  without a trailing ".0", used for number round-trip checks
"""

import math
import re
from decimal import Decimal
from typing import Any, Hashable, Tuple

import numpy as np

_NUMERIC_TYPES = (int, float, np.integer, np.floating)
_BOOL_TYPES = (bool, np.bool_)

# Leading-number parse: "39.29abc" -> 39.29, ".5" -> 0.5, "Infinity" -> inf
_FLOAT_PREFIX = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)


def is_missing(value: Any) -> bool:
    """True for None and the empty string."""
    return value is None or (isinstance(value, str) and value == "")


def is_boolean_kind(value: Any) -> bool:
    return isinstance(value, _BOOL_TYPES)


def is_numeric_kind(value: Any) -> bool:
    """True for int/float values (numpy included), excluding booleans."""
    return isinstance(value, _NUMERIC_TYPES) and not isinstance(value, _BOOL_TYPES)


def is_nan(value: Any) -> bool:
    return is_numeric_kind(value) and isinstance(value, (float, np.floating)) and math.isnan(value)


def is_falsy(value: Any) -> bool:
    if is_nan(value):
        return True
    if isinstance(value, (str, int, float, bool, np.number, np.bool_)) or value is None:
        return not value
    return False


def canonical_number_string(value: float) -> str:
    """
    Render a float the way a number prints when converted back to text.

    42.0 -> "42", 0.5 -> "0.5", 1e-07 -> "1e-7", 1e21 -> "1e+21",
    inf -> "Infinity". Exponent notation is used below 1e-6 and from 1e21.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + exponent  # position of the decimal point relative to the digits

    if k <= n <= 21:
        body = digits + "0" * (n - k)
    elif 0 < n <= 21:
        body = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        body = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        e_text = f"e+{e}" if e >= 0 else f"e-{-e}"
        body = digits + e_text if k == 1 else digits[0] + "." + digits[1:] + e_text
    return sign + body


def parse_float(value: Any) -> float:
    """
    Permissive float parse. Numbers pass through; strings are parsed from
    their leading numeric prefix; anything else (None, booleans) is NaN.
    """
    if value is None or is_boolean_kind(value):
        return math.nan
    if is_numeric_kind(value):
        return float(value)
    match = _FLOAT_PREFIX.match(str(value))
    if not match:
        return math.nan
    return float(match.group(1))


def to_display_string(value: Any) -> str:
    """Stringify a cell for labels: 7.0 -> "7", True -> "true", None -> "null"."""
    if value is None:
        return "null"
    if is_boolean_kind(value):
        return "true" if value else "false"
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if is_numeric_kind(value):
        return canonical_number_string(float(value))
    return str(value)


def value_key(value: Any) -> Tuple[str, Hashable]:
    """
    Equality key for distinct-value counting.

    Kinds never collide (True is not 1, "1" is not 1), 1 == 1.0, every NaN is
    the same value and 0.0 == -0.0.
    """
    if is_boolean_kind(value):
        return ("boolean", bool(value))
    if is_numeric_kind(value):
        if is_nan(value):
            return ("number", "NaN")
        return ("number", value.item() if isinstance(value, np.generic) else value)
    if isinstance(value, str):
        return ("string", value)
    try:
        hash(value)
    except TypeError:
        return (type(value).__name__, repr(value))
    return (type(value).__name__, value)
