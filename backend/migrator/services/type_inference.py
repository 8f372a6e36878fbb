"""
Type Inference — one semantic label per column

The label is decided from a single representative value: the first value in
the column that is not missing. Mixed-type columns are not reconciled; the
representative wins.

Precedence for string representatives matters: date parsing is tried before
the numeric round-trip check, so "20230501" reads as a date while "42" reads
as a number stored as text.
"""

import logging
import math
import re
from enum import Enum
from typing import Any, Iterable, Optional

from dateutil import parser as date_parser

from .values import canonical_number_string, is_boolean_kind, is_missing, is_numeric_kind

logger = logging.getLogger("migrator.type_inference")


class DataType(str, Enum):
    """Semantic column types reported by the profiler."""

    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    NUMBER_AS_STRING = "Number (as string)"
    STRING = "String"
    UNKNOWN = "Unknown"


# Bare numbers below this magnitude are counts or codes, never dates
_MIN_DATELIKE_NUMBER = 1000

_DATE_FORMAT_PATTERNS = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), "YYYY-MM-DD"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}$"), "MM/DD/YYYY"),
    (re.compile(r"^\d{2}\.\d{2}\.\d{4}$"), "DD.MM.YYYY"),
    (re.compile(r"^\d{2}-\d{2}-\d{4}$"), "DD-MM-YYYY"),
    (re.compile(r"^\d{4}/\d{2}/\d{2}$"), "YYYY/MM/DD"),
    (re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}"), "ISO DateTime"),
    (re.compile(r"^\d{2}/\d{2}/\d{4}\s\d{2}:\d{2}:\d{2}"), "MM/DD/YYYY HH:MM:SS"),
]


def representative_sample(values: Iterable[Any]) -> Optional[Any]:
    """First value that is neither None nor an empty string."""
    for value in values:
        if not is_missing(value):
            return value
    return None


def looks_like_date(text: str) -> bool:
    """Permissive date check backed by dateutil."""
    stripped = text.strip()
    if not stripped:
        return False

    try:
        numeric = float(stripped)
    except ValueError:
        numeric = None
    if numeric is not None:
        if math.isnan(numeric) or math.isinf(numeric) or abs(numeric) < _MIN_DATELIKE_NUMBER:
            return False

    try:
        date_parser.parse(stripped)
    except (ValueError, OverflowError):
        return False
    return True


def is_number_string(text: str) -> bool:
    """True when the text parses as a float and prints back identically."""
    try:
        value = float(text)
    except ValueError:
        return False
    if math.isnan(value):
        return False
    return canonical_number_string(value) == text


def infer_data_type(values: Iterable[Any]) -> str:
    """
    Infer the semantic type of a column.

    Args:
        values: The column's cells in record order

    Returns:
        A DataType label, or the Python type name for unexpected kinds
    """
    sample = representative_sample(values)
    if sample is None:
        return DataType.UNKNOWN

    if is_boolean_kind(sample):
        return DataType.BOOLEAN
    if is_numeric_kind(sample):
        return DataType.NUMBER

    if isinstance(sample, str):
        if looks_like_date(sample):
            return DataType.DATE
        if is_number_string(sample):
            return DataType.NUMBER_AS_STRING
        return DataType.STRING

    logger.debug("Unrecognised representative kind: %s", type(sample).__name__)
    return type(sample).__name__


def infer_date_format(sample: Any) -> str:
    """Name the layout of a date sample, e.g. 'YYYY-MM-DD'."""
    if not sample:
        return "Unknown"
    text = str(sample)
    for pattern, label in _DATE_FORMAT_PATTERNS:
        if pattern.match(text):
            return label
    return "Custom"
