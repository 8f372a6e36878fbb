"""
Column Statistics — null count, distinct count and numeric range

All three statistics are gathered in a single pass over the column.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from .type_inference import DataType
from .values import is_missing, is_nan, is_numeric_kind, value_key


@dataclass(frozen=True)
class NumericRange:
    min: float
    max: float

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class ColumnStatistics:
    null_count: int
    unique_count: int
    range: Optional[NumericRange] = None


def collect_column_statistics(values: Iterable[Any], data_type: str) -> ColumnStatistics:
    """
    Compute null/unique counts and, for Number columns, the min/max range.

    Args:
        values: The column's cells in record order
        data_type: Label returned by type inference for this column

    Returns:
        ColumnStatistics; ``range`` is None unless the column is a Number
        column holding at least one non-NaN numeric value.
    """
    track_range = data_type == DataType.NUMBER
    null_count = 0
    seen = set()
    low: Optional[Any] = None
    high: Optional[Any] = None

    for value in values:
        if is_missing(value):
            null_count += 1
            continue

        seen.add(value_key(value))

        if track_range and is_numeric_kind(value) and not is_nan(value):
            if low is None or value < low:
                low = value
            if high is None or value > high:
                high = value

    value_range = None
    if low is not None:
        value_range = NumericRange(min=_plain(low), max=_plain(high))

    return ColumnStatistics(null_count=null_count, unique_count=len(seen), range=value_range)


def _plain(value: Any) -> Any:
    """Unwrap numpy scalars so ranges serialise as plain JSON numbers."""
    return value.item() if hasattr(value, "item") else value
