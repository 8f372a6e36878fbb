"""
Dataset Profiler — schema inference over a parsed tabular dataset

Builds one immutable profile from an array of records:
  - per-column semantic type (single representative sample)
  - null / distinct counts and numeric ranges
  - primary- and foreign-key candidates from column names + uniqueness
  - a dataset-level "looks geographic" flag
  - the first few records as a preview sample

Runs entirely in memory, one pass per column. The profile feeds the analysis
view and seeds the field-mapping source list.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from ..core.exceptions import EmptyDatasetError
from .column_stats import NumericRange, collect_column_statistics
from .geo_detection import has_geo_columns
from .key_detection import KeyNamePolicy, KeyRole, classify_key_candidate, resolve_policy
from .type_inference import DataType, infer_data_type, infer_date_format

logger = logging.getLogger("migrator.profiler")

DEFAULT_SAMPLE_SIZE = 5

Record = Dict[str, Any]


@dataclass(frozen=True)
class ColumnProfile:
    """Inferred type and statistics for one column."""
    name: str
    data_type: str
    null_count: int
    unique_count: int
    range: Optional[NumericRange] = None
    is_primary_key_candidate: bool = False
    is_foreign_key_candidate: bool = False


@dataclass(frozen=True)
class DatasetProfile:
    """Aggregate analysis of a dataset. Column order follows the first record."""
    row_count: int
    column_count: int
    columns: List[str]
    column_profiles: Dict[str, ColumnProfile]
    has_gis_data: bool
    possible_primary_keys: List[str]
    possible_foreign_keys: List[str]
    sample: List[Record] = field(default_factory=list)

    @property
    def data_types(self) -> Dict[str, str]:
        return {c: _label(p.data_type) for c, p in self.column_profiles.items()}

    @property
    def null_value_counts(self) -> Dict[str, int]:
        return {c: p.null_count for c, p in self.column_profiles.items()}

    @property
    def unique_value_counts(self) -> Dict[str, int]:
        return {c: p.unique_count for c, p in self.column_profiles.items()}

    @property
    def ranges(self) -> Dict[str, NumericRange]:
        return {c: p.range for c, p in self.column_profiles.items() if p.range is not None}

    @property
    def date_formats(self) -> Dict[str, str]:
        """Layout of the first sampled value of every Date column."""
        formats = {}
        for column, profile in self.column_profiles.items():
            if profile.data_type != DataType.DATE:
                continue
            first = next((_cell(row, column) for row in self.sample if _cell(row, column)), None)
            formats[column] = infer_date_format(first)
        return formats

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape consumed by the analysis and mapping views."""
        return {
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "columns": list(self.columns),
            "dataTypes": self.data_types,
            "sample": list(self.sample),
            "hasGisData": self.has_gis_data,
            "possiblePrimaryKeys": list(self.possible_primary_keys),
            "possibleForeignKeys": list(self.possible_foreign_keys),
            "nullValueCounts": self.null_value_counts,
            "uniqueValueCounts": self.unique_value_counts,
            "ranges": {c: r.to_dict() for c, r in self.ranges.items()},
            "dateFormats": self.date_formats,
        }


@dataclass(frozen=True)
class FieldInfo:
    """Source field entry for the mapping view."""
    name: str
    type: str
    sample: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "sample": self.sample}


def profile_dataset(
    records: Optional[Sequence[Record]],
    *,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
    key_policy: Union[KeyNamePolicy, str] = KeyNamePolicy.SUBSTRING,
) -> DatasetProfile:
    """
    Profile a parsed dataset.

    Args:
        records: Parsed rows; the first record's keys define the columns
        sample_size: Number of leading records kept as the preview sample
        key_policy: Column-name rule for key candidates

    Returns:
        DatasetProfile

    Raises:
        EmptyDatasetError: If records is None or empty
    """
    if not records:
        raise EmptyDatasetError()

    policy = resolve_policy(key_policy)
    row_count = len(records)
    columns = list((records[0] or {}).keys())
    logger.info("profile_dataset: %d records, %d columns", row_count, len(columns))

    column_profiles: Dict[str, ColumnProfile] = {}
    primary_keys: List[str] = []
    foreign_keys: List[str] = []

    for column in columns:
        values = [_cell(row, column) for row in records]
        data_type = infer_data_type(values)
        stats = collect_column_statistics(values, data_type)
        role = classify_key_candidate(column, stats.unique_count, row_count, policy)

        if role == KeyRole.PRIMARY:
            primary_keys.append(column)
        elif role == KeyRole.FOREIGN:
            foreign_keys.append(column)

        column_profiles[column] = ColumnProfile(
            name=column,
            data_type=data_type,
            null_count=stats.null_count,
            unique_count=stats.unique_count,
            range=stats.range,
            is_primary_key_candidate=role == KeyRole.PRIMARY,
            is_foreign_key_candidate=role == KeyRole.FOREIGN,
        )
        logger.debug(
            "  profiled '%s' -> type=%s, nulls=%d, unique=%d, key=%s",
            column, _label(data_type), stats.null_count, stats.unique_count, role.value,
        )

    profile = DatasetProfile(
        row_count=row_count,
        column_count=len(columns),
        columns=columns,
        column_profiles=column_profiles,
        has_gis_data=has_geo_columns(columns),
        possible_primary_keys=primary_keys,
        possible_foreign_keys=foreign_keys,
        sample=list(records[:max(sample_size, 0)]),
    )
    logger.info(
        "profile_dataset: done, gis=%s, primary=%s, foreign=%s",
        profile.has_gis_data, primary_keys, foreign_keys,
    )
    return profile


def build_source_fields(profile: DatasetProfile) -> List[FieldInfo]:
    """Seed the mapping view: one entry per column with its type and first sample value."""
    first = profile.sample[0] if profile.sample else {}
    return [
        FieldInfo(name=column, type=profile.data_types[column], sample=_cell(first, column))
        for column in profile.columns
    ]


def build_type_breakdown(profile: DatasetProfile) -> Dict[str, int]:
    """Count of columns per inferred type."""
    counts: Dict[str, int] = {}
    for data_type in profile.data_types.values():
        counts[data_type] = counts.get(data_type, 0) + 1
    return counts


# ─── Internal helpers ────────────────────────────────────────────────────


def _cell(row: Optional[Record], column: str) -> Any:
    if not row:
        return None
    return row.get(column)


def _label(data_type: Any) -> str:
    return data_type.value if isinstance(data_type, DataType) else str(data_type)
