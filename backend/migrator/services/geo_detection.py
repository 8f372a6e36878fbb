"""
Geo-Column Detection — does a dataset look geographic?

One pattern set serves both the dataset profile and the record-level check.
Every pattern matches anywhere in the lowercased column name. This includes
the bare axis letters "x" and "y", so the flag is loose: "city", "type" and
"year" all read as geographic. Treat it as a hint, not a guarantee.

Detection looks at names only; coordinate values are validated by the
geo-point extractor.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Sequence

logger = logging.getLogger("migrator.geo")

GEO_NAME_PATTERNS = (
    "lat", "latitude",
    "lon", "longitude", "lng",
    "coord", "coordinates",
    "location",
    "geom", "geometry",
    "x_coord", "y_coord",
    "x_", "y_",
    "x", "y",
)


def is_geo_column(column: str) -> bool:
    low = column.lower()
    return any(p in low for p in GEO_NAME_PATTERNS)


def has_geo_columns(columns: Iterable[str]) -> bool:
    """True when any column name looks geographic."""
    for column in columns:
        if is_geo_column(column):
            logger.debug("Geographic column detected: %s", column)
            return True
    return False


def has_gis_data(records: Optional[Sequence[Dict[str, Any]]]) -> bool:
    """Record-level check against the first record's keys."""
    if not records:
        return False
    first = records[0]
    if not isinstance(first, dict):
        return False
    return has_geo_columns(first.keys())
