"""
Geo-Point Extraction — valid coordinates plus display metadata per record

Column naming varies between sources, so each role (latitude, longitude,
name, type) is found by trying an ordered list of patterns: for each pattern
in turn, the first key of the record whose lowercased name contains it wins.
Rows without both coordinate fields, with unparseable coordinates, or with
coordinates outside [-90, 90] / [-180, 180] are dropped silently; the
extractor never raises for an individual row.

Field discovery is cached per distinct key tuple, so a rectangular dataset
discovers its fields once while ragged datasets still resolve per record.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .values import is_falsy, parse_float, to_display_string

logger = logging.getLogger("migrator.geo")

LATITUDE_PATTERNS = ("lat", "latitude", "y", "y_coord")
LONGITUDE_PATTERNS = ("lon", "longitude", "lng", "x", "x_coord")
NAME_PATTERNS = ("name", "title", "address", "location", "id", "incident_id")
TYPE_PATTERNS = ("type", "category", "incident_type", "class")

ID_FIELDS = ("id", "incident_id")

DEFAULT_NAME = "Location"
DEFAULT_TYPE = "Unknown"


@dataclass(frozen=True)
class GeoPoint:
    id: Union[str, int, float]
    lat: float
    lon: float
    name: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "lat": self.lat,
            "lon": self.lon,
            "name": self.name,
            "type": self.type,
        }


@dataclass(frozen=True)
class _GeoFields:
    lat: Optional[str]
    lon: Optional[str]
    name: Optional[str]
    type: Optional[str]


def find_field_by_pattern(keys: Sequence[str], patterns: Iterable[str]) -> Optional[str]:
    """Return the first key matching the highest-priority pattern, if any."""
    lowered = [(key, key.lower()) for key in keys]
    for pattern in patterns:
        needle = pattern.lower()
        for key, low in lowered:
            if needle in low:
                return key
    return None


def discover_fields(keys: Sequence[str]) -> _GeoFields:
    return _GeoFields(
        lat=find_field_by_pattern(keys, LATITUDE_PATTERNS),
        lon=find_field_by_pattern(keys, LONGITUDE_PATTERNS),
        name=find_field_by_pattern(keys, NAME_PATTERNS),
        type=find_field_by_pattern(keys, TYPE_PATTERNS),
    )


def is_valid_coordinate(lat: float, lon: float) -> bool:
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def _point_id(record: Dict[str, Any]) -> Union[str, int, float]:
    for key in ID_FIELDS:
        value = record.get(key)
        if not is_falsy(value):
            return value
    return str(uuid.uuid4())


def _label(record: Dict[str, Any], field: Optional[str], default: str) -> str:
    if field is None:
        return default
    value = record.get(field)
    if is_falsy(value):
        return default
    return to_display_string(value)


def record_to_point(record: Dict[str, Any], fields: _GeoFields) -> Optional[GeoPoint]:
    """Build a GeoPoint from one record, or None when it is not plottable."""
    if not fields.lat or not fields.lon:
        return None

    lat = parse_float(record.get(fields.lat))
    lon = parse_float(record.get(fields.lon))
    if not is_valid_coordinate(lat, lon):
        return None

    return GeoPoint(
        id=_point_id(record),
        lat=lat,
        lon=lon,
        name=_label(record, fields.name, DEFAULT_NAME),
        type=_label(record, fields.type, DEFAULT_TYPE),
    )


def extract_geo_points(records: Optional[Sequence[Dict[str, Any]]]) -> List[GeoPoint]:
    """
    Extract every valid geographic point from a parsed dataset.

    Args:
        records: Parsed rows (mappings of column name to cell value)

    Returns:
        GeoPoints in record order; never more points than records
    """
    if not records:
        return []

    cache: Dict[Tuple[str, ...], _GeoFields] = {}
    points: List[GeoPoint] = []

    for record in records:
        if not isinstance(record, dict):
            continue
        keys = tuple(record.keys())
        fields = cache.get(keys)
        if fields is None:
            fields = discover_fields(keys)
            cache[keys] = fields

        point = record_to_point(record, fields)
        if point is not None:
            points.append(point)

    logger.info(
        "extract_geo_points: %d of %d records plottable (%d field layouts)",
        len(points), len(records), len(cache),
    )
    return points
