"""
Tests for geo-column detection and geo-point extraction.
"""

import math
import uuid

import pytest

from migrator.services.geo_detection import has_geo_columns, has_gis_data, is_geo_column
from migrator.services.geo_extraction import (
    GeoPoint,
    discover_fields,
    extract_geo_points,
    find_field_by_pattern,
    is_valid_coordinate,
)


# ─── Column detection ────────────────────────────────────────────────────


@pytest.mark.parametrize("column", [
    "latitude", "LONGITUDE", "lng", "the_geom", "geometry", "location_desc",
    "x_coord", "y_coord", "pos_x", "y", "X",
])
def test_geo_column_names(column):
    """Test that geographic column names are detected."""
    assert is_geo_column(column)


@pytest.mark.parametrize("column", ["amount", "status", "address", "name", "id"])
def test_plain_column_names(column):
    """Test names without any geographic pattern."""
    assert not is_geo_column(column)


@pytest.mark.parametrize("column", ["city", "type", "year", "max_value"])
def test_axis_letters_match_anywhere(column):
    """Test that "x" and "y" match inside words, like every other pattern."""
    assert is_geo_column(column)


def test_loose_axis_match_flags_dataset():
    """Test that an "x"/"y" inside any column name flags the dataset."""
    assert has_geo_columns(["city", "type"])
    assert has_gis_data([{"name": "a", "category": "b"}])


def test_has_geo_columns():
    """Test dataset-level detection over column names."""
    assert has_geo_columns(["id", "name", "latitude"])
    assert not has_geo_columns(["id", "name"])
    assert not has_geo_columns([])


def test_has_gis_data_uses_first_record():
    """Test the record-level check."""
    assert has_gis_data([{"Lat": 1, "Lon": 2}])
    assert not has_gis_data([{"a": 1}, {"lat": 1}])
    assert not has_gis_data([])
    assert not has_gis_data(None)


# ─── Field discovery ─────────────────────────────────────────────────────


def test_pattern_priority_beats_column_order():
    """Test that the first pattern in priority order wins."""
    keys = ["incident_id", "address", "incident_type"]
    assert find_field_by_pattern(keys, ("name", "address", "id")) == "address"
    assert find_field_by_pattern(keys, ("title",)) is None


def test_discover_fields_for_incidents():
    """Test role discovery for the incidents layout."""
    fields = discover_fields(["incident_id", "address", "latitude", "longitude", "incident_type"])
    assert fields.lat == "latitude"
    assert fields.lon == "longitude"
    assert fields.name == "address"
    assert fields.type == "incident_type"


def test_coordinate_bounds():
    """Test inclusive latitude/longitude bounds."""
    assert is_valid_coordinate(90, -180)
    assert is_valid_coordinate(-90, 180)
    assert not is_valid_coordinate(90.0001, 0)
    assert not is_valid_coordinate(0, 180.5)
    assert not is_valid_coordinate(math.nan, 0)


# ─── Point extraction ────────────────────────────────────────────────────


def test_out_of_range_latitude_is_dropped():
    """Test that only the in-range record becomes a point."""
    records = [
        {"id": "A1", "lat": 39.29, "lon": -76.61, "kind": "Fire"},
        {"id": "A2", "lat": 200, "lon": -76.61, "kind": "EMS"},
    ]
    points = extract_geo_points(records)
    assert len(points) == 1
    point = points[0]
    assert point.id == "A1"
    assert point.lat == 39.29
    assert point.lon == -76.61
    assert point.name == "A1"
    assert point.type == "Unknown"


def test_string_coordinates_are_parsed(incident_records):
    """Test text coordinates and the None-latitude drop."""
    records = [dict(r) for r in incident_records]
    records[0]["latitude"] = "39.2868"
    points = extract_geo_points(records)
    assert [p.id for p in points] == [1, 3]
    assert points[0].lat == 39.2868
    assert points[0].name == "200 E Pratt St"
    assert points[0].type == "Theft"


def test_falsy_name_falls_back_to_default(incident_records):
    """Test the default label when the name cell is empty."""
    points = extract_geo_points(incident_records)
    assert points[-1].name == "Location"


def test_unparseable_coordinates_are_dropped():
    """Test text, None and NaN coordinates."""
    records = [
        {"lat": "abc", "lon": 1},
        {"lat": None, "lon": 1},
        {"lat": math.nan, "lon": 1},
        {"lat": 1, "lon": True},
    ]
    assert extract_geo_points(records) == []


def test_missing_id_gets_generated():
    """Test that a falsy id falls through to a generated UUID."""
    points = extract_geo_points([{"id": 0, "lat": 1, "lon": 2}])
    assert len(points) == 1
    uuid.UUID(points[0].id)


def test_incident_id_used_when_id_missing():
    """Test the incident_id fallback."""
    points = extract_geo_points([{"id": "", "incident_id": 55, "lat": 1, "lon": 2}])
    assert points[0].id == 55


def test_ragged_records_resolve_per_layout():
    """Test records with different keys in one dataset."""
    records = [
        {"latitude": 10, "longitude": 20},
        {"y": 30, "x": 40, "title": "Depot"},
        "not a record",
    ]
    points = extract_geo_points(records)
    assert [(p.lat, p.lon) for p in points] == [(10.0, 20.0), (30.0, 40.0)]
    assert points[1].name == "Depot"


def test_no_coordinate_fields():
    """Test datasets without coordinate columns."""
    assert extract_geo_points([{"name": "a"}]) == []
    assert extract_geo_points([]) == []
    assert extract_geo_points(None) == []


def test_geo_point_wire_shape():
    """Test GeoPoint serialisation."""
    point = GeoPoint(id="A1", lat=1.0, lon=2.0, name="n", type="t")
    assert point.to_dict() == {"id": "A1", "lat": 1.0, "lon": 2.0, "name": "n", "type": "t"}
