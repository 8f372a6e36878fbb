"""
Tests for Datasets and Profiling API endpoints.
"""

import pytest
from httpx import AsyncClient


async def _upload(client: AsyncClient, content: bytes, filename: str = "incidents.csv"):
    return await client.post(
        "/api/v1/datasets/upload",
        files={"file": (filename, content, "text/csv")},
    )


@pytest.mark.asyncio
async def test_upload_csv(test_client: AsyncClient, sample_csv_bytes: bytes):
    """Test POST /api/v1/datasets/upload profiles the file."""
    response = await _upload(test_client, sample_csv_bytes)

    assert response.status_code == 201
    data = response.json()
    assert data["file_name"] == "incidents.csv"
    assert data["row_count"] == 20
    profile = data["profile"]
    assert profile["rowCount"] == 20
    assert profile["columnCount"] == 12
    assert profile["hasGisData"] is True
    assert "incident_id" in profile["possiblePrimaryKeys"]
    assert "unit_id" in profile["possibleForeignKeys"]
    assert profile["dataTypes"]["latitude"] == "Number"
    assert profile["dataTypes"]["incident_date"] == "Date"
    assert profile["nullValueCounts"]["latitude"] == 1
    assert len(profile["sample"]) == 5


@pytest.mark.asyncio
async def test_upload_unsupported_format(test_client: AsyncClient):
    """Test that unknown extensions are rejected with 400."""
    response = await _upload(test_client, b"hello", "notes.txt")

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "unsupported_format"
    assert data["message"] == "Unsupported file format: .txt"


@pytest.mark.asyncio
async def test_upload_header_only_file(test_client: AsyncClient):
    """Test that a file without rows cannot be profiled."""
    response = await _upload(test_client, b"a,b\n", "empty.csv")

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "empty_dataset"
    assert data["message"] == "No data to analyze"


@pytest.mark.asyncio
async def test_load_sample_and_list(test_client: AsyncClient):
    """Test POST /api/v1/datasets/sample and listing."""
    response = await test_client.post("/api/v1/datasets/sample")
    assert response.status_code == 201
    dataset_id = response.json()["dataset_id"]

    response = await test_client.get("/api/v1/datasets")
    assert response.status_code == 200
    assert [d["dataset_id"] for d in response.json()] == [dataset_id]

    response = await test_client.get("/api/v1/datasets/current")
    assert response.status_code == 200
    assert response.json()["dataset_id"] == dataset_id


@pytest.mark.asyncio
async def test_current_without_dataset(test_client: AsyncClient):
    """Test GET /api/v1/datasets/current before anything is loaded."""
    response = await test_client.get("/api/v1/datasets/current")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_unknown_dataset(test_client: AsyncClient):
    """Test 404 for a dataset id that does not exist."""
    response = await test_client.get("/api/v1/datasets/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "dataset_not_found"


@pytest.mark.asyncio
async def test_dataset_queries(test_client: AsyncClient):
    """Test records, geo points, source fields and profile of a dataset."""
    dataset_id = (await test_client.post("/api/v1/datasets/sample")).json()["dataset_id"]
    base = f"/api/v1/datasets/{dataset_id}"

    response = await test_client.get(f"{base}/records", params={"limit": 5, "offset": 18})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 2
    assert data["total"] == 20
    assert data["records"][0]["incident_id"] == 1019

    response = await test_client.get(f"{base}/geo-points")
    data = response.json()
    assert data["count"] == 19
    assert data["dropped"] == 1
    point = data["points"][0]
    assert point == {
        "id": 1001,
        "lat": 39.2868,
        "lon": -76.6122,
        "name": "200 E Pratt St",
        "type": "Traffic Accident",
    }

    response = await test_client.get(f"{base}/source-fields")
    fields = response.json()
    assert len(fields) == 12
    assert fields[0] == {"name": "incident_id", "type": "Number", "sample": 1001}

    response = await test_client.get(f"{base}/profile")
    assert response.json()["dateFormats"]["incident_date"] == "YYYY-MM-DD"


@pytest.mark.asyncio
async def test_records_limit_is_validated(test_client: AsyncClient):
    """Test that a zero limit is rejected."""
    dataset_id = (await test_client.post("/api/v1/datasets/sample")).json()["dataset_id"]
    response = await test_client.get(f"/api/v1/datasets/{dataset_id}/records", params={"limit": 0})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_validate_dataset(test_client: AsyncClient):
    """Test POST /api/v1/datasets/{id}/validate runs rules."""
    dataset_id = (await test_client.post("/api/v1/datasets/sample")).json()["dataset_id"]
    rules = [
        {"id": 1, "field": "status", "rule": "required", "message": "Status is required"},
        {"id": 2, "field": "zip", "rule": "regex", "params": r"^\d{5}$", "message": "Bad zip"},
        {"id": 3, "field": "latitude", "rule": "range", "params": {"min": -90, "max": 90},
         "message": "Latitude out of range"},
    ]

    response = await test_client.post(f"/api/v1/datasets/{dataset_id}/validate", json=rules)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 20
    assert data["failed"] == 2
    failed = [r for r in data["records"] if not r["passed"]]
    assert [e["message"] for e in failed[0]["errors"]] == ["Latitude out of range"]
    assert [e["message"] for e in failed[1]["errors"]] == ["Status is required"]


@pytest.mark.asyncio
async def test_delete_dataset(test_client: AsyncClient):
    """Test DELETE /api/v1/datasets/{id}."""
    dataset_id = (await test_client.post("/api/v1/datasets/sample")).json()["dataset_id"]

    response = await test_client.delete(f"/api/v1/datasets/{dataset_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "deleted"

    response = await test_client.delete(f"/api/v1/datasets/{dataset_id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_profile_records(test_client: AsyncClient, order_records):
    """Test POST /api/v1/profile on posted records."""
    response = await test_client.post("/api/v1/profile", json={"records": order_records, "sample_size": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["possiblePrimaryKeys"] == ["customer_id"]
    assert data["possibleForeignKeys"] == ["order_id"]
    assert data["ranges"]["amount"] == {"min": 7, "max": 99.99}
    assert data["sample"] == order_records[:1]


@pytest.mark.asyncio
async def test_profile_empty_records(test_client: AsyncClient):
    """Test that an empty record list is a 422."""
    response = await test_client.post("/api/v1/profile", json={"records": []})

    assert response.status_code == 422
    assert response.json()["error"] == "empty_dataset"


@pytest.mark.asyncio
async def test_geo_points_from_records(test_client: AsyncClient):
    """Test POST /api/v1/geo-points."""
    records = [
        {"id": "A1", "lat": 39.29, "lon": -76.61, "kind": "Fire"},
        {"id": "A2", "lat": 200, "lon": -76.61, "kind": "EMS"},
    ]
    response = await test_client.post("/api/v1/geo-points", json={"records": records})

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["points"][0]["id"] == "A1"


@pytest.mark.asyncio
async def test_upload_with_infinite_cell(test_client: AsyncClient):
    """Test that a CSV with an inf cell uploads and serialises."""
    response = await _upload(test_client, b"id,reading\n1,2.5\n2,inf\n", "readings.csv")

    assert response.status_code == 201
    profile = response.json()["profile"]
    assert profile["dataTypes"]["reading"] == "Number"
    assert profile["ranges"]["reading"] == {"min": 2.5, "max": 2.5}
    assert profile["sample"][1]["reading"] == "inf"


@pytest.mark.asyncio
async def test_validate_with_unusable_params(test_client: AsyncClient):
    """Test that nested rule params fail records instead of erroring."""
    dataset_id = (await test_client.post("/api/v1/datasets/sample")).json()["dataset_id"]
    rules = [{"id": 1, "field": "zip", "rule": "range", "params": [{}, 1], "message": "Bad zip"}]

    response = await test_client.post(f"/api/v1/datasets/{dataset_id}/validate", json=rules)

    assert response.status_code == 200
    assert response.json()["failed"] == 20
