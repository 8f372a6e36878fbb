"""
Shared pytest fixtures for the migrator test suite.
"""

import pytest
from pathlib import Path
from typing import AsyncGenerator, Dict, Any, List

from httpx import AsyncClient, ASGITransport
from migrator.main import app
from migrator.services.dataset_store import DatasetStore, dataset_store


SAMPLE_CSV = Path(__file__).resolve().parent.parent / "migrator" / "sample_data" / "baltimore_incidents.csv"


@pytest.fixture(autouse=True)
def reset_dataset_store():
    """Start every test with an empty global store."""
    dataset_store.reset()
    yield
    dataset_store.reset()


@pytest.fixture
def store() -> DatasetStore:
    """Provide a fresh, isolated DatasetStore."""
    return DatasetStore()


@pytest.fixture
def sample_csv_bytes() -> bytes:
    """Raw bytes of the bundled incidents CSV."""
    return SAMPLE_CSV.read_bytes()


@pytest.fixture
def order_records() -> List[Dict[str, Any]]:
    """Orders with a unique customer_id and a repeating order_id."""
    return [
        {"customer_id": 1, "order_id": 10, "amount": 25.5},
        {"customer_id": 2, "order_id": 10, "amount": 12.0},
        {"customer_id": 3, "order_id": 11, "amount": 99.99},
        {"customer_id": 4, "order_id": 12, "amount": 7},
    ]


@pytest.fixture
def incident_records() -> List[Dict[str, Any]]:
    """Small geographic dataset in the shape the file parser produces."""
    return [
        {"incident_id": 1, "incident_date": "2023-05-01", "address": "200 E Pratt St",
         "latitude": 39.2868, "longitude": -76.6122, "incident_type": "Theft"},
        {"incident_id": 2, "incident_date": "2023-05-02", "address": "1 E Pratt St",
         "latitude": None, "longitude": -76.6147, "incident_type": "Burglary"},
        {"incident_id": 3, "incident_date": "2023-05-03", "address": "",
         "latitude": 39.3289, "longitude": -76.6205, "incident_type": "Theft"},
    ]


@pytest.fixture
async def test_client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
