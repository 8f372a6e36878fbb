"""
Datasets API Endpoints

Upload or load a dataset, profile it, and query the held dataset for geo
points, mapping source fields and validation-rule test runs.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from pydantic import BaseModel

from ..core.config import settings
from ..core.exceptions import DatasetNotFoundError
from ..services.dataset_store import StoredDataset, dataset_store
from ..services.file_parser import ParsedFile, load_sample_dataset, parse_file
from ..services.geo_extraction import extract_geo_points
from ..services.profiler import build_source_fields, profile_dataset
from ..services.validation_rules import ValidationRule, evaluate_rules

logger = logging.getLogger("migrator.api.datasets")

router = APIRouter(prefix="/datasets", tags=["Datasets"])


# Pydantic models for API
class ValidationRuleIn(BaseModel):
    id: int
    field: str
    rule: str
    params: Optional[Any] = None
    message: str = ""
    status: str = "active"


def _dataset_response(dataset: StoredDataset) -> Dict[str, Any]:
    return {**dataset.summary(), "profile": dataset.profile.to_dict()}


def _profile_and_store(parsed: ParsedFile) -> StoredDataset:
    profile = profile_dataset(
        parsed.records,
        sample_size=settings.PROFILE_SAMPLE_SIZE,
        key_policy=settings.KEY_NAME_POLICY,
    )
    return dataset_store.put(
        records=parsed.records,
        profile=profile,
        file_name=parsed.file_name,
        file_type=parsed.file_type,
        warnings=parsed.warnings,
    )


def _get_dataset(dataset_id: str) -> StoredDataset:
    # DatasetNotFoundError is answered with 404 by the error middleware
    return dataset_store.get(dataset_id)


@router.post("/upload", status_code=201)
async def upload_dataset(file: UploadFile = File(...)):
    """
    Parse an uploaded CSV/Excel file and profile it.

    The new dataset becomes the current one.
    """
    content = await file.read()
    logger.info("Upload received: %s (%d bytes)", file.filename, len(content))
    parsed = parse_file(content, file.filename or "")
    dataset = _profile_and_store(parsed)
    return {
        **_dataset_response(dataset),
        "message": "File successfully processed and analyzed",
    }


@router.post("/sample", status_code=201)
async def load_sample():
    """Load and profile the bundled Baltimore incidents dataset."""
    parsed = load_sample_dataset()
    dataset = _profile_and_store(parsed)
    return {
        **_dataset_response(dataset),
        "message": "Sample Baltimore incidents data loaded successfully",
    }


@router.get("")
async def list_datasets():
    """List all held datasets."""
    return [d.summary() for d in dataset_store.list_datasets()]


@router.get("/current")
async def get_current_dataset():
    """The most recently uploaded or loaded dataset."""
    dataset = dataset_store.current()
    if not dataset:
        raise HTTPException(status_code=404, detail="No dataset loaded")
    return _dataset_response(dataset)


@router.get("/{dataset_id}")
async def get_dataset(dataset_id: str):
    """Summary and profile of one dataset."""
    return _dataset_response(_get_dataset(dataset_id))


@router.get("/{dataset_id}/profile")
async def get_profile(dataset_id: str):
    return _get_dataset(dataset_id).profile.to_dict()


@router.get("/{dataset_id}/records")
async def get_records(
    dataset_id: str,
    limit: int = Query(default=100, ge=1, le=settings.RECORDS_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
):
    """Parsed records of a dataset, paginated."""
    dataset = _get_dataset(dataset_id)
    records = dataset.records[offset:offset + limit]
    return {
        "dataset_id": dataset_id,
        "records": records,
        "count": len(records),
        "total": len(dataset.records),
        "limit": limit,
        "offset": offset,
    }


@router.get("/{dataset_id}/geo-points")
async def get_geo_points(dataset_id: str):
    """Plottable points of a dataset; rows with bad coordinates are left out."""
    dataset = _get_dataset(dataset_id)
    points = extract_geo_points(dataset.records)
    return {
        "dataset_id": dataset_id,
        "has_gis_data": dataset.profile.has_gis_data,
        "count": len(points),
        "dropped": len(dataset.records) - len(points),
        "points": [p.to_dict() for p in points],
    }


@router.get("/{dataset_id}/source-fields")
async def get_source_fields(dataset_id: str):
    """Source field list for the mapping view."""
    dataset = _get_dataset(dataset_id)
    return [f.to_dict() for f in build_source_fields(dataset.profile)]


@router.post("/{dataset_id}/validate")
async def validate_dataset(dataset_id: str, rules: List[ValidationRuleIn]):
    """Test validation rules against the dataset's records."""
    dataset = _get_dataset(dataset_id)
    results = evaluate_rules(
        dataset.records,
        [ValidationRule(**r.model_dump()) for r in rules],
    )
    return results.to_dict()


@router.delete("/{dataset_id}")
async def delete_dataset(dataset_id: str):
    """Drop a dataset and its profile."""
    if not dataset_store.delete(dataset_id):
        raise DatasetNotFoundError(dataset_id)
    return {"status": "deleted", "dataset_id": dataset_id}
