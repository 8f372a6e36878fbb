"""
Profiling API Endpoints

Stateless profiling of records posted as JSON, for callers that parse files
themselves. Nothing is stored.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from ..core.config import settings
from ..services.geo_extraction import extract_geo_points
from ..services.profiler import profile_dataset

router = APIRouter(tags=["Profiling"])


class RecordsPayload(BaseModel):
    records: List[Dict[str, Any]] = Field(default_factory=list)
    sample_size: Optional[int] = Field(None, ge=0, le=1000)


@router.post("/profile")
async def profile_records(payload: RecordsPayload):
    """Profile an array of records."""
    sample_size = payload.sample_size
    if sample_size is None:
        sample_size = settings.PROFILE_SAMPLE_SIZE
    profile = profile_dataset(
        payload.records,
        sample_size=sample_size,
        key_policy=settings.KEY_NAME_POLICY,
    )
    return profile.to_dict()


@router.post("/geo-points")
async def geo_points(payload: RecordsPayload):
    """Extract plottable points from an array of records."""
    points = extract_geo_points(payload.records)
    return {"count": len(points), "points": [p.to_dict() for p in points]}
