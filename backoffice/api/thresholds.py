"""
Revenue threshold API endpoints: staffing bands per day and segment
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import List, Optional

from backoffice.database import get_session_factory
from backoffice.models.enums import DayOfWeek, Segment
from backoffice.schemas.rota import (
    StaffingRequirement,
    ThresholdBatchItem,
    ThresholdCreate,
    ThresholdResponse,
    ThresholdUpdate,
)
from backoffice.services.staffing_thresholds import (
    ThresholdService,
    lookup_staffing,
    new_band_template,
)

router = APIRouter()


def get_threshold_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> ThresholdService:
    return ThresholdService(session_factory)


@router.get("/", response_model=List[ThresholdResponse])
async def list_thresholds(
    location_id: int,
    day: Optional[DayOfWeek] = None,
    segment: Optional[Segment] = None,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.list_thresholds(location_id, day, segment)


@router.post("/", response_model=ThresholdResponse)
async def create_threshold(
    data: ThresholdCreate,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.create_threshold(data.model_dump())


@router.put("/batch", response_model=List[ThresholdResponse])
async def save_all_thresholds(
    location_id: int,
    items: List[ThresholdBatchItem],
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.save_all(location_id, items)


@router.post("/defaults", response_model=List[ThresholdResponse])
async def seed_default_bands(
    location_id: int,
    day: DayOfWeek,
    segment: Segment,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.seed_default_bands(location_id, day, segment)


@router.get("/template")
async def get_new_band_template(
    location_id: int,
    day: DayOfWeek,
    segment: Segment,
    service: ThresholdService = Depends(get_threshold_service),
):
    """Prefilled values for a band starting where the highest band ends"""
    existing = await service.list_thresholds(location_id, day, segment)
    return new_band_template(existing, day, segment)


@router.get("/lookup", response_model=Optional[StaffingRequirement])
async def lookup_threshold(
    location_id: int,
    day: DayOfWeek,
    segment: Segment,
    revenue: float,
    service: ThresholdService = Depends(get_threshold_service),
):
    """Staffing for a revenue level; null when no band covers it"""
    thresholds = await service.list_thresholds(location_id, day, segment)
    return lookup_staffing(thresholds, revenue, day, segment)


@router.get("/{threshold_id}", response_model=ThresholdResponse)
async def get_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.get_threshold(threshold_id)


@router.put("/{threshold_id}", response_model=ThresholdResponse)
async def update_threshold(
    threshold_id: int,
    data: ThresholdUpdate,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.update_threshold(threshold_id, data.model_dump(exclude_unset=True))


@router.post("/{threshold_id}/duplicate", response_model=ThresholdResponse)
async def duplicate_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    return await service.duplicate_threshold(threshold_id)


@router.delete("/{threshold_id}")
async def delete_threshold(
    threshold_id: int,
    service: ThresholdService = Depends(get_threshold_service),
):
    await service.delete_threshold(threshold_id)
    return {"message": "Threshold deleted"}
