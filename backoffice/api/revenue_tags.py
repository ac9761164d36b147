"""
Revenue tag API endpoints: event tags and the dates they apply to
"""
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import List, Optional

from backoffice.database import get_session_factory
from backoffice.schemas.forecast import (
    RevenueTagCreate,
    RevenueTagResponse,
    TagDateRequest,
    TaggedDateResponse,
)
from backoffice.services.revenue_tags import RevenueTagService

router = APIRouter()


def get_revenue_tag_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> RevenueTagService:
    return RevenueTagService(session_factory)


@router.get("/", response_model=List[RevenueTagResponse])
async def list_tags(service: RevenueTagService = Depends(get_revenue_tag_service)):
    return await service.list_tags()


@router.post("/", response_model=RevenueTagResponse)
async def create_tag(
    data: RevenueTagCreate,
    service: RevenueTagService = Depends(get_revenue_tag_service),
):
    return await service.create_tag(data.model_dump())


@router.get("/dates", response_model=List[TaggedDateResponse])
async def list_tagged_dates(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: RevenueTagService = Depends(get_revenue_tag_service),
):
    return await service.list_tagged_dates(start, end)


@router.post("/dates", response_model=TaggedDateResponse)
async def tag_date(
    data: TagDateRequest,
    service: RevenueTagService = Depends(get_revenue_tag_service),
):
    return await service.tag_date(
        data.date,
        data.tag_id,
        data.manual_food_revenue_impact,
        data.manual_beverage_revenue_impact,
    )


@router.delete("/dates/{tagged_date_id}")
async def remove_tagged_date(
    tagged_date_id: int,
    service: RevenueTagService = Depends(get_revenue_tag_service),
):
    await service.remove_tagged_date(tagged_date_id)
    return {"message": "Tag removed from date"}
