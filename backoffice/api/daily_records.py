"""
Daily record API endpoints: the trading history behind forecasts
"""
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import List, Optional

from backoffice.database import get_session_factory
from backoffice.schemas.forecast import DailyRecordCreate, DailyRecordResponse
from backoffice.services.daily_records import DailyRecordService

router = APIRouter()


def get_daily_record_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> DailyRecordService:
    return DailyRecordService(session_factory)


@router.get("/", response_model=List[DailyRecordResponse])
async def list_daily_records(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: DailyRecordService = Depends(get_daily_record_service),
):
    return await service.list_records(start, end)


@router.post("/", response_model=DailyRecordResponse)
async def record_day(
    data: DailyRecordCreate,
    service: DailyRecordService = Depends(get_daily_record_service),
):
    return await service.record_day(data)
