"""
Revenue forecast API endpoints
"""
from datetime import date
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import async_sessionmaker
from typing import Dict, List, Optional

from backoffice.database import get_session_factory
from backoffice.models.enums import DayOfWeek
from backoffice.schemas.forecast import (
    DayOfWeekBaseline,
    RevenueForecastResponse,
    SavedForecastResponse,
    WeatherImpactStats,
    WeekForecast,
)
from backoffice.schemas.rota import DayStaffingRecommendation
from backoffice.services.forecast_service import ForecastService
from backoffice.services.staffing_thresholds import ThresholdService, recommend_staffing
from backoffice.services.weather import OpenMeteoWeatherProvider, WeatherProvider

router = APIRouter()


def get_weather_provider() -> WeatherProvider:
    return OpenMeteoWeatherProvider()


def get_forecast_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    weather_provider: WeatherProvider = Depends(get_weather_provider),
) -> ForecastService:
    return ForecastService(session_factory, weather_provider)


def _check_range(start: date, end: date) -> None:
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")


@router.get("/", response_model=List[RevenueForecastResponse])
async def get_revenue_forecast(
    start: date,
    end: date,
    averages_only: bool = False,
    service: ForecastService = Depends(get_forecast_service),
):
    _check_range(start, end)
    return await service.generate_revenue_forecast(start, end, use_averages_only=averages_only)


@router.get("/weeks", response_model=List[WeekForecast])
async def get_future_weeks_forecast(
    num_weeks: Optional[int] = None,
    service: ForecastService = Depends(get_forecast_service),
):
    if num_weeks is not None and num_weeks < 0:
        raise HTTPException(status_code=400, detail="num_weeks cannot be negative")
    return await service.generate_future_weeks_forecast(num_weeks)


@router.get("/baselines", response_model=Dict[DayOfWeek, DayOfWeekBaseline])
async def get_day_of_week_baselines(
    service: ForecastService = Depends(get_forecast_service),
):
    return await service.calculate_day_of_week_baselines()


@router.get("/weather-impact", response_model=Dict[DayOfWeek, Dict[str, WeatherImpactStats]])
async def get_weather_impact(
    service: ForecastService = Depends(get_forecast_service),
):
    return await service.analyze_weather_impact()


@router.get("/staffing", response_model=List[DayStaffingRecommendation])
async def get_staffing_recommendations(
    location_id: int,
    start: date,
    end: date,
    averages_only: bool = False,
    service: ForecastService = Depends(get_forecast_service),
    session_factory: async_sessionmaker = Depends(get_session_factory),
):
    """Forecast the range, then look up the staffing band for each day and segment"""
    _check_range(start, end)
    forecasts = await service.generate_revenue_forecast(start, end, use_averages_only=averages_only)
    thresholds = await ThresholdService(session_factory).list_thresholds(location_id)
    return recommend_staffing(forecasts, thresholds)


@router.post("/saved", response_model=List[SavedForecastResponse])
async def save_forecasts(
    forecasts: List[RevenueForecastResponse],
    service: ForecastService = Depends(get_forecast_service),
):
    return await service.save_forecast(forecasts)


@router.get("/saved", response_model=List[SavedForecastResponse])
async def list_saved_forecasts(
    start: Optional[date] = None,
    end: Optional[date] = None,
    service: ForecastService = Depends(get_forecast_service),
):
    return await service.list_saved_forecasts(start, end)
