"""
Pydantic shapes for forecasting: weather, baselines, tags and forecast output
"""
from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel

from backoffice.models.enums import DayOfWeek


class WeatherForecast(BaseModel):
    date: str  # ISO yyyy-mm-dd
    description: str
    temperature: float
    precipitation: float
    wind_speed: float


class DayOfWeekBaseline(BaseModel):
    avg_food_revenue: float
    avg_bev_revenue: float
    count: int


class WeatherImpactStats(BaseModel):
    average_food_revenue: float
    average_bev_revenue: float
    count: int


# day -> general weather condition -> stats
WeatherImpactTable = Dict[DayOfWeek, Dict[str, WeatherImpactStats]]


class RevenueForecastResponse(BaseModel):
    date: str
    day_of_week: DayOfWeek
    food_revenue: float
    beverage_revenue: float
    total_revenue: float
    weather_description: str
    temperature: float
    precipitation: float
    wind_speed: float
    confidence: int


class SavedForecastResponse(RevenueForecastResponse):
    id: int
    date: date

    class Config:
        from_attributes = True


class WeekForecast(BaseModel):
    week_number: int
    week_start: str
    week_end: str
    label: str
    uses_live_weather: bool
    days: List[RevenueForecastResponse]
    total_food_revenue: float
    total_beverage_revenue: float
    total_revenue: float


# --- Revenue tags ---

class RevenueTagCreate(BaseModel):
    name: str = "New Event"
    description: Optional[str] = None
    historical_food_revenue_impact: float = 0
    historical_beverage_revenue_impact: float = 0
    occurrence_count: int = 0


class RevenueTagResponse(RevenueTagCreate):
    id: int

    class Config:
        from_attributes = True


class TagDateRequest(BaseModel):
    date: date
    tag_id: int
    manual_food_revenue_impact: Optional[float] = None
    manual_beverage_revenue_impact: Optional[float] = None


class TaggedDateResponse(BaseModel):
    id: int
    date: date
    tag_id: int
    manual_food_revenue_impact: Optional[float] = None
    manual_beverage_revenue_impact: Optional[float] = None

    class Config:
        from_attributes = True


# --- Historical daily records ---

class DailyRecordCreate(BaseModel):
    date: date
    food_revenue: float = 0
    beverage_revenue: float = 0
    lunch_covers: int = 0
    dinner_covers: int = 0
    weather_description: Optional[str] = None
    temperature: Optional[float] = None
    precipitation: Optional[float] = None
    wind_speed: Optional[float] = None
    local_events: Optional[str] = None
    operations_notes: Optional[str] = None


class DailyRecordResponse(DailyRecordCreate):
    id: int
    day_of_week: DayOfWeek
    total_revenue: float

    class Config:
        from_attributes = True
