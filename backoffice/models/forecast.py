"""
Persisted revenue forecasts
"""
from sqlalchemy import Column, Integer, String, Date, Float, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from backoffice.database import Base
from backoffice.models.enums import DayOfWeek


class RevenueForecast(Base):
    __tablename__ = "revenue_forecasts"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)
    day_of_week = Column(SQLEnum(DayOfWeek, native_enum=False), nullable=False)
    food_revenue = Column(Float, nullable=False)
    beverage_revenue = Column(Float, nullable=False)
    total_revenue = Column(Float, nullable=False)
    weather_description = Column(String, nullable=False)
    temperature = Column(Float, nullable=False, default=0)
    precipitation = Column(Float, nullable=False, default=0)
    wind_speed = Column(Float, nullable=False, default=0)
    confidence = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
