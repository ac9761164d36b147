"""
Historical daily trading record (revenue, covers, weather)
"""
from sqlalchemy import Column, Integer, String, Date, Float, Text, Enum as SQLEnum
from backoffice.database import Base
from backoffice.models.enums import DayOfWeek


class DailyRecord(Base):
    __tablename__ = "master_daily_records"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)
    day_of_week = Column(SQLEnum(DayOfWeek, native_enum=False), nullable=False)

    food_revenue = Column(Float, nullable=False, default=0)
    beverage_revenue = Column(Float, nullable=False, default=0)
    total_revenue = Column(Float, nullable=False, default=0)

    lunch_covers = Column(Integer, nullable=False, default=0)
    dinner_covers = Column(Integer, nullable=False, default=0)

    weather_description = Column(String, nullable=True)
    temperature = Column(Float, nullable=True)
    precipitation = Column(Float, nullable=True)
    wind_speed = Column(Float, nullable=True)

    local_events = Column(Text, nullable=True)
    operations_notes = Column(Text, nullable=True)
