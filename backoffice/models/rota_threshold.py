"""
Revenue-banded staffing thresholds
"""
from sqlalchemy import Column, Integer, String, Float, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from backoffice.database import Base
from backoffice.models.enums import DayOfWeek, Segment


class RevenueThreshold(Base):
    """Staffing requirement for one (location, day, segment, revenue band)"""
    __tablename__ = "rota_revenue_thresholds"

    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    day_of_week = Column(SQLEnum(DayOfWeek, native_enum=False), nullable=False)
    segment = Column(SQLEnum(Segment, native_enum=False), nullable=False)

    # Band is half-open: revenue_min <= revenue < revenue_max
    revenue_min = Column(Float, nullable=False)
    revenue_max = Column(Float, nullable=False)

    foh_min_staff = Column(Integer, nullable=False, default=0)
    foh_max_staff = Column(Integer, nullable=False, default=0)
    kitchen_min_staff = Column(Integer, nullable=False, default=0)
    kitchen_max_staff = Column(Integer, nullable=False, default=0)
    kp_min_staff = Column(Integer, nullable=False, default=0)
    kp_max_staff = Column(Integer, nullable=False, default=0)

    target_cost_percentage = Column(Float, nullable=False, default=28)

    location = relationship("Location")
