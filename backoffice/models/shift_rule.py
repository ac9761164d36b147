"""
Recurring shift definitions and their quiet (trough) periods
"""
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from backoffice.database import Base
from backoffice.models.enums import DayOfWeek


class ShiftRule(Base):
    __tablename__ = "shift_rules"

    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    job_role_id = Column(Integer, ForeignKey("job_roles.id"), nullable=False)
    name = Column(String, nullable=True)
    day_of_week = Column(SQLEnum(DayOfWeek, native_enum=False), nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)
    min_staff = Column(Integer, nullable=False, default=1)
    max_staff = Column(Integer, nullable=False, default=1)
    priority = Column(Integer, nullable=False, default=3)  # 1 (low) .. 5 (high)
    revenue_to_staff_ratio = Column(Float, nullable=True)
    archived = Column(Boolean, nullable=False, default=False)
    marked_for_deletion = Column(Boolean, nullable=False, default=False)

    job_role = relationship("JobRole")
    troughs = relationship("ShiftTrough", back_populates="shift_rule")


class ShiftTrough(Base):
    """A quiet period inside a shift with a lower staff cap"""
    __tablename__ = "shift_troughs"

    id = Column(Integer, primary_key=True, index=True)
    shift_rule_id = Column(Integer, ForeignKey("shift_rules.id"), nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    max_staff_override = Column(Integer, nullable=False)

    shift_rule = relationship("ShiftRule", back_populates="troughs")
