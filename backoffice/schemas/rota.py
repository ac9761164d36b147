"""
Pydantic shapes for rota configuration: thresholds, shift rules, job roles
"""
from typing import List, Optional
from pydantic import BaseModel

from backoffice.models.enums import DayOfWeek, Segment, Department


# --- Revenue thresholds ---

class ThresholdBase(BaseModel):
    name: str
    day_of_week: DayOfWeek
    segment: Segment
    revenue_min: float
    revenue_max: float
    foh_min_staff: int
    foh_max_staff: int
    kitchen_min_staff: int
    kitchen_max_staff: int
    kp_min_staff: int
    kp_max_staff: int
    target_cost_percentage: float


class ThresholdCreate(ThresholdBase):
    location_id: int


class ThresholdUpdate(BaseModel):
    name: Optional[str] = None
    day_of_week: Optional[DayOfWeek] = None
    segment: Optional[Segment] = None
    revenue_min: Optional[float] = None
    revenue_max: Optional[float] = None
    foh_min_staff: Optional[int] = None
    foh_max_staff: Optional[int] = None
    kitchen_min_staff: Optional[int] = None
    kitchen_max_staff: Optional[int] = None
    kp_min_staff: Optional[int] = None
    kp_max_staff: Optional[int] = None
    target_cost_percentage: Optional[float] = None


class ThresholdResponse(ThresholdBase):
    id: int
    location_id: int

    class Config:
        from_attributes = True


class ThresholdBatchItem(ThresholdBase):
    """Entry of a bulk save; rows without an id are inserted"""
    id: Optional[int] = None


class StaffRange(BaseModel):
    min_staff: int
    max_staff: int


class StaffingRequirement(BaseModel):
    threshold_id: int
    threshold_name: str
    day_of_week: DayOfWeek
    segment: Segment
    revenue_min: float
    revenue_max: float
    foh: StaffRange
    kitchen: StaffRange
    kp: StaffRange
    target_cost_percentage: float


class SegmentStaffing(BaseModel):
    segment: Segment
    requirement: Optional[StaffingRequirement] = None  # None = no band configured


class DayStaffingRecommendation(BaseModel):
    date: str
    day_of_week: DayOfWeek
    forecast_revenue: float
    segments: List[SegmentStaffing]


# --- Shift rules ---

class ShiftTroughBase(BaseModel):
    start_time: str
    end_time: str
    max_staff_override: int


class ShiftTroughResponse(ShiftTroughBase):
    id: int
    shift_rule_id: int

    class Config:
        from_attributes = True


class ShiftRuleBase(BaseModel):
    job_role_id: int
    name: Optional[str] = None
    day_of_week: DayOfWeek
    start_time: str = "09:00"
    end_time: str = "17:00"
    min_staff: int = 1
    max_staff: int = 1
    priority: int = 3
    revenue_to_staff_ratio: Optional[float] = None


class ShiftRuleCreate(ShiftRuleBase):
    location_id: int
    troughs: List[ShiftTroughBase] = []


class ShiftRuleUpdate(BaseModel):
    job_role_id: Optional[int] = None
    name: Optional[str] = None
    day_of_week: Optional[DayOfWeek] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    min_staff: Optional[int] = None
    max_staff: Optional[int] = None
    priority: Optional[int] = None
    revenue_to_staff_ratio: Optional[float] = None
    troughs: Optional[List[ShiftTroughBase]] = None


class ShiftRuleResponse(ShiftRuleBase):
    id: int
    location_id: int
    archived: bool = False
    marked_for_deletion: bool = False
    troughs: List[ShiftTroughResponse] = []

    class Config:
        from_attributes = True


class ShiftRuleListResponse(BaseModel):
    active: List[ShiftRuleResponse]
    archived: List[ShiftRuleResponse]


# --- Job roles & title mappings ---

class JobRoleCreate(BaseModel):
    location_id: int
    name: str
    department: Department


class JobRoleResponse(BaseModel):
    id: int
    location_id: int
    name: str
    department: Department
    is_active: bool = True

    class Config:
        from_attributes = True


class RoleMappingCreate(BaseModel):
    location_id: int
    job_title: str


class RoleMappingResponse(BaseModel):
    id: int
    location_id: int
    job_role_id: int
    job_title: str
    priority: int

    class Config:
        from_attributes = True


class ReorderRequest(BaseModel):
    location_id: int
    from_index: int
    to_index: int
