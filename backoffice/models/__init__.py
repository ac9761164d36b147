from backoffice.models.location import Location
from backoffice.models.job_role import JobRole, JobRoleMapping
from backoffice.models.rota_threshold import RevenueThreshold
from backoffice.models.shift_rule import ShiftRule, ShiftTrough
from backoffice.models.revenue_tag import RevenueTag, TaggedDate
from backoffice.models.daily_record import DailyRecord
from backoffice.models.forecast import RevenueForecast

__all__ = [
    "Location",
    "JobRole",
    "JobRoleMapping",
    "RevenueThreshold",
    "ShiftRule",
    "ShiftTrough",
    "RevenueTag",
    "TaggedDate",
    "DailyRecord",
    "RevenueForecast",
]
