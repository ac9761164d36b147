"""
Shared enumerations for rota and forecast models
"""
from datetime import date
from enum import Enum


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        # date.weekday(): 0=Monday, 6=Sunday
        return list(cls)[value.weekday()]


class Segment(str, Enum):
    DAY = "day"
    EVENING = "evening"


class Department(str, Enum):
    FOH = "foh"
    KITCHEN = "kitchen"
    KP = "kp"
