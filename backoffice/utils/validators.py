"""
Input validation utilities

Each validator raises ValidationError naming the offending field. They run
before anything is written, so a rejected record is never partially saved.
"""
import re
from typing import Any, Dict, Iterable, Mapping

from backoffice.exceptions import ValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

MIN_TARGET_COST_PERCENTAGE = 15
MAX_TARGET_COST_PERCENTAGE = 50

THRESHOLD_REQUIRED = (
    "name", "day_of_week", "segment", "revenue_min", "revenue_max",
    "foh_min_staff", "foh_max_staff", "kitchen_min_staff", "kitchen_max_staff",
    "kp_min_staff", "kp_max_staff", "target_cost_percentage",
)

SHIFT_RULE_REQUIRED = (
    "job_role_id", "day_of_week", "start_time", "end_time", "min_staff", "max_staff",
)

STAFF_PAIRS = (
    ("foh_min_staff", "foh_max_staff"),
    ("kitchen_min_staff", "kitchen_max_staff"),
    ("kp_min_staff", "kp_max_staff"),
)


def validate_time(value: Any, field: str) -> str:
    """Validate a zero-padded 24h "HH:MM" string"""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(field, f"{field} must be a zero-padded HH:MM time, got {value!r}")
    return value


def require_fields(data: Mapping[str, Any], fields: Iterable[str]) -> None:
    """A merged patch may carry explicit nulls; required fields must stay set"""
    for field in fields:
        if data.get(field) is None:
            raise ValidationError(field, f"{field} is required")


def validate_threshold(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a revenue threshold (full record, not a patch)"""
    require_fields(data, THRESHOLD_REQUIRED)
    if data["revenue_min"] >= data["revenue_max"]:
        raise ValidationError("revenue_min", "revenue_min must be lower than revenue_max")

    for min_field, max_field in STAFF_PAIRS:
        if data[min_field] < 0:
            raise ValidationError(min_field, f"{min_field} cannot be negative")
        if data[max_field] < 0:
            raise ValidationError(max_field, f"{max_field} cannot be negative")
        if data[min_field] > data[max_field]:
            raise ValidationError(min_field, f"{min_field} cannot exceed {max_field}")

    pct = data["target_cost_percentage"]
    if not MIN_TARGET_COST_PERCENTAGE <= pct <= MAX_TARGET_COST_PERCENTAGE:
        raise ValidationError(
            "target_cost_percentage",
            f"target_cost_percentage must be between {MIN_TARGET_COST_PERCENTAGE} "
            f"and {MAX_TARGET_COST_PERCENTAGE}",
        )
    return dict(data)


def validate_shift_rule(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate shift rule fields; the job role reference is checked by the service"""
    require_fields(data, SHIFT_RULE_REQUIRED)
    if "priority" in data and data["priority"] is None:
        raise ValidationError("priority", "priority is required")
    start = validate_time(data["start_time"], "start_time")
    end = validate_time(data["end_time"], "end_time")
    # Same-day zero-padded times sort lexicographically
    if start >= end:
        raise ValidationError("end_time", "end_time must be after start_time")

    if data["min_staff"] < 1:
        raise ValidationError("min_staff", "min_staff must be at least 1")
    if data["min_staff"] > data["max_staff"]:
        raise ValidationError("min_staff", "min_staff cannot exceed max_staff")

    if not 1 <= data.get("priority", 3) <= 5:
        raise ValidationError("priority", "priority must be between 1 and 5")

    ratio = data.get("revenue_to_staff_ratio")
    if ratio is not None and ratio <= 0:
        raise ValidationError("revenue_to_staff_ratio", "revenue_to_staff_ratio must be positive")
    return dict(data)


def validate_troughs(troughs: Iterable[Mapping[str, Any]], shift: Mapping[str, Any]) -> None:
    """Trough periods must sit inside the shift and cap staff at or below its maximum"""
    for index, trough in enumerate(troughs):
        prefix = f"troughs[{index}]"
        start = validate_time(trough["start_time"], f"{prefix}.start_time")
        end = validate_time(trough["end_time"], f"{prefix}.end_time")
        if start >= end:
            raise ValidationError(f"{prefix}.end_time", "trough end_time must be after start_time")
        if start < shift["start_time"] or end > shift["end_time"]:
            raise ValidationError(f"{prefix}.start_time", "trough must fall within the shift")
        override = trough["max_staff_override"]
        if override < 0 or override > shift["max_staff"]:
            raise ValidationError(
                f"{prefix}.max_staff_override",
                "max_staff_override must be between 0 and the shift's max_staff",
            )


def validate_job_title(title: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("job_title", "Please enter a job title")
    return cleaned
