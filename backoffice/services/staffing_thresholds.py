"""
Staffing threshold model

Revenue bands per (location, day, segment) map a forecast revenue to min/max
staff counts for front of house, kitchen and kitchen porters. Bands are
half-open, [revenue_min, revenue_max), and are edited by hand, so the model
tolerates gaps (lookup returns None) and overlaps (lowest band wins).
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.exceptions import ValidationError
from backoffice.models.enums import DayOfWeek, Segment
from backoffice.models.rota_threshold import RevenueThreshold
from backoffice.schemas.forecast import RevenueForecastResponse
from backoffice.schemas.rota import (
    DayStaffingRecommendation,
    SegmentStaffing,
    StaffingRequirement,
    StaffRange,
    ThresholdBatchItem,
    ThresholdResponse,
)
from backoffice.services.record_store import RecordStore
from backoffice.utils.validators import validate_threshold

logger = logging.getLogger(__name__)

THRESHOLD_FIELDS = (
    "name", "day_of_week", "segment", "revenue_min", "revenue_max",
    "foh_min_staff", "foh_max_staff", "kitchen_min_staff", "kitchen_max_staff",
    "kp_min_staff", "kp_max_staff", "target_cost_percentage",
)

DEFAULT_REVENUE_BANDS = [
    {"name": "Very Low Revenue", "revenue_min": 0, "revenue_max": 500,
     "foh_min_staff": 1, "foh_max_staff": 2, "kitchen_min_staff": 1, "kitchen_max_staff": 1,
     "kp_min_staff": 0, "kp_max_staff": 1, "target_cost_percentage": 35},
    {"name": "Low Revenue", "revenue_min": 500, "revenue_max": 1000,
     "foh_min_staff": 2, "foh_max_staff": 3, "kitchen_min_staff": 1, "kitchen_max_staff": 2,
     "kp_min_staff": 0, "kp_max_staff": 1, "target_cost_percentage": 32},
    {"name": "Medium Revenue", "revenue_min": 1000, "revenue_max": 2000,
     "foh_min_staff": 3, "foh_max_staff": 4, "kitchen_min_staff": 2, "kitchen_max_staff": 3,
     "kp_min_staff": 1, "kp_max_staff": 1, "target_cost_percentage": 28},
    {"name": "High Revenue", "revenue_min": 2000, "revenue_max": 3500,
     "foh_min_staff": 4, "foh_max_staff": 6, "kitchen_min_staff": 3, "kitchen_max_staff": 4,
     "kp_min_staff": 1, "kp_max_staff": 2, "target_cost_percentage": 25},
    {"name": "Very High Revenue", "revenue_min": 3500, "revenue_max": 10000,
     "foh_min_staff": 6, "foh_max_staff": 8, "kitchen_min_staff": 4, "kitchen_max_staff": 6,
     "kp_min_staff": 1, "kp_max_staff": 2, "target_cost_percentage": 22},
]

NEW_BAND_WIDTH = 1000


def format_revenue_band(revenue_min: float, revenue_max: float) -> str:
    return f"£{revenue_min:,.0f} - £{revenue_max:,.0f}"


def staff_summary(threshold) -> str:
    return (
        f"FOH: {threshold.foh_min_staff}-{threshold.foh_max_staff}, "
        f"Kitchen: {threshold.kitchen_min_staff}-{threshold.kitchen_max_staff}, "
        f"KP: {threshold.kp_min_staff}-{threshold.kp_max_staff}"
    )


def default_revenue_bands(day: DayOfWeek, segment: Segment) -> List[Dict[str, Any]]:
    """Stock bands offered when a location has none configured"""
    return [{**band, "day_of_week": day, "segment": segment} for band in DEFAULT_REVENUE_BANDS]


def new_band_template(existing: Iterable, day: DayOfWeek, segment: Segment) -> Dict[str, Any]:
    """A new band starting where the highest existing band ends"""
    highest_max = max((t.revenue_max for t in existing), default=0)
    return {
        "name": "New Revenue Band",
        "day_of_week": day,
        "segment": segment,
        "revenue_min": highest_max,
        "revenue_max": highest_max + NEW_BAND_WIDTH,
        "foh_min_staff": 2,
        "foh_max_staff": 4,
        "kitchen_min_staff": 1,
        "kitchen_max_staff": 2,
        "kp_min_staff": 0,
        "kp_max_staff": 1,
        "target_cost_percentage": 28,
    }


def to_requirement(threshold: ThresholdResponse) -> StaffingRequirement:
    return StaffingRequirement(
        threshold_id=threshold.id,
        threshold_name=threshold.name,
        day_of_week=threshold.day_of_week,
        segment=threshold.segment,
        revenue_min=threshold.revenue_min,
        revenue_max=threshold.revenue_max,
        foh=StaffRange(min_staff=threshold.foh_min_staff, max_staff=threshold.foh_max_staff),
        kitchen=StaffRange(min_staff=threshold.kitchen_min_staff, max_staff=threshold.kitchen_max_staff),
        kp=StaffRange(min_staff=threshold.kp_min_staff, max_staff=threshold.kp_max_staff),
        target_cost_percentage=threshold.target_cost_percentage,
    )


def lookup_staffing(
    thresholds: Sequence[ThresholdResponse],
    revenue: float,
    day: DayOfWeek,
    segment: Segment,
) -> Optional[StaffingRequirement]:
    """
    Find the staffing requirement for a revenue level.

    Returns None when no band covers the revenue (coverage gap), which callers
    must treat as "no guidance", never as zero staff. Revenue equal to a band's
    revenue_max belongs to the next band. Overlapping bands resolve to the one
    with the smallest revenue_min.
    """
    day = DayOfWeek(day)
    segment = Segment(segment)
    matches = [
        t for t in thresholds
        if t.day_of_week == day
        and t.segment == segment
        and t.revenue_min <= revenue < t.revenue_max
    ]
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(
            f"{len(matches)} overlapping bands match revenue {revenue} on {day.value}/{segment.value}"
        )
    chosen = min(matches, key=lambda t: (t.revenue_min, t.id))
    return to_requirement(chosen)


def recommend_staffing(
    forecasts: Iterable[RevenueForecastResponse],
    thresholds: Sequence[ThresholdResponse],
) -> List[DayStaffingRecommendation]:
    """
    Band lookup for each forecast day, for both segments.

    Forecasts are whole-day figures, so each segment is matched against the
    day's total revenue; bands are configured per segment on that basis.
    """
    recommendations = []
    for forecast in forecasts:
        segments = [
            SegmentStaffing(
                segment=segment,
                requirement=lookup_staffing(
                    thresholds, forecast.total_revenue, forecast.day_of_week, segment
                ),
            )
            for segment in Segment
        ]
        recommendations.append(DayStaffingRecommendation(
            date=forecast.date,
            day_of_week=forecast.day_of_week,
            forecast_revenue=forecast.total_revenue,
            segments=segments,
        ))
    return recommendations


class ThresholdService:
    """Validated persistence for revenue thresholds"""

    def __init__(self, session_factory: async_sessionmaker):
        self.store = RecordStore(session_factory, RevenueThreshold, ThresholdResponse)

    async def list_thresholds(
        self,
        location_id: int,
        day: Optional[DayOfWeek] = None,
        segment: Optional[Segment] = None,
    ) -> List[ThresholdResponse]:
        return await self.store.list(
            order_by=("revenue_min", "id"),
            location_id=location_id,
            day_of_week=day,
            segment=segment,
        )

    async def get_threshold(self, threshold_id: int) -> ThresholdResponse:
        return await self.store.get(threshold_id)

    async def create_threshold(self, data: Dict[str, Any]) -> ThresholdResponse:
        validate_threshold(data)
        threshold = await self.store.create(data)
        logger.info(f"Created threshold {threshold.id} ({threshold.name})")
        return threshold

    async def update_threshold(self, threshold_id: int, patch: Dict[str, Any]) -> ThresholdResponse:
        current = await self.store.get(threshold_id)
        merged = {**current.model_dump(include=set(THRESHOLD_FIELDS)), **patch}
        validate_threshold(merged)
        return await self.store.update(threshold_id, patch)

    async def delete_threshold(self, threshold_id: int) -> None:
        await self.store.delete(threshold_id)
        logger.info(f"Deleted threshold {threshold_id}")

    async def duplicate_threshold(self, threshold_id: int) -> ThresholdResponse:
        source = await self.store.get(threshold_id)
        data = source.model_dump(include=set(THRESHOLD_FIELDS) | {"location_id"})
        data["name"] = f"Copy of {source.name}"
        return await self.create_threshold(data)

    async def save_all(
        self, location_id: int, items: Sequence[ThresholdBatchItem]
    ) -> List[ThresholdResponse]:
        """
        Save the editor's full list: every entry is validated before any write,
        then new entries are inserted and existing ones updated.
        """
        payloads = [item.model_dump(include=set(THRESHOLD_FIELDS)) for item in items]
        for payload in payloads:
            validate_threshold(payload)
        for item in items:
            if item.id is not None:
                current = await self.store.get(item.id)
                if current.location_id != location_id:
                    raise ValidationError(
                        "id", f"Threshold {item.id} belongs to another location"
                    )

        saved = []
        for item, payload in zip(items, payloads):
            if item.id is None:
                saved.append(await self.store.create({**payload, "location_id": location_id}))
            else:
                saved.append(await self.store.update(item.id, payload))
        logger.info(f"Saved {len(saved)} thresholds for location {location_id}")
        return saved

    async def seed_default_bands(
        self, location_id: int, day: DayOfWeek, segment: Segment
    ) -> List[ThresholdResponse]:
        """Insert the stock bands for a (day, segment) that has none yet"""
        existing = await self.list_thresholds(location_id, day, segment)
        if existing:
            return existing
        return [
            await self.create_threshold({**band, "location_id": location_id})
            for band in default_revenue_bands(day, segment)
        ]
