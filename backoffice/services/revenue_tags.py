"""
Revenue tags: named events with a typical revenue impact, applied to dates
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.exceptions import ValidationError
from backoffice.models.revenue_tag import RevenueTag, TaggedDate
from backoffice.schemas.forecast import RevenueTagResponse, TaggedDateResponse
from backoffice.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class RevenueTagService:

    def __init__(self, session_factory: async_sessionmaker):
        self.tags = RecordStore(session_factory, RevenueTag, RevenueTagResponse)
        self.tagged_dates = RecordStore(session_factory, TaggedDate, TaggedDateResponse)

    async def create_tag(self, data: Dict[str, Any]) -> RevenueTagResponse:
        if not (data.get("name") or "").strip():
            raise ValidationError("name", "Tag name is required")
        if data.get("occurrence_count", 0) < 0:
            raise ValidationError("occurrence_count", "Occurrence count cannot be negative")
        return await self.tags.create({**data, "name": data["name"].strip()})

    async def list_tags(self) -> List[RevenueTagResponse]:
        return await self.tags.list(order_by=("name",))

    async def tag_date(
        self,
        day: date,
        tag_id: int,
        manual_food_revenue_impact: Optional[float] = None,
        manual_beverage_revenue_impact: Optional[float] = None,
    ) -> TaggedDateResponse:
        """Tag a date (replacing any tag already on it) and count the occurrence"""
        tag = await self.tags.get(tag_id)
        values = {
            "tag_id": tag_id,
            "manual_food_revenue_impact": manual_food_revenue_impact,
            "manual_beverage_revenue_impact": manual_beverage_revenue_impact,
        }

        existing = await self.tagged_dates.list(date_field="date", start=day, end=day)
        if existing:
            tagged = await self.tagged_dates.update(existing[0].id, values)
        else:
            tagged = await self.tagged_dates.create({**values, "date": day})

        await self.tags.update(tag_id, {"occurrence_count": tag.occurrence_count + 1})
        logger.info(f"Tagged {day} as '{tag.name}'")
        return tagged

    async def list_tagged_dates(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[TaggedDateResponse]:
        return await self.tagged_dates.list(order_by=("date",), date_field="date", start=start, end=end)

    async def remove_tagged_date(self, tagged_date_id: int) -> None:
        await self.tagged_dates.delete(tagged_date_id)
