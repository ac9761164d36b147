"""
Historical daily trading records, the input to baselines and weather impact
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.exceptions import ValidationError
from backoffice.models.daily_record import DailyRecord
from backoffice.models.enums import DayOfWeek
from backoffice.schemas.forecast import DailyRecordCreate, DailyRecordResponse
from backoffice.services.record_store import RecordStore
from backoffice.utils.helpers import format_currency

logger = logging.getLogger(__name__)


class DailyRecordService:

    def __init__(self, session_factory: async_sessionmaker):
        self.store = RecordStore(session_factory, DailyRecord, DailyRecordResponse)

    async def record_day(self, data: DailyRecordCreate) -> DailyRecordResponse:
        """Create or replace the record for data.date"""
        if data.food_revenue < 0:
            raise ValidationError("food_revenue", "Revenue cannot be negative")
        if data.beverage_revenue < 0:
            raise ValidationError("beverage_revenue", "Revenue cannot be negative")

        values = {
            **data.model_dump(),
            "day_of_week": DayOfWeek.from_date(data.date),
            "total_revenue": data.food_revenue + data.beverage_revenue,
        }
        existing = await self.store.list(date_field="date", start=data.date, end=data.date)
        if existing:
            record = await self.store.update(existing[0].id, values)
        else:
            record = await self.store.create(values)
        logger.info(f"Recorded {record.date}: {format_currency(record.total_revenue)}")
        return record

    async def list_records(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[DailyRecordResponse]:
        return await self.store.list(order_by=("date",), date_field="date", start=start, end=end)
