"""
Revenue forecast engine

Forecasts food and beverage revenue per day from a weekday baseline (trailing
history), a weather adjustment (how that weekday traded under similar weather)
and date tags (bank holidays, events). Store and weather reads are fanned out
concurrently, then reduced by the pure functions below.
"""
import asyncio
import logging
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import async_sessionmaker

from backoffice.config import Settings, get_settings
from backoffice.exceptions import ExternalFetchFailure
from backoffice.models.daily_record import DailyRecord
from backoffice.models.enums import DayOfWeek
from backoffice.models.forecast import RevenueForecast
from backoffice.models.revenue_tag import RevenueTag, TaggedDate
from backoffice.schemas.forecast import (
    DailyRecordResponse,
    DayOfWeekBaseline,
    RevenueForecastResponse,
    RevenueTagResponse,
    SavedForecastResponse,
    TaggedDateResponse,
    WeatherForecast,
    WeatherImpactStats,
    WeatherImpactTable,
    WeekForecast,
)
from backoffice.services.record_store import RecordStore
from backoffice.services.weather import (
    NOT_AVAILABLE,
    WeatherProvider,
    fetch_weather_forecast,
    map_to_general_condition,
)
from backoffice.utils.helpers import subtract_months, week_label, week_start

logger = logging.getLogger(__name__)

CONFIDENCE_CAP = 95
NO_WEATHER_CONFIDENCE = 40
WEATHER_CONFIDENCE_BONUS = 10
WEATHER_BONUS_MIN_COUNT = 5
TAG_CONFIDENCE_BONUS = 5
TAG_BONUS_MIN_OCCURRENCES = 3

# Conservative (food, beverage) averages for weekdays with no history
DEFAULT_BASELINES: Dict[DayOfWeek, Tuple[float, float]] = {
    DayOfWeek.MONDAY: (600.0, 500.0),
    DayOfWeek.TUESDAY: (650.0, 550.0),
    DayOfWeek.WEDNESDAY: (700.0, 600.0),
    DayOfWeek.THURSDAY: (850.0, 750.0),
    DayOfWeek.FRIDAY: (1200.0, 1300.0),
    DayOfWeek.SATURDAY: (1400.0, 1500.0),
    DayOfWeek.SUNDAY: (1300.0, 900.0),
}

# Illustrative (food, beverage) factors used when history cannot be read.
# Rows carry count=0 so they never move a forecast.
FALLBACK_CONDITION_FACTORS: Dict[str, Tuple[float, float]] = {
    "Sunny": (1.10, 1.25),
    "Partly cloudy": (1.05, 1.05),
    "Cloudy": (1.0, 0.95),
    "Light rain": (0.95, 0.85),
    "Heavy rain": (0.85, 0.70),
}


def base_confidence(sample_count: int) -> int:
    if sample_count >= 10:
        return 85
    if sample_count >= 5:
        return 75
    if sample_count > 0:
        return 65
    return 50


def default_baseline(day: DayOfWeek) -> DayOfWeekBaseline:
    food, bev = DEFAULT_BASELINES[day]
    return DayOfWeekBaseline(avg_food_revenue=food, avg_bev_revenue=bev, count=0)


def compute_baselines(records: Sequence[DailyRecordResponse]) -> Dict[DayOfWeek, DayOfWeekBaseline]:
    """Average food and beverage revenue per weekday; empty weekdays get DEFAULT_BASELINES"""
    buckets: Dict[DayOfWeek, List[DailyRecordResponse]] = defaultdict(list)
    for record in records:
        buckets[DayOfWeek.from_date(record.date)].append(record)

    baselines = {}
    for day in DayOfWeek:
        samples = buckets.get(day)
        if not samples:
            baselines[day] = default_baseline(day)
            continue
        baselines[day] = DayOfWeekBaseline(
            avg_food_revenue=sum(r.food_revenue for r in samples) / len(samples),
            avg_bev_revenue=sum(r.beverage_revenue for r in samples) / len(samples),
            count=len(samples),
        )
    return baselines


def compute_weather_impact(records: Sequence[DailyRecordResponse]) -> WeatherImpactTable:
    """Average revenue per (weekday, general weather condition)"""
    buckets: Dict[Tuple[DayOfWeek, str], List[DailyRecordResponse]] = defaultdict(list)
    for record in records:
        if not record.weather_description:
            continue
        condition = map_to_general_condition(record.weather_description)
        buckets[(DayOfWeek.from_date(record.date), condition)].append(record)

    table: WeatherImpactTable = {day: {} for day in DayOfWeek}
    for (day, condition), samples in buckets.items():
        table[day][condition] = WeatherImpactStats(
            average_food_revenue=sum(r.food_revenue for r in samples) / len(samples),
            average_bev_revenue=sum(r.beverage_revenue for r in samples) / len(samples),
            count=len(samples),
        )
    return table


def fallback_weather_impact() -> WeatherImpactTable:
    """
    Illustrative table shown when history cannot be read. Rows carry count=0,
    so build_day_forecast never applies them as a correction.
    """
    table: WeatherImpactTable = {}
    for day in DayOfWeek:
        food, bev = DEFAULT_BASELINES[day]
        table[day] = {
            condition: WeatherImpactStats(
                average_food_revenue=round(food * food_factor, 2),
                average_bev_revenue=round(bev * bev_factor, 2),
                count=0,
            )
            for condition, (food_factor, bev_factor) in FALLBACK_CONDITION_FACTORS.items()
        }
    return table


def _multiplier(impact_avg: float, baseline_avg: float) -> Optional[float]:
    if baseline_avg == 0:
        return None
    value = impact_avg / baseline_avg
    return value if math.isfinite(value) else None


def tag_deltas(tagged: TaggedDateResponse, tag: RevenueTagResponse) -> Tuple[float, float]:
    """Percent deltas for a tagged date; manual values win per stream"""
    food = tagged.manual_food_revenue_impact
    bev = tagged.manual_beverage_revenue_impact
    return (
        tag.historical_food_revenue_impact if food is None else food,
        tag.historical_beverage_revenue_impact if bev is None else bev,
    )


def build_day_forecast(
    weather: WeatherForecast,
    baseline: DayOfWeekBaseline,
    impact_table: Optional[WeatherImpactTable] = None,
    tagged: Optional[TaggedDateResponse] = None,
    tag: Optional[RevenueTagResponse] = None,
    use_averages_only: bool = False,
) -> RevenueForecastResponse:
    """
    Forecast one day.

    The weather adjustment applies only in live mode, when weather is
    available and the (weekday, condition) pair has history. A stream whose
    multiplier is undefined (zero baseline) is left at its baseline. Tag
    deltas apply in both modes. Unavailable weather forces confidence to 40.
    """
    day = date.fromisoformat(weather.date)
    day_of_week = DayOfWeek.from_date(day)

    food = baseline.avg_food_revenue
    bev = baseline.avg_bev_revenue
    confidence = base_confidence(baseline.count)
    weather_available = weather.description != NOT_AVAILABLE

    if not use_averages_only and weather_available and impact_table:
        condition = map_to_general_condition(weather.description)
        impact = impact_table.get(day_of_week, {}).get(condition)
        if impact is not None and impact.count > 0:
            food_multiplier = _multiplier(impact.average_food_revenue, baseline.avg_food_revenue)
            bev_multiplier = _multiplier(impact.average_bev_revenue, baseline.avg_bev_revenue)
            if food_multiplier is not None:
                food *= food_multiplier
            if bev_multiplier is not None:
                bev *= bev_multiplier
            if impact.count >= WEATHER_BONUS_MIN_COUNT:
                confidence = min(confidence + WEATHER_CONFIDENCE_BONUS, CONFIDENCE_CAP)

    if tagged is not None and tag is not None:
        food_delta, bev_delta = tag_deltas(tagged, tag)
        food *= 1 + food_delta / 100
        bev *= 1 + bev_delta / 100
        if tag.occurrence_count >= TAG_BONUS_MIN_OCCURRENCES:
            confidence = min(confidence + TAG_CONFIDENCE_BONUS, CONFIDENCE_CAP)

    if not weather_available:
        confidence = NO_WEATHER_CONFIDENCE

    food = round(food, 2)
    bev = round(bev, 2)
    return RevenueForecastResponse(
        date=weather.date,
        day_of_week=day_of_week,
        food_revenue=food,
        beverage_revenue=bev,
        total_revenue=round(food + bev, 2),
        weather_description=weather.description,
        temperature=weather.temperature,
        precipitation=weather.precipitation,
        wind_speed=weather.wind_speed,
        confidence=confidence,
    )


def summarize_week(
    start: date, days: List[RevenueForecastResponse], uses_live_weather: bool
) -> WeekForecast:
    total_food = round(sum(d.food_revenue for d in days), 2)
    total_bev = round(sum(d.beverage_revenue for d in days), 2)
    return WeekForecast(
        week_number=start.isocalendar()[1],
        week_start=start.isoformat(),
        week_end=(start + timedelta(days=6)).isoformat(),
        label=week_label(start),
        uses_live_weather=uses_live_weather,
        days=days,
        total_food_revenue=total_food,
        total_beverage_revenue=total_bev,
        total_revenue=round(total_food + total_bev, 2),
    )


class ForecastService:

    def __init__(
        self,
        session_factory: async_sessionmaker,
        weather_provider: WeatherProvider,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.weather_provider = weather_provider
        self.records = RecordStore(session_factory, DailyRecord, DailyRecordResponse)
        self.tags = RecordStore(session_factory, RevenueTag, RevenueTagResponse)
        self.tagged_dates = RecordStore(session_factory, TaggedDate, TaggedDateResponse)
        self.saved = RecordStore(session_factory, RevenueForecast, SavedForecastResponse)

    async def _history(self, today: date) -> List[DailyRecordResponse]:
        window_start = subtract_months(today, self.settings.HISTORY_WINDOW_MONTHS)
        return await self.records.list(
            order_by=("date",), date_field="date", start=window_start, end=today
        )

    async def calculate_day_of_week_baselines(
        self, today: Optional[date] = None
    ) -> Dict[DayOfWeek, DayOfWeekBaseline]:
        """Baselines over the trailing history window; read failures propagate"""
        return compute_baselines(await self._history(today or date.today()))

    async def analyze_weather_impact(self, today: Optional[date] = None) -> WeatherImpactTable:
        try:
            records = await self._history(today or date.today())
        except ExternalFetchFailure as e:
            logger.warning(f"Weather impact history unavailable, using fallback table: {e}")
            return fallback_weather_impact()
        return compute_weather_impact(records)

    async def _weather(self, start: date, end: date, today: date) -> List[WeatherForecast]:
        return await fetch_weather_forecast(
            self.weather_provider,
            start,
            end,
            today,
            self.settings.SITE_LATITUDE,
            self.settings.SITE_LONGITUDE,
            self.settings.FORECAST_HORIZON_DAYS,
        )

    async def _no_impact(self) -> None:
        return None

    async def generate_revenue_forecast(
        self,
        start: date,
        end: date,
        use_averages_only: bool = False,
        today: Optional[date] = None,
    ) -> List[RevenueForecastResponse]:
        """One forecast per calendar day in [start, end]"""
        if end < start:
            return []
        today = today or date.today()
        logger.info(
            f"Generating revenue forecast from {start} to {end}"
            f"{' (averages only)' if use_averages_only else ''}"
        )

        weather, baselines, impact_table, tags, tagged_dates = await asyncio.gather(
            self._weather(start, end, today),
            self.calculate_day_of_week_baselines(today),
            self._no_impact() if use_averages_only else self.analyze_weather_impact(today),
            self.tags.list(),
            self.tagged_dates.list(order_by=("date",), date_field="date", start=start, end=end),
        )

        tags_by_id = {t.id: t for t in tags}
        tagged_by_date = {t.date.isoformat(): t for t in tagged_dates}

        forecasts = []
        for day_weather in weather:
            day_of_week = DayOfWeek.from_date(date.fromisoformat(day_weather.date))
            tagged = tagged_by_date.get(day_weather.date)
            forecasts.append(build_day_forecast(
                day_weather,
                baselines[day_of_week],
                impact_table,
                tagged,
                tags_by_id.get(tagged.tag_id) if tagged else None,
                use_averages_only,
            ))
        return forecasts

    async def generate_future_weeks_forecast(
        self, num_weeks: Optional[int] = None, today: Optional[date] = None
    ) -> List[WeekForecast]:
        """
        The current ISO week plus num_weeks following weeks. Only the current
        week uses live weather; later weeks are averages only.
        """
        today = today or date.today()
        if num_weeks is None:
            num_weeks = self.settings.FORECAST_FUTURE_WEEKS
        first_monday = week_start(today)
        starts = [first_monday + timedelta(weeks=i) for i in range(num_weeks + 1)]

        weeks = await asyncio.gather(*[
            self.generate_revenue_forecast(
                start, start + timedelta(days=6), use_averages_only=i > 0, today=today
            )
            for i, start in enumerate(starts)
        ])
        return [
            summarize_week(start, days, uses_live_weather=i == 0)
            for i, (start, days) in enumerate(zip(starts, weeks))
        ]

    async def save_forecast(
        self, forecasts: Sequence[RevenueForecastResponse]
    ) -> List[SavedForecastResponse]:
        """Upsert forecasts by date"""
        if not forecasts:
            return []
        dates = [date.fromisoformat(f.date) for f in forecasts]
        existing = await self.saved.list(
            order_by=("date",), date_field="date", start=min(dates), end=max(dates)
        )
        existing_by_date = {row.date: row for row in existing}

        saved = []
        for forecast, day in zip(forecasts, dates):
            data = {**forecast.model_dump(), "date": day}
            current = existing_by_date.get(day)
            if current is None:
                saved.append(await self.saved.create(data))
            else:
                saved.append(await self.saved.update(current.id, data))
        logger.info(f"Saved {len(saved)} revenue forecasts ({min(dates)} to {max(dates)})")
        return saved

    async def list_saved_forecasts(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> List[SavedForecastResponse]:
        return await self.saved.list(order_by=("date",), date_field="date", start=start, end=end)
