"""
Shared builders for tests
"""
from datetime import date

from backoffice.models import DailyRecord, JobRole, Location
from backoffice.models.enums import DayOfWeek, Department


class FakeWeatherProvider:
    """Serves canned daily rows; raises `error` instead when one is set"""

    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.calls = []

    async def fetch_daily(self, latitude, longitude, start, end):
        self.calls.append((start, end))
        if self.error:
            raise self.error
        return [r for r in self.rows if start.isoformat() <= r["date"] <= end.isoformat()]


def weather_row(day: date, code: int = 0, temp_max=18.0, temp_min=10.0, precipitation=0.0, wind=12.0):
    return {
        "date": day.isoformat(),
        "temp_max": temp_max,
        "temp_min": temp_min,
        "precipitation_sum": precipitation,
        "wind_speed_max": wind,
        "weather_code": code,
    }


def daily_record(day: date, food: float, bev: float, weather: str = None) -> DailyRecord:
    return DailyRecord(
        date=day,
        day_of_week=DayOfWeek.from_date(day),
        food_revenue=food,
        beverage_revenue=bev,
        total_revenue=food + bev,
        weather_description=weather,
    )


async def add_location(session_factory, name="The Anchor", code="ANC"):
    """A second site with one FOH role"""
    async with session_factory() as session:
        location = Location(name=name, code=code, latitude=51.9, longitude=-2.1)
        session.add(location)
        await session.flush()

        role = JobRole(location_id=location.id, name="Waiter", department=Department.FOH)
        session.add(role)
        await session.commit()
        return location, role
