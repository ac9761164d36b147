"""
Weather forecasts for the revenue forecast engine.

Live data comes from Open-Meteo for dates inside the forecast horizon.
Dates past the horizon get the "N/A" sentinel. When the provider is
unreachable, in-horizon dates are filled by a generator seeded from the date
string so the same date always yields the same filler values.
"""
import logging
import random
from datetime import date, timedelta
from typing import Dict, List, Optional, Protocol

import httpx

from backoffice.config import get_settings
from backoffice.schemas.forecast import WeatherForecast
from backoffice.utils.helpers import iter_dates

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

SUNNY = "Sunny"
PARTLY_CLOUDY = "Partly cloudy"
CLOUDY = "Cloudy"
LIGHT_RAIN = "Light rain"
HEAVY_RAIN = "Heavy rain"
THUNDERSTORM = "Thunderstorm"
SNOW = "Snow"
FOGGY = "Foggy"
UNKNOWN = "Unknown"

GENERAL_CONDITIONS = [SUNNY, PARTLY_CLOUDY, CLOUDY, LIGHT_RAIN, HEAVY_RAIN, THUNDERSTORM, SNOW, FOGGY, UNKNOWN]

# First match wins; sunny/clear is checked before any cloud keyword
CONDITION_RULES = [
    (("sunny", "clear"), SUNNY),
    (("thunder", "lightning"), THUNDERSTORM),
    (("snow", "sleet", "blizzard"), SNOW),
    (("heavy rain", "heavy shower", "violent", "torrential"), HEAVY_RAIN),
    (("rain", "drizzle", "shower"), LIGHT_RAIN),
    (("fog", "mist", "haze"), FOGGY),
    (("partly",), PARTLY_CLOUDY),
    (("cloud", "overcast"), CLOUDY),
]

# WMO weather interpretation codes used by Open-Meteo
WMO_DESCRIPTIONS: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

FALLBACK_DESCRIPTIONS = [
    "Sunny", "Partly cloudy", "Cloudy", "Overcast",
    "Light rain", "Rain showers", "Heavy rain", "Foggy",
]


def map_to_general_condition(description: Optional[str]) -> str:
    """Collapse a free-text weather description into one of GENERAL_CONDITIONS"""
    if not description or description == NOT_AVAILABLE:
        return UNKNOWN
    text = description.lower()
    for keywords, condition in CONDITION_RULES:
        if any(keyword in text for keyword in keywords):
            return condition
    return UNKNOWN


def describe_weather(weather_code: Optional[int], precipitation: float) -> str:
    if weather_code is not None and weather_code in WMO_DESCRIPTIONS:
        return WMO_DESCRIPTIONS[weather_code]
    if precipitation > 10:
        return "Heavy rain"
    if precipitation > 0.5:
        return "Light rain"
    return "Partly cloudy"


def not_available(day: date) -> WeatherForecast:
    return WeatherForecast(
        date=day.isoformat(),
        description=NOT_AVAILABLE,
        temperature=0,
        precipitation=0,
        wind_speed=0,
    )


def fallback_weather(day: date) -> WeatherForecast:
    """Repeatable filler weather, seeded from the ISO date string (not for security use)"""
    rng = random.Random(day.isoformat())
    description = rng.choice(FALLBACK_DESCRIPTIONS)
    wet = map_to_general_condition(description) in (LIGHT_RAIN, HEAVY_RAIN)
    return WeatherForecast(
        date=day.isoformat(),
        description=description,
        temperature=round(rng.uniform(6.0, 22.0), 1),
        precipitation=round(rng.uniform(0.5, 12.0), 1) if wet else 0.0,
        wind_speed=round(rng.uniform(3.0, 30.0), 1),
    )


class WeatherProvider(Protocol):
    async def fetch_daily(
        self, latitude: float, longitude: float, start: date, end: date
    ) -> List[dict]:
        """Daily rows: date, temp_max, temp_min, precipitation_sum, wind_speed_max, weather_code"""
        ...


class OpenMeteoWeatherProvider:

    DAILY_FIELDS = "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum,wind_speed_10m_max"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.base_url = base_url or settings.WEATHER_API_URL
        self.timeout = timeout or settings.WEATHER_TIMEOUT_SECONDS

    async def fetch_daily(
        self, latitude: float, longitude: float, start: date, end: date
    ) -> List[dict]:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": self.DAILY_FIELDS,
            "timezone": "auto",
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            daily = response.json()["daily"]

        rows = []
        for i, day in enumerate(daily["time"]):
            rows.append({
                "date": day,
                "temp_max": daily["temperature_2m_max"][i],
                "temp_min": daily["temperature_2m_min"][i],
                "precipitation_sum": daily["precipitation_sum"][i],
                "wind_speed_max": daily["wind_speed_10m_max"][i],
                "weather_code": daily.get("weather_code", [None] * len(daily["time"]))[i],
            })
        return rows


def _from_provider_row(row: dict) -> WeatherForecast:
    temp_max = row.get("temp_max") or 0.0
    temp_min = row.get("temp_min") or 0.0
    precipitation = row.get("precipitation_sum") or 0.0
    return WeatherForecast(
        date=row["date"],
        description=describe_weather(row.get("weather_code"), precipitation),
        temperature=round((temp_max + temp_min) / 2, 1),
        precipitation=round(precipitation, 1),
        wind_speed=round(row.get("wind_speed_max") or 0.0, 1),
    )


async def fetch_weather_forecast(
    provider: WeatherProvider,
    start: date,
    end: date,
    today: date,
    latitude: float,
    longitude: float,
    horizon_days: int = 7,
) -> List[WeatherForecast]:
    """
    One WeatherForecast per date in [start, end].

    Dates more than horizon_days after today are "N/A". Provider failures are
    logged and replaced by fallback_weather; they never reach the caller.
    """
    horizon_end = today + timedelta(days=horizon_days)
    live_end = min(end, horizon_end)

    live: Dict[str, WeatherForecast] = {}
    if start <= live_end:
        try:
            rows = await provider.fetch_daily(latitude, longitude, start, live_end)
            live = {row["date"]: _from_provider_row(row) for row in rows}
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Weather fetch failed for {start} to {live_end}, using fallback values: {e}")

    forecasts = []
    for day in iter_dates(start, end):
        if day > horizon_end:
            forecasts.append(not_available(day))
        else:
            forecasts.append(live.get(day.isoformat()) or fallback_weather(day))
    return forecasts
