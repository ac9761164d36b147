"""
Weather provider tests: condition mapping, horizon and fallback behavior
"""
from datetime import date, timedelta
from unittest.mock import patch

import httpx
import pytest

from backoffice.services.weather import (
    GENERAL_CONDITIONS,
    NOT_AVAILABLE,
    OpenMeteoWeatherProvider,
    describe_weather,
    fallback_weather,
    fetch_weather_forecast,
    map_to_general_condition,
)
from backoffice.tests.helpers import FakeWeatherProvider, weather_row

TODAY = date(2026, 10, 14)
LAT, LON = 51.8994, -2.0783


@pytest.mark.parametrize("description, condition", [
    ("Sunny", "Sunny"),
    ("Clear sky", "Sunny"),
    ("Mainly clear", "Sunny"),
    ("Sunny with some cloud", "Sunny"),
    ("Partly cloudy", "Partly cloudy"),
    ("Overcast", "Cloudy"),
    ("CLOUDY", "Cloudy"),
    ("Slight rain showers", "Light rain"),
    ("Moderate drizzle", "Light rain"),
    ("Heavy rain", "Heavy rain"),
    ("Violent rain showers", "Heavy rain"),
    ("Thunderstorm with slight hail", "Thunderstorm"),
    ("Heavy snow fall", "Snow"),
    ("Depositing rime fog", "Foggy"),
    ("Breezy", "Unknown"),
    ("", "Unknown"),
    (None, "Unknown"),
    (NOT_AVAILABLE, "Unknown"),
])
def test_map_to_general_condition(description, condition):
    assert map_to_general_condition(description) == condition


def test_describe_weather_prefers_code_then_precipitation():
    assert describe_weather(61, 0) == "Slight rain"
    assert describe_weather(None, 12.5) == "Heavy rain"
    assert describe_weather(None, 2.0) == "Light rain"
    assert describe_weather(None, 0) == "Partly cloudy"


def test_fallback_weather_is_repeatable():
    day = date(2026, 10, 20)
    assert fallback_weather(day) == fallback_weather(day)
    assert map_to_general_condition(fallback_weather(day).description) in GENERAL_CONDITIONS
    assert fallback_weather(day).description != NOT_AVAILABLE


async def test_live_rows_are_mapped():
    provider = FakeWeatherProvider(rows=[weather_row(TODAY, code=61, temp_max=16, temp_min=9, precipitation=3.24)])
    [forecast] = await fetch_weather_forecast(provider, TODAY, TODAY, TODAY, LAT, LON)

    assert forecast.date == "2026-10-14"
    assert forecast.description == "Slight rain"
    assert forecast.temperature == 12.5
    assert forecast.precipitation == 3.2


async def test_dates_past_horizon_are_not_available():
    start = TODAY + timedelta(days=5)
    end = TODAY + timedelta(days=10)
    provider = FakeWeatherProvider(rows=[weather_row(start + timedelta(days=i)) for i in range(6)])

    forecasts = await fetch_weather_forecast(provider, start, end, TODAY, LAT, LON, horizon_days=7)

    assert [f.description == NOT_AVAILABLE for f in forecasts] == [False, False, False, True, True, True]
    assert forecasts[-1].temperature == 0
    assert forecasts[-1].precipitation == 0
    assert forecasts[-1].wind_speed == 0
    # The provider is only asked for in-horizon dates
    assert provider.calls == [(start, TODAY + timedelta(days=7))]


async def test_range_beyond_horizon_skips_provider():
    provider = FakeWeatherProvider()
    start = TODAY + timedelta(days=14)
    forecasts = await fetch_weather_forecast(provider, start, start + timedelta(days=6), TODAY, LAT, LON)

    assert provider.calls == []
    assert all(f.description == NOT_AVAILABLE for f in forecasts)


async def test_provider_failure_falls_back_without_raising(caplog):
    provider = FakeWeatherProvider(error=httpx.ConnectError("connection refused"))
    end = TODAY + timedelta(days=2)

    forecasts = await fetch_weather_forecast(provider, TODAY, end, TODAY, LAT, LON)

    assert [f.date for f in forecasts] == ["2026-10-14", "2026-10-15", "2026-10-16"]
    assert forecasts == [fallback_weather(TODAY + timedelta(days=i)) for i in range(3)]
    assert "using fallback values" in caplog.text


async def test_dates_missing_from_provider_use_fallback():
    provider = FakeWeatherProvider(rows=[weather_row(TODAY, code=0)])
    tomorrow = TODAY + timedelta(days=1)

    forecasts = await fetch_weather_forecast(provider, TODAY, tomorrow, TODAY, LAT, LON)

    assert forecasts[0].description == "Clear sky"
    assert forecasts[1] == fallback_weather(tomorrow)


def mock_client(handler):
    real_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    return patch("backoffice.services.weather.httpx.AsyncClient", side_effect=factory)


async def test_open_meteo_provider_parses_daily_payload():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={
            "daily": {
                "time": ["2026-10-14", "2026-10-15"],
                "weather_code": [3, 95],
                "temperature_2m_max": [15.0, 13.2],
                "temperature_2m_min": [8.0, 7.4],
                "precipitation_sum": [0.0, 11.3],
                "wind_speed_10m_max": [14.1, 38.0],
            }
        })

    provider = OpenMeteoWeatherProvider(base_url="https://weather.test/v1/forecast", timeout=1)
    with mock_client(handler):
        rows = await provider.fetch_daily(LAT, LON, TODAY, TODAY + timedelta(days=1))

    assert seen["params"]["start_date"] == "2026-10-14"
    assert seen["params"]["end_date"] == "2026-10-15"
    assert "weather_code" in seen["params"]["daily"]
    assert rows[1] == {
        "date": "2026-10-15",
        "temp_max": 13.2,
        "temp_min": 7.4,
        "precipitation_sum": 11.3,
        "wind_speed_max": 38.0,
        "weather_code": 95,
    }


async def test_http_error_from_open_meteo_falls_back():
    provider = OpenMeteoWeatherProvider(base_url="https://weather.test/v1/forecast", timeout=1)

    with mock_client(lambda request: httpx.Response(500, json={"error": True})):
        forecasts = await fetch_weather_forecast(provider, TODAY, TODAY, TODAY, LAT, LON)

    assert forecasts == [fallback_weather(TODAY)]
