"""
Configuration management for the hospitality back-office service
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Hospitality Back Office"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite:///./backoffice.db"

    # Site (single location, GL50 3DN)
    SITE_NAME: str = "The Tavern"
    SITE_CODE: str = "TAV"
    SITE_LATITUDE: float = 51.8994
    SITE_LONGITUDE: float = -2.0783

    # Weather provider (Open-Meteo, no API key required)
    WEATHER_API_URL: str = "https://api.open-meteo.com/v1/forecast"
    WEATHER_TIMEOUT_SECONDS: float = 10.0

    # Forecasting
    FORECAST_HORIZON_DAYS: int = 7       # live weather is only available this far out
    HISTORY_WINDOW_MONTHS: int = 3       # trailing window for baselines / weather impact
    FORECAST_FUTURE_WEEKS: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
