from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import-not-found]


DEFAULT_GEMINI_MODELS: list[str] = [
    "gemini-2.0-flash-exp",
    "gemini-2.5-flash",
    "gemini-1.5-flash-001",
    "gemini-1.5-flash",
    "gemini-1.5-pro-002",
    "gemini-1.5-pro-001",
    "gemini-1.5-pro",
]


class Settings(BaseSettings):
    app_env: str = "local"
    app_name: str = "weather-chat"
    port: int = 3001

    # Redis / CORS
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] | str = "*"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str] | str:
        if isinstance(v, str):
            if v == "*":
                return "*"
            if "," in v:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
            return [v.strip()] if v.strip() else "*"
        if isinstance(v, list):
            return v
        return "*"

    # Gemini text generation, tried in order
    gemini_api_key: str | None = None
    gemini_models: list[str] | str = DEFAULT_GEMINI_MODELS
    gemini_timeout_sec: float = 30.0
    ai_max_retries: int = 2
    ai_retry_delay_sec: float = 1.5

    @field_validator("gemini_models", mode="before")
    @classmethod
    def parse_gemini_models(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            names = [name.strip() for name in v.split(",") if name.strip()]
            return names or list(DEFAULT_GEMINI_MODELS)
        if isinstance(v, (list, tuple)):
            return [str(name).strip() for name in v if str(name).strip()]
        return list(DEFAULT_GEMINI_MODELS)

    # OpenWeatherMap
    openweather_api_key: str | None = None
    weather_api_base_url: str = "https://api.openweathermap.org/data/2.5"
    weather_units: str = "metric"
    weather_lang: str = "en"
    weather_timeout_sec: float = 10.0
    weather_forecast_days: int = 5
    weather_cache_enabled: bool = True
    weather_cache_ttl_sec: int = 60 * 10

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


settings = Settings()
