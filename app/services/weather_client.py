from __future__ import annotations

import logging
import math
from datetime import UTC, datetime, timedelta
from typing import Any, Dict

import requests

from app.core.cache import cached_json, weather_cache_key
from app.core.config import settings
from app.schemas.weather import (
    Coordinates,
    CurrentConditions,
    ForecastDay,
    TemperatureRange,
    WeatherLocation,
    WeatherSnapshot,
)


logger = logging.getLogger(__name__)


class WeatherLookupError(Exception):
    """Raised when the weather provider cannot serve a lookup."""

    def __init__(self, code: str, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


_STATUS_ERRORS: dict[int, tuple[str, str, int]] = {
    401: ("invalid_api_key", "Invalid API key. Please check your OpenWeatherMap API key.", 502),
    404: ("location_not_found", "Location not found. Please try a different city name.", 404),
    429: ("rate_limited", "API rate limit exceeded. Please try again later.", 429),
}
_TIMEOUT_ERROR = ("timeout", "Request timeout. Please check your internet connection.", 504)
_GENERIC_ERROR = ("weather_unavailable", "Unable to fetch weather data. Please try again later.", 502)


class WeatherClient:
    """Wrapper around the OpenWeather current weather and 5 day forecast APIs."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key or settings.openweather_api_key
        self.base_url = (base_url or settings.weather_api_base_url).rstrip("/")
        self.timeout = settings.weather_timeout_sec
        self.session = session or requests.Session()
        if not self.api_key:
            logger.warning(
                "OpenWeatherMap API key not found. Please set OPENWEATHER_API_KEY in environment variables."
            )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def get_current_weather(self, location: str) -> WeatherSnapshot:
        query = {"q": location.strip()}
        key = weather_cache_key(location=location)
        return self._cached_snapshot(key, query)

    def get_weather_by_coordinates(self, lat: float, lon: float) -> WeatherSnapshot:
        query = {"lat": lat, "lon": lon}
        key = weather_cache_key(lat=lat, lon=lon)
        return self._cached_snapshot(key, query)

    def _cached_snapshot(self, key: str, query: Dict[str, Any]) -> WeatherSnapshot:
        if not self.is_configured:
            raise WeatherLookupError(
                "weather_not_configured",
                "Please set OPENWEATHER_API_KEY in environment variables",
                status_code=500,
            )

        def loader() -> dict[str, Any]:
            snapshot = self._load_snapshot(query)
            return snapshot.model_dump(mode="json", by_alias=True)

        payload = cached_json(key, settings.weather_cache_ttl_sec, loader)
        return WeatherSnapshot.model_validate(payload)

    def _load_snapshot(self, query: Dict[str, Any]) -> WeatherSnapshot:
        try:
            current = self._get("weather", query)
        except WeatherLookupError as exc:
            logger.error("Error fetching weather data for %s: %s", query, exc.message)
            raise

        try:
            forecast_payload = self._get("forecast", query)
            forecast = format_forecast(forecast_payload, limit=settings.weather_forecast_days)
        except WeatherLookupError as exc:
            # A broken forecast must not break the current-weather lookup.
            logger.warning("Error fetching forecast data for %s: %s", query, exc.message)
            forecast = []

        return format_weather(current, forecast)

    def _get(self, path: str, query: Dict[str, Any]) -> dict[str, Any]:
        params = {
            **query,
            "appid": self.api_key,
            "units": settings.weather_units,
            "lang": settings.weather_lang,
        }
        try:
            resp = self.session.get(
                f"{self.base_url}/{path}",
                params=params,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.Timeout as exc:
            raise WeatherLookupError(*_TIMEOUT_ERROR) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise WeatherLookupError(*_STATUS_ERRORS.get(status, _GENERIC_ERROR)) from exc
        except requests.RequestException as exc:
            raise WeatherLookupError(*_GENERIC_ERROR) from exc
        except ValueError as exc:
            raise WeatherLookupError(*_GENERIC_ERROR) from exc

        if not isinstance(payload, dict):
            raise WeatherLookupError(*_GENERIC_ERROR)
        return payload


def format_weather(payload: dict[str, Any], forecast: list[ForecastDay]) -> WeatherSnapshot:
    weather_entries = payload.get("weather") or []
    weather_entry = weather_entries[0] if weather_entries else {}
    main_block = payload.get("main") or {}
    wind_block = payload.get("wind") or {}
    coord = payload.get("coord") or {}
    visibility_m = payload.get("visibility")

    return WeatherSnapshot(
        location=WeatherLocation(
            name=payload.get("name") or "",
            country=(payload.get("sys") or {}).get("country") or "",
            coordinates=Coordinates(lat=coord.get("lat", 0.0), lon=coord.get("lon", 0.0)),
        ),
        current=CurrentConditions(
            temperature=round_half_up(main_block.get("temp", 0.0)),
            feels_like=round_half_up(main_block.get("feels_like", main_block.get("temp", 0.0))),
            condition=weather_entry.get("main") or "",
            description=weather_entry.get("description") or "",
            humidity=main_block.get("humidity"),
            wind_speed=wind_block.get("speed"),
            visibility=visibility_m / 1000 if visibility_m is not None else None,
            # The free tier has no UV index.
            uv_index=0,
            icon=weather_entry.get("icon"),
        ),
        forecast=forecast,
        timestamp=datetime.now(UTC),
    )


def format_forecast(payload: dict[str, Any], *, limit: int = 5) -> list[ForecastDay]:
    """Collapse 3-hourly forecast entries into daily min/max, in first-seen order."""
    tz_offset = timedelta(seconds=(payload.get("city") or {}).get("timezone", 0) or 0)
    days: dict[Any, dict[str, Any]] = {}

    for item in payload.get("list") or []:
        ts = item.get("dt")
        temp = (item.get("main") or {}).get("temp")
        if ts is None or temp is None:
            continue
        moment = datetime.fromtimestamp(ts, tz=UTC)
        day_key = (moment + tz_offset).date()
        entry = days.get(day_key)
        if entry is None:
            weather_entries = item.get("weather") or []
            weather_entry = weather_entries[0] if weather_entries else {}
            days[day_key] = {
                "date": moment,
                "temperatures": [temp],
                "condition": weather_entry.get("main") or "",
                "description": weather_entry.get("description") or "",
                "precipitation_chance": (item.get("pop") or 0) * 100,
                "icon": weather_entry.get("icon"),
            }
        else:
            entry["temperatures"].append(temp)

    forecast: list[ForecastDay] = []
    for entry in list(days.values())[:limit]:
        forecast.append(
            ForecastDay(
                date=entry["date"],
                temperature=TemperatureRange(
                    min=round_half_up(min(entry["temperatures"])),
                    max=round_half_up(max(entry["temperatures"])),
                ),
                condition=entry["condition"],
                description=entry["description"],
                precipitation_chance=round_half_up(entry["precipitation_chance"]),
                icon=entry["icon"],
            )
        )
    return forecast


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
