from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_weather_client
from app.api.errors import ApiError, weather_not_configured
from app.schemas.api import ErrorEnvelope, WeatherEnvelope
from app.schemas.weather import WeatherSnapshot
from app.services.weather_client import WeatherClient, WeatherLookupError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/weather",
    tags=["weather"],
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)


def lookup_weather(
    client: WeatherClient,
    *,
    location: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
) -> WeatherSnapshot | None:
    """Resolve a snapshot by coordinates (preferred) or name; None when neither is given."""
    try:
        if lat is not None and lon is not None:
            return client.get_weather_by_coordinates(lat, lon)
        if location and location.strip():
            return client.get_current_weather(location)
    except WeatherLookupError as exc:
        logger.warning("Weather lookup failed (%s): %s", exc.code, exc.message)
        raise ApiError(exc.status_code, "Weather fetch failed", exc.message) from exc
    return None


@router.get("", response_model=WeatherEnvelope)
def get_weather(
    location: str | None = Query(None, description="City name, e.g. Tokyo or London,GB"),
    lat: float | None = Query(None, ge=-90, le=90),
    lon: float | None = Query(None, ge=-180, le=180),
    client: WeatherClient = Depends(get_weather_client),
) -> WeatherEnvelope:
    """Current conditions plus a short daily forecast."""
    if not client.is_configured:
        raise weather_not_configured()

    snapshot = lookup_weather(client, location=location, lat=lat, lon=lon)
    if snapshot is None:
        raise ApiError(
            400,
            "Missing parameters",
            "Please provide either location name or coordinates (lat, lon)",
        )
    return WeatherEnvelope(data=snapshot)
