"""Weather snapshot shapes shared with the front end (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coordinates(CamelModel):
    lat: float
    lon: float


class WeatherLocation(CamelModel):
    name: str
    country: str = ""
    coordinates: Coordinates


class CurrentConditions(CamelModel):
    temperature: int
    feels_like: int
    condition: str
    description: str = ""
    humidity: int | None = None
    wind_speed: float | None = None
    visibility: float | None = Field(default=None, description="Visibility in km")
    uv_index: float = 0
    icon: str | None = None


class TemperatureRange(CamelModel):
    min: int
    max: int


class ForecastDay(CamelModel):
    date: datetime
    temperature: TemperatureRange
    condition: str
    description: str = ""
    precipitation_chance: int = 0
    icon: str | None = None


class WeatherSnapshot(CamelModel):
    location: WeatherLocation
    current: CurrentConditions
    forecast: list[ForecastDay] = Field(default_factory=list)
    timestamp: datetime
