"""Request bodies and JSON envelopes for the public HTTP API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from app.schemas.ai import AIResult, Language
from app.schemas.weather import CamelModel, WeatherSnapshot


class ChatRequest(CamelModel):
    message: str = ""
    weather_data: WeatherSnapshot | None = None
    language: Language = "en"


class WeatherChatRequest(CamelModel):
    location: str | None = None
    lat: float | None = None
    lon: float | None = None
    message: str | None = None
    language: Language = "en"


class WeatherChatData(CamelModel):
    weather: WeatherSnapshot
    ai: AIResult


class WeatherEnvelope(BaseModel):
    success: bool = True
    data: WeatherSnapshot


class ChatEnvelope(BaseModel):
    success: bool = True
    data: AIResult


class WeatherChatEnvelope(BaseModel):
    success: bool = True
    data: WeatherChatData


class ErrorEnvelope(BaseModel):
    error: str = Field(..., description="Short error title")
    message: str = Field(..., description="User-facing explanation or remediation")


ServiceState = Literal["configured", "missing API key"]


class ServiceStatus(BaseModel):
    weather: ServiceState
    ai: ServiceState


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str
    services: ServiceStatus
