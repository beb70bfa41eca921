from __future__ import annotations

from app.core.config import settings
from app.services.ai_orchestrator import AIOrchestrator
from app.services.weather_client import WeatherClient

_weather_client: WeatherClient | None = None
_orchestrator: AIOrchestrator | None = None


def get_weather_client() -> WeatherClient:
    """Get or create the process-wide OpenWeather client."""
    global _weather_client
    if _weather_client is None:
        _weather_client = WeatherClient()
    return _weather_client


def get_ai_orchestrator() -> AIOrchestrator:
    """Get or create the orchestrator; its model pool is fixed once built."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AIOrchestrator.from_settings(settings)
    return _orchestrator
