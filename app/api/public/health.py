from fastapi import APIRouter, Depends

from app.api.deps import get_ai_orchestrator, get_weather_client
from app.schemas.api import HealthResponse, ServiceStatus
from app.services.ai_orchestrator import AIOrchestrator
from app.services.weather_client import WeatherClient


router = APIRouter(prefix="/health", tags=["health"])


def _state(configured: bool) -> str:
    return "configured" if configured else "missing API key"


@router.get("", response_model=HealthResponse)
def health(
    weather: WeatherClient = Depends(get_weather_client),
    orchestrator: AIOrchestrator = Depends(get_ai_orchestrator),
) -> HealthResponse:
    return HealthResponse(
        message="Weather chat API is running",
        services=ServiceStatus(
            weather=_state(weather.is_configured),
            ai=_state(orchestrator.is_configured),
        ),
    )
