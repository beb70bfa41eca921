from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_ai_orchestrator, get_weather_client
from app.api.errors import ApiError, ai_not_configured
from app.api.weather import lookup_weather
from app.schemas.ai import AIResult, GenerationRequest
from app.schemas.api import (
    ChatEnvelope,
    ChatRequest,
    ErrorEnvelope,
    WeatherChatData,
    WeatherChatEnvelope,
    WeatherChatRequest,
)
from app.services.ai_orchestrator import AIOrchestrator
from app.services.location_extractor import extract_location
from app.services.weather_client import WeatherClient

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["chat"],
    responses={400: {"model": ErrorEnvelope}, 500: {"model": ErrorEnvelope}},
)

DEFAULT_QUERY = "What should I do today?"


@router.post("/chat", response_model=ChatEnvelope)
def chat(
    payload: ChatRequest,
    orchestrator: AIOrchestrator = Depends(get_ai_orchestrator),
) -> ChatEnvelope:
    """Activity suggestions when weather data is supplied, otherwise a plain reply."""
    message = payload.message.strip()
    if not message:
        raise ApiError(400, "Missing message", "Please provide a message in the request body")
    if not orchestrator.is_configured:
        raise ai_not_configured()

    if payload.weather_data is not None:
        result = orchestrator.generate_suggestions(
            GenerationRequest(
                user_query=message,
                language=payload.language,
                weather=payload.weather_data,
            )
        )
    else:
        reply = orchestrator.generate_conversational_response(message, None, payload.language)
        result = AIResult(conversational_response=reply)
    return ChatEnvelope(data=result)


@router.post("/weather-chat", response_model=WeatherChatEnvelope)
def weather_chat(
    payload: WeatherChatRequest,
    client: WeatherClient = Depends(get_weather_client),
    orchestrator: AIOrchestrator = Depends(get_ai_orchestrator),
) -> WeatherChatEnvelope:
    """Weather lookup and suggestions in one round trip."""
    if not client.is_configured or not orchestrator.is_configured:
        raise ApiError(
            500,
            "Services not configured",
            "Please set both OPENWEATHER_API_KEY and GEMINI_API_KEY in environment variables",
        )

    message = (payload.message or "").strip()
    location = payload.location
    if (payload.lat is None or payload.lon is None) and not (location and location.strip()):
        location = extract_location(message)
        if location:
            logger.info("Using location %s extracted from message", location)

    weather = lookup_weather(client, location=location, lat=payload.lat, lon=payload.lon)
    if weather is None:
        raise ApiError(400, "Missing location", "Please provide either location name or coordinates")

    ai = orchestrator.generate_suggestions(
        GenerationRequest(
            user_query=message or DEFAULT_QUERY,
            language=payload.language,
            weather=weather,
        )
    )
    return WeatherChatEnvelope(data=WeatherChatData(weather=weather, ai=ai))
