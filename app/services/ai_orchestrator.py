"""Sequential model fallback with bounded retries for Gemini text generation."""

from __future__ import annotations

import logging
import time
from typing import Callable

from app.core.config import Settings
from app.schemas.ai import AIResult, GenerationRequest, Language
from app.schemas.weather import WeatherSnapshot
from app.services.gemini_client import GeminiClientError, ModelPool
from app.services.prompt_templates import build_conversational_prompt, build_suggestion_prompt
from app.services.provider_errors import ErrorKind, classify
from app.services.response_parser import offline_fallback_result, parse_ai_response

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
RETRY_DELAY_SEC = 1.5

CONVERSATION_FALLBACKS: dict[str, str] = {
    "en": "Sorry, the AI service is currently unavailable. Please try again later.",
    "ja": "すみません、現在AIサービスが利用できません。後でもう一度お試しください。",
}


class AIOrchestrator:
    """Ask each model in the pool, most preferred first, until one answers.

    Structured suggestions get `max_retries` attempts per model with a fixed
    backoff after an overload; conversational replies get a single attempt per
    model. Neither entry point raises on provider failure: exhaustion yields a
    canned result instead.
    """

    def __init__(
        self,
        pool: ModelPool,
        *,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY_SEC,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._pool = pool
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep

    @classmethod
    def from_settings(cls, config: Settings) -> "AIOrchestrator":
        return cls(
            ModelPool.from_settings(config),
            max_retries=config.ai_max_retries,
            retry_delay=config.ai_retry_delay_sec,
        )

    @property
    def pool(self) -> ModelPool:
        return self._pool

    @property
    def is_configured(self) -> bool:
        return len(self._pool) > 0

    def generate_suggestions(self, request: GenerationRequest) -> AIResult:
        prompt = build_suggestion_prompt(request)
        total = len(self._pool)

        for index, candidate in enumerate(self._pool, start=1):
            logger.info("Trying model: %s (%d/%d)", candidate.name, index, total)
            for attempt in range(1, self._max_retries + 1):
                try:
                    text = candidate.client.generate_text(prompt)
                except GeminiClientError as exc:
                    logger.warning("%s attempt %d failed: %s", candidate.name, attempt, exc)
                    kind = classify(str(exc))
                    if kind is ErrorKind.NOT_FOUND:
                        logger.info("Model %s not available, trying next model", candidate.name)
                        break
                    if kind is ErrorKind.OVERLOADED and attempt < self._max_retries:
                        logger.info("Model overloaded, retrying in %.1fs", self._retry_delay)
                        self._sleep(self._retry_delay)
                        continue
                    logger.info("Giving up on %s after attempt %d", candidate.name, attempt)
                    break
                return parse_ai_response(text, request.language, request.weather)

        logger.warning("All models failed, returning weather-based fallback suggestions")
        return offline_fallback_result(request.language, request.weather)

    def generate_conversational_response(
        self,
        user_input: str,
        weather: WeatherSnapshot | None = None,
        language: Language = "en",
    ) -> str:
        prompt = build_conversational_prompt(user_input, weather, language)

        for candidate in self._pool:
            try:
                text = candidate.client.generate_text(prompt)
            except GeminiClientError as exc:
                logger.warning(
                    "%s failed for conversational response (%s): %s",
                    candidate.name,
                    classify(str(exc)).value,
                    exc,
                )
                continue
            logger.info("Conversational response received from %s", candidate.name)
            return text

        logger.warning("All models failed, returning fallback conversational response")
        return CONVERSATION_FALLBACKS.get(language, CONVERSATION_FALLBACKS["en"])
