"""Turn free-form generated text into an AIResult, degrading to weather rules."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator

from app.schemas.ai import SUGGESTION_CATEGORIES, ActivitySuggestion, AIResult, Language
from app.schemas.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 20
DEFAULT_CONDITION = "clear"
DEFAULT_PRIORITY = 3

PARSE_FALLBACK_EXPLANATION = "Based on the current weather conditions, here are some suggestions for you."
PARSE_FALLBACK_TIPS: tuple[str, ...] = (
    "Check the weather forecast before heading out",
    "Dress appropriately for the temperature",
    "Stay hydrated and safe",
)
PARSE_FALLBACK_REPLY = "Here are some weather-based activity suggestions for you!"

OFFLINE_EXPLANATION = "AI service is currently experiencing high demand. Here are some weather-based suggestions:"
OFFLINE_TIPS: tuple[str, ...] = (
    "Check the weather forecast before heading out",
    "Dress appropriately for the temperature",
    "Stay safe and enjoy your day",
    "Try again in a few minutes for AI-powered suggestions",
)
OFFLINE_REPLIES: dict[str, str] = {
    "en": "AI service is busy right now. Here are some weather-based activity suggestions for you!",
    "ja": "AIサービスが混雑しています。天気に基づいたおすすめをご紹介します。",
}

RAIN_SUGGESTIONS: tuple[ActivitySuggestion, ...] = (
    ActivitySuggestion(
        category="indoor",
        title="Stay Cozy Indoors",
        description="Perfect weather for indoor activities like reading or cooking.",
        reasoning="Rainy weather is ideal for indoor relaxation.",
        icon="🏠",
        priority=4,
    ),
    ActivitySuggestion(
        category="clothing",
        title="Bring an Umbrella",
        description="Don't forget your umbrella and waterproof jacket.",
        reasoning="Essential for staying dry in the rain.",
        icon="☂️",
        priority=5,
    ),
)
WARM_SUGGESTIONS: tuple[ActivitySuggestion, ...] = (
    ActivitySuggestion(
        category="outdoor",
        title="Enjoy the Sunshine",
        description="Great weather for outdoor activities like walking or picnics.",
        reasoning="Warm weather is perfect for being outside.",
        icon="☀️",
        priority=4,
    ),
    ActivitySuggestion(
        category="clothing",
        title="Light Clothing",
        description="Wear light, breathable clothing and stay hydrated.",
        reasoning="Warm weather requires appropriate clothing.",
        icon="👕",
        priority=3,
    ),
)
COLD_SUGGESTIONS: tuple[ActivitySuggestion, ...] = (
    ActivitySuggestion(
        category="clothing",
        title="Bundle Up",
        description="Wear warm layers, coat, and accessories.",
        reasoning="Cold weather requires proper insulation.",
        icon="🧥",
        priority=5,
    ),
    ActivitySuggestion(
        category="food",
        title="Hot Drinks",
        description="Enjoy warm beverages like coffee, tea, or hot chocolate.",
        reasoning="Hot drinks help keep you warm in cold weather.",
        icon="☕",
        priority=4,
    ),
)
MILD_SUGGESTIONS: tuple[ActivitySuggestion, ...] = (
    ActivitySuggestion(
        category="outdoor",
        title="Perfect Weather",
        description="Great conditions for any outdoor activity you enjoy.",
        reasoning="Mild weather is comfortable for most activities.",
        icon="🌤️",
        priority=4,
    ),
)


def extract_json_object(text: str) -> str | None:
    """Return the first balanced top-level ``{...}`` span in `text`, if any.

    Braces inside JSON string literals are ignored, so a reply carrying two
    objects (or prose with a stray brace after the payload) yields only the first.
    """
    return next(_balanced_spans(text), None)


def _balanced_spans(text: str) -> Iterator[str]:
    """Yield outermost balanced ``{...}`` spans left to right in one pass.

    An opening brace that never closes is skipped and the objects nested
    after it are still found.
    """
    closes: dict[int, int] = {}
    open_braces: list[int] = []
    in_string = False
    escaped = False
    for idx, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == "{":
            open_braces.append(idx)
        elif not open_braces:
            # Quotes and closers in prose outside any object are not JSON.
            continue
        elif ch == '"':
            in_string = True
        elif ch == "}":
            closes[open_braces.pop()] = idx

    end = -1
    for start in sorted(closes):
        if start > end:
            end = closes[start]
            yield text[start : end + 1]


def parse_ai_response(
    text: str,
    language: Language = "en",
    weather: WeatherSnapshot | None = None,
) -> AIResult:
    payload = _decode_payload(text or "")
    if payload is None:
        return AIResult(
            suggestions=create_fallback_suggestions(weather),
            explanation=PARSE_FALLBACK_EXPLANATION,
            additional_tips=list(PARSE_FALLBACK_TIPS),
            conversational_response=(text or "").strip() or PARSE_FALLBACK_REPLY,
        )

    raw_suggestions = payload.get("suggestions")
    suggestions = [
        suggestion
        for suggestion in (_coerce_suggestion(entry) for entry in _as_list(raw_suggestions))
        if suggestion is not None
    ]
    tips = [tip for tip in _as_list(payload.get("additionalTips")) if isinstance(tip, str)]
    return AIResult(
        suggestions=suggestions,
        explanation=_as_str(payload.get("explanation")),
        additional_tips=tips,
        conversational_response=_as_str(payload.get("conversationalResponse")),
    )


def create_fallback_suggestions(weather: WeatherSnapshot | None = None) -> list[ActivitySuggestion]:
    """Deterministic suggestions keyed on condition first, then temperature."""
    if weather is None:
        temperature = DEFAULT_TEMPERATURE
        condition = DEFAULT_CONDITION
    else:
        temperature = weather.current.temperature
        condition = (weather.current.condition or DEFAULT_CONDITION).lower()

    if "rain" in condition:
        return list(RAIN_SUGGESTIONS)
    if temperature > 25:
        return list(WARM_SUGGESTIONS)
    if temperature < 10:
        return list(COLD_SUGGESTIONS)
    return list(MILD_SUGGESTIONS)


def offline_fallback_result(language: Language = "en", weather: WeatherSnapshot | None = None) -> AIResult:
    return AIResult(
        suggestions=create_fallback_suggestions(weather),
        explanation=OFFLINE_EXPLANATION,
        additional_tips=list(OFFLINE_TIPS),
        conversational_response=OFFLINE_REPLIES.get(language, OFFLINE_REPLIES["en"]),
    )


def _decode_payload(text: str) -> dict[str, Any] | None:
    found = False
    for span in _balanced_spans(text):
        found = True
        try:
            decoded = json.loads(span)
        except (ValueError, RecursionError) as exc:
            logger.warning("Error parsing AI response: %s", exc)
            continue
        if isinstance(decoded, dict):
            return decoded
    if not found:
        logger.warning("No JSON object found in AI response; using weather-based suggestions")
    return None


def _coerce_suggestion(entry: Any) -> ActivitySuggestion | None:
    if not isinstance(entry, dict):
        return None
    category = entry.get("category")
    if category not in SUGGESTION_CATEGORIES:
        category = "other"
    return ActivitySuggestion(
        category=category,
        title=_as_str(entry.get("title")),
        description=_as_str(entry.get("description")),
        reasoning=_as_str(entry.get("reasoning")),
        icon=_as_str(entry.get("icon")),
        priority=_clamp_priority(entry.get("priority")),
    )


def _clamp_priority(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_PRIORITY
    try:
        priority = int(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_PRIORITY
    return max(1, min(5, priority))


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""
