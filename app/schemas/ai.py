from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field

from app.schemas.weather import CamelModel, WeatherSnapshot

Language = Literal["en", "ja"]
SuggestionCategory = Literal["outdoor", "indoor", "clothing", "food", "travel", "other"]

SUGGESTION_CATEGORIES: tuple[str, ...] = ("outdoor", "indoor", "clothing", "food", "travel", "other")


class ActivitySuggestion(CamelModel):
    model_config = ConfigDict(frozen=True)

    category: SuggestionCategory
    title: str
    description: str = ""
    reasoning: str = ""
    icon: str = ""
    priority: int = Field(ge=1, le=5)


class AIResult(CamelModel):
    """Unit returned to callers of the orchestrator. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    suggestions: list[ActivitySuggestion] = Field(default_factory=list)
    explanation: str = ""
    additional_tips: list[str] = Field(default_factory=list)
    conversational_response: str = ""


class GenerationRequest(CamelModel):
    user_query: str
    language: Language = "en"
    weather: WeatherSnapshot | None = None
