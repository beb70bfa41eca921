from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from app.schemas.ai import GenerationRequest
from app.schemas.weather import Coordinates, CurrentConditions, WeatherLocation, WeatherSnapshot
from app.services.ai_orchestrator import CONVERSATION_FALLBACKS, AIOrchestrator
from app.services.gemini_client import GeminiClientError, ModelCandidate, ModelPool
from app.services.response_parser import OFFLINE_EXPLANATION, OFFLINE_REPLIES

OVERLOADED = GeminiClientError("503 The model is overloaded. Please try again later.")
NOT_FOUND = GeminiClientError("404 models/gemini-1.5-pro is not found for API version v1beta")
BAD_KEY = GeminiClientError("400 API key not valid. Please pass a valid API key.")

REPLY = json.dumps(
    {
        "suggestions": [
            {
                "category": "indoor",
                "title": "Visit a museum",
                "description": "Spend the afternoon at the National Museum",
                "reasoning": "Showers expected",
                "icon": "🏛️",
                "priority": 4,
            }
        ],
        "explanation": "Mixed weather today.",
        "additionalTips": ["Pack an umbrella"],
        "conversationalResponse": "Here is what I suggest.",
    }
)


class ScriptedModel:
    """Returns or raises the scripted outcomes in order, repeating the last one."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    def generate_text(self, prompt: str) -> str:
        self.calls += 1
        outcome = self.outcomes[min(self.calls, len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _pool(**models: ScriptedModel) -> ModelPool:
    return ModelPool.of([ModelCandidate(name=name, client=client) for name, client in models.items()])


def _orchestrator(pool: ModelPool, sleeps: list[float]) -> AIOrchestrator:
    return AIOrchestrator(pool, max_retries=2, retry_delay=1.5, sleep=sleeps.append)


def _request(language: str = "en", weather: WeatherSnapshot | None = None) -> GenerationRequest:
    return GenerationRequest(user_query="What should I do today?", language=language, weather=weather)


def _snapshot(temperature: int, condition: str) -> WeatherSnapshot:
    return WeatherSnapshot(
        location=WeatherLocation(name="Osaka", country="JP", coordinates=Coordinates(lat=34.69, lon=135.5)),
        current=CurrentConditions(temperature=temperature, feels_like=temperature, condition=condition),
        timestamp=datetime(2025, 6, 1, tzinfo=UTC),
    )


def test_first_candidate_success_returns_without_waiting() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(REPLY), ScriptedModel(REPLY)

    result = _orchestrator(_pool(A=a, B=b), sleeps).generate_suggestions(_request())

    assert sleeps == []
    assert (a.calls, b.calls) == (1, 0)
    assert [s.title for s in result.suggestions] == ["Visit a museum"]
    assert result.conversational_response == "Here is what I suggest."


def test_not_found_skips_candidate_after_one_attempt() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(NOT_FOUND), ScriptedModel(REPLY)

    result = _orchestrator(_pool(A=a, B=b), sleeps).generate_suggestions(_request())

    assert (a.calls, b.calls) == (1, 1)
    assert sleeps == []
    assert result.explanation == "Mixed weather today."


def test_overloaded_candidate_waits_once_then_is_abandoned() -> None:
    sleeps: list[float] = []
    a = ScriptedModel(OVERLOADED)

    result = _orchestrator(_pool(A=a), sleeps).generate_suggestions(_request())

    assert a.calls == 2
    assert sleeps == [1.5]
    assert result.explanation == OFFLINE_EXPLANATION


def test_overloaded_then_success_on_same_candidate() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(OVERLOADED, REPLY), ScriptedModel(REPLY)

    result = _orchestrator(_pool(A=a, B=b), sleeps).generate_suggestions(_request())

    assert (a.calls, b.calls) == (2, 0)
    assert sleeps == [1.5]
    assert result.explanation == "Mixed weather today."


def test_overloaded_first_candidate_falls_through_to_second() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(OVERLOADED), ScriptedModel(REPLY)

    result = _orchestrator(_pool(A=a, B=b), sleeps).generate_suggestions(_request())

    assert sleeps == [1.5]
    assert (a.calls, b.calls) == (2, 1)
    assert [s.title for s in result.suggestions] == ["Visit a museum"]


def test_other_errors_abandon_candidate_without_backoff() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(BAD_KEY), ScriptedModel(REPLY)

    _orchestrator(_pool(A=a, B=b), sleeps).generate_suggestions(_request())

    assert (a.calls, b.calls) == (1, 1)
    assert sleeps == []


def test_single_not_found_candidate_returns_fallback_immediately() -> None:
    sleeps: list[float] = []
    a = ScriptedModel(NOT_FOUND)

    result = _orchestrator(_pool(A=a), sleeps).generate_suggestions(_request(weather=_snapshot(5, "Rain")))

    assert a.calls == 1
    assert sleeps == []
    assert [s.title for s in result.suggestions] == ["Stay Cozy Indoors", "Bring an Umbrella"]


@pytest.mark.parametrize("language", ["en", "ja"])
def test_exhaustion_yields_localized_offline_result(language: str) -> None:
    sleeps: list[float] = []
    pool = _pool(A=ScriptedModel(OVERLOADED), B=ScriptedModel(NOT_FOUND), C=ScriptedModel(BAD_KEY))

    result = _orchestrator(pool, sleeps).generate_suggestions(_request(language=language))

    assert result.suggestions
    assert result.conversational_response == OFFLINE_REPLIES[language]
    assert sleeps == [1.5]


def test_every_request_restarts_from_the_first_candidate() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(NOT_FOUND), ScriptedModel(REPLY)
    pool = _pool(A=a, B=b)
    orchestrator = _orchestrator(pool, sleeps)

    orchestrator.generate_suggestions(_request())
    orchestrator.generate_suggestions(_request())

    assert (a.calls, b.calls) == (2, 2)
    assert pool.names == ["A", "B"]


def test_unparseable_reply_uses_weather_rules() -> None:
    sleeps: list[float] = []
    a = ScriptedModel("Sorry, I can only answer in prose today.")

    result = _orchestrator(_pool(A=a), sleeps).generate_suggestions(_request(weather=_snapshot(30, "Clear")))

    assert [s.title for s in result.suggestions] == ["Enjoy the Sunshine", "Light Clothing"]
    assert result.conversational_response == "Sorry, I can only answer in prose today."


def test_empty_pool_is_not_configured_and_still_answers() -> None:
    orchestrator = _orchestrator(ModelPool(), [])

    assert orchestrator.is_configured is False
    assert orchestrator.generate_suggestions(_request()).suggestions
    assert orchestrator.generate_conversational_response("hi") == CONVERSATION_FALLBACKS["en"]


def test_conversation_moves_on_after_a_single_failure() -> None:
    sleeps: list[float] = []
    a, b = ScriptedModel(OVERLOADED), ScriptedModel("It is sunny in Osaka!")

    reply = _orchestrator(_pool(A=a, B=b), sleeps).generate_conversational_response(
        "How is the weather?", _snapshot(22, "Clear")
    )

    assert reply == "It is sunny in Osaka!"
    assert (a.calls, b.calls) == (1, 1)
    assert sleeps == []


@pytest.mark.parametrize("language", ["en", "ja"])
def test_conversation_exhaustion_returns_fixed_string(language: str) -> None:
    pool = _pool(A=ScriptedModel(OVERLOADED), B=ScriptedModel(NOT_FOUND))

    reply = _orchestrator(pool, []).generate_conversational_response("hello", language=language)

    assert reply == CONVERSATION_FALLBACKS[language]


def test_max_retries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        AIOrchestrator(ModelPool(), max_retries=0)


def test_deeply_nested_reply_uses_weather_rules() -> None:
    a = ScriptedModel('{"suggestions": ' + "[" * 3000 + "]" * 3000 + "}")

    result = _orchestrator(_pool(A=a), []).generate_suggestions(_request(weather=_snapshot(5, "Clouds")))

    assert [s.title for s in result.suggestions] == ["Bundle Up", "Hot Drinks"]
    assert a.calls == 1


def test_errors_outside_the_client_contract_propagate() -> None:
    a, b = ScriptedModel(TimeoutError("deadline exceeded")), ScriptedModel(REPLY)

    with pytest.raises(TimeoutError):
        _orchestrator(_pool(A=a, B=b), []).generate_suggestions(_request())

    assert b.calls == 0
