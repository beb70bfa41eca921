from __future__ import annotations

from app.schemas.ai import GenerationRequest, Language
from app.schemas.weather import ForecastDay, WeatherSnapshot

SYSTEM_PROMPT_SUGGESTIONS = (
    "You are an AI weather assistant that provides helpful activity suggestions "
    "based on current weather conditions."
)

SUGGESTION_JSON_EXAMPLE = """{
  "suggestions": [
    {
      "category": "outdoor",
      "title": "Go for a walk",
      "description": "Take a nice walk in the park",
      "reasoning": "Good weather for outdoor activities",
      "icon": "🚶",
      "priority": 3
    }
  ],
  "explanation": "Weather looks good today",
  "additionalTips": ["Bring an umbrella", "Dress warmly"],
  "conversationalResponse": "%s"
}"""

LANGUAGE_NAMES: dict[str, str] = {"en": "English", "ja": "Japanese"}


def build_suggestion_prompt(request: GenerationRequest) -> str:
    is_japanese = request.language == "ja"
    weather_block = _weather_block(request.weather)
    example = SUGGESTION_JSON_EXAMPLE % ("Japanese response here" if is_japanese else "English response here")
    language_rule = (
        "Respond in Japanese for conversationalResponse" if is_japanese else "Respond in English"
    )
    return f"""
{SYSTEM_PROMPT_SUGGESTIONS}

Current Weather Information:
{weather_block}

User Query: "{request.user_query}"

Please provide activity suggestions in this simple JSON format:
{example}

Guidelines:
- Provide 3-5 relevant suggestions
- category must be one of outdoor, indoor, clothing, food, travel, other
- priority is an integer from 1 (low) to 5 (high)
- Consider the current weather, temperature, and forecast
- Include both outdoor and indoor options when appropriate
- Prioritize safety and comfort
- Be specific and actionable
- {language_rule}
- Consider Japanese culture and preferences for activities
- Include clothing recommendations based on temperature and conditions
- Suggest food/drinks appropriate for the weather
"""


def build_conversational_prompt(
    user_input: str,
    weather: WeatherSnapshot | None = None,
    language: Language = "en",
) -> str:
    weather_line = ""
    if weather is not None:
        weather_line = (
            f"Current weather in {weather.location.name}: "
            f"{weather.current.temperature}°C, {weather.current.condition}"
        )
    return f"""
You are a friendly AI weather assistant. Respond naturally and helpfully to the user's input.

{weather_line}
User input: "{user_input}"

Please respond in {LANGUAGE_NAMES.get(language, "English")} in a conversational, helpful manner.
If the user is asking about weather, provide relevant information and suggestions.
If they're asking about activities, consider the weather conditions.
Keep responses concise but informative.
"""


def _weather_block(weather: WeatherSnapshot | None) -> str:
    if weather is None:
        return "No weather data available."
    current = weather.current
    lines = [
        f"Location: {weather.location.name}, {weather.location.country}",
        f"Temperature: {current.temperature}°C (feels like {current.feels_like}°C)",
        f"Condition: {current.condition} - {current.description}",
        f"Humidity: {_or_unknown(current.humidity, '%')}",
        f"Wind Speed: {_or_unknown(current.wind_speed, ' m/s')}",
        f"Visibility: {_or_unknown(current.visibility, ' km')}",
    ]
    if weather.forecast:
        lines.append("")
        lines.append("Forecast for next few days:")
        lines.extend(_forecast_line(day) for day in weather.forecast)
    return "\n".join(lines)


def _forecast_line(day: ForecastDay) -> str:
    return (
        f"{day.date:%a %b %d %Y}: {day.temperature.min}-{day.temperature.max}°C, {day.condition}"
    )


def _or_unknown(value: float | int | None, unit: str) -> str:
    if value is None:
        return "unknown"
    return f"{value}{unit}"
