"""Heuristic extraction of a city name from a free-text chat message."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

JAPANESE_CITY_NAMES: dict[str, str] = {
    "東京": "Tokyo",
    "大阪": "Osaka",
    "京都": "Kyoto",
    "横浜": "Yokohama",
    "名古屋": "Nagoya",
    "福岡": "Fukuoka",
    "札幌": "Sapporo",
    "日本": "Tokyo",
    "オランガバ": "Aurangabad",
    "オーランガバード": "Aurangabad",
}

_PLACE = r"([a-zA-Z\s,]+)"

LOCATION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        rf"weather in {_PLACE}",
        rf"weather for {_PLACE}",
        rf"weather at {_PLACE}",
        rf"how.*weather.*in {_PLACE}",
        rf"what.*weather.*in {_PLACE}",
        rf"tell me.*weather.*in {_PLACE}",
        rf"show.*weather.*in {_PLACE}",
        rf"check.*weather.*in {_PLACE}",
        rf"going to {_PLACE}",
        rf"plan.*going to {_PLACE}",
        rf"planning.*to.*go.*to {_PLACE}",
        rf"trip to {_PLACE}",
        rf"travel.*to {_PLACE}",
        rf"visiting {_PLACE}",
        rf"visit {_PLACE}",
        rf"{_PLACE}.*no.*tenki",
        r"([a-zA-Z]+).*weather",
        r"([ァ-ヶー]+).*の.*天気",
        r"([一-龯]+).*の.*天気",
    )
)

FILLER_WORDS = re.compile(
    r"\b(today|tomorrow|now|currently|right now|this morning|tonight|weather|forecast|after|week|next|"
    r"plan|planning|trip|travel|visiting|visit|about|the|a|an|and|or|but|so|tell|me|show|check|how|"
    r"what|is|are|will|be|going|to)\b",
    re.IGNORECASE,
)

KNOWN_CITIES: tuple[str, ...] = (
    # Japan
    "tokyo", "osaka", "kyoto", "yokohama", "nagoya", "fukuoka", "sapporo",
    # International
    "new york", "london", "paris", "berlin", "rome", "madrid", "amsterdam",
    "sydney", "melbourne", "toronto", "vancouver", "singapore", "hong kong",
    "seoul", "beijing", "shanghai", "bangkok",
    # India
    "mumbai", "delhi", "bangalore", "hyderabad", "ahmedabad", "chennai", "kolkata",
    "pune", "jaipur", "surat", "lucknow", "kanpur", "nagpur", "indore", "thane",
    "bhopal", "visakhapatnam", "pimpri", "patna", "vadodara", "ghaziabad", "ludhiana",
    "agra", "nashik", "faridabad", "meerut", "rajkot", "kalyan", "vasai", "varanasi",
    "srinagar", "aurangabad", "dhanbad", "amritsar", "navi mumbai", "allahabad",
    "ranchi", "howrah", "coimbatore", "jabalpur", "gwalior", "vijayawada", "jodhpur",
    "madurai", "raipur", "kota", "guwahati", "chandigarh", "solapur", "hubli",
    "dehradun", "haridwar", "rishikesh", "mussoorie", "nainital", "shimla", "manali",
    "dharamshala", "mcleodganj", "kasauli", "dalhousie", "kullu", "spiti", "leh",
    "ladakh", "jammu", "udaipur", "mount abu", "jaisalmer", "bikaner", "pushkar",
    # United States
    "los angeles", "chicago", "houston", "phoenix", "philadelphia", "san antonio",
    "san diego", "dallas", "san jose", "austin", "jacksonville", "san francisco",
    "columbus", "charlotte", "fort worth", "detroit", "el paso", "memphis",
    "seattle", "denver", "washington", "boston", "nashville", "baltimore",
    "louisville", "portland", "oklahoma city", "milwaukee", "las vegas",
)

_CITY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (city, re.compile(rf"\b{re.escape(city)}\b", re.IGNORECASE)) for city in KNOWN_CITIES
)


def extract_location(text: str) -> str | None:
    """Best-effort guess of the place a message asks about, or None."""
    if not text:
        return None

    for japanese, english in JAPANESE_CITY_NAMES.items():
        if japanese in text:
            logger.debug("Japanese city match: %s -> %s", japanese, english)
            return english

    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if not match or not match.group(1):
            continue
        location = _clean_candidate(match.group(1))
        if 2 < len(location) < 50:
            logger.debug("Location pattern %s matched %r", pattern.pattern, location)
            return _capitalize(location)

    for city, city_pattern in _CITY_PATTERNS:
        if city_pattern.search(text):
            return _capitalize(city)

    normalized = text.lower()
    if "japan" in normalized and " in " not in normalized:
        return "Tokyo"
    return None


def _clean_candidate(raw: str) -> str:
    location = FILLER_WORDS.sub("", raw.strip())
    location = re.sub(r"\s+", " ", location).strip(" ,")
    if location.lower() in KNOWN_CITIES:
        return location
    # "Aurangabad Maharashtra" -> "Aurangabad"
    parts = location.split()
    return parts[0] if parts else ""


def _capitalize(location: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in location.split(" "))
