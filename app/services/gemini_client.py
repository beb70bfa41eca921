"""Thin wrapper around the Gemini API plus the ordered pool of fallback models."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Protocol, Sequence

import google.generativeai as genai

from app.core.config import Settings


logger = logging.getLogger(__name__)


class GeminiClientError(RuntimeError):
    """Raised for any Gemini failure. The message keeps the provider's text."""


class TextGenerator(Protocol):
    """Anything that turns a prompt into text.

    Implementations must report every provider failure (timeouts included) as
    `GeminiClientError`; the orchestrator treats any other exception as a bug
    and lets it propagate.
    """

    def generate_text(self, prompt: str) -> str:
        ...


class GeminiClient:
    def __init__(self, api_key: str, model_name: str, timeout: float) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required")

        genai.configure(api_key=api_key)
        self._model = genai.GenerativeModel(model_name)
        self._model_name = model_name
        self._timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate_text(self, prompt: str) -> str:
        if not prompt:
            raise ValueError("Prompt must not be empty")

        try:
            response = self._model.generate_content(
                prompt,
                request_options={"timeout": self._timeout},
            )
            return response.text or ""
        except Exception as exc:  # pragma: no cover - network failures
            raise GeminiClientError(str(exc)) from exc


@dataclass(frozen=True, slots=True)
class ModelCandidate:
    name: str
    client: TextGenerator


@dataclass(frozen=True, slots=True)
class ModelPool:
    """Preference-ordered candidates. Earlier entries are always tried first."""

    candidates: tuple[ModelCandidate, ...] = ()

    def __iter__(self) -> Iterator[ModelCandidate]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    @property
    def names(self) -> list[str]:
        return [candidate.name for candidate in self.candidates]

    @classmethod
    def of(cls, candidates: Sequence[ModelCandidate]) -> "ModelPool":
        return cls(candidates=tuple(candidates))

    @classmethod
    def from_settings(cls, config: Settings) -> "ModelPool":
        if not config.gemini_api_key:
            logger.warning("Gemini API key not found. Please set GEMINI_API_KEY in environment variables.")
            return cls()

        candidates = tuple(
            ModelCandidate(
                name=model_name,
                client=GeminiClient(
                    api_key=config.gemini_api_key,
                    model_name=model_name,
                    timeout=config.gemini_timeout_sec,
                ),
            )
            for model_name in config.gemini_models
        )
        logger.info("Initialized Gemini models with fallback: %s", [c.name for c in candidates])
        return cls(candidates=candidates)
