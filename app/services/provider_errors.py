"""Classification of text-generation failures by their message text.

The provider gives this layer no structured error taxonomy, so the kind is
read off substrings of the exception message. Update the marker table to
track provider wording; the orchestration loop does not change.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    OVERLOADED = "overloaded"
    OTHER = "other"


# Checked in order; the first kind with a matching marker wins.
ERROR_MARKERS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.NOT_FOUND, ("404", "not found")),
    (ErrorKind.OVERLOADED, ("503", "overloaded")),
)


def classify(message: str | None) -> ErrorKind:
    text = (message or "").lower()
    for kind, markers in ERROR_MARKERS:
        if any(marker in text for marker in markers):
            return kind
    return ErrorKind.OTHER
