"""Custom exception hierarchy for the writing assistant."""

from typing import Optional


class RawiError(Exception):
    """Base exception for all Rawi errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ---- Provider Errors ----

class LLMError(RawiError):
    """Base exception for generation provider errors (hard failures)."""


class LLMEmptyResponseError(LLMError):
    """Provider returned no usable payload."""

    def __init__(self, operation: str):
        super().__init__(f"No content generated for {operation}", {"operation": operation})
        self.operation = operation


class LLMResponseParseError(LLMError):
    """Failed to parse the provider response into the expected shape."""

    def __init__(self, message: str = "Failed to parse LLM response", raw_response: str = ""):
        details = {"raw_response": raw_response[:200]} if raw_response else {}
        super().__init__(message, details)
        self.raw_response = raw_response


class SpeechSynthesisError(LLMError):
    """Speech provider call failed or returned no audio."""


# ---- Workflow Errors ----

class WorkflowError(RawiError):
    """Base exception for workflow orchestration errors."""


class WorkflowStateError(WorkflowError):
    """Operation is not legal in the current session state."""


class ChapterIndexError(WorkflowError):
    """Chapter index outside the outline."""

    def __init__(self, index: int, count: int):
        super().__init__(
            f"Chapter index {index} out of range",
            {"index": index, "count": count},
        )
        self.index = index
        self.count = count


# ---- Validation Errors ----

class ValidationError(RawiError):
    """Input validation failed."""


class InvalidConfigError(ValidationError):
    """Configuration value is invalid or missing."""


# ---- Audio Errors ----

class AudioPlaybackError(RawiError):
    """The audio output resource could not be acquired."""
