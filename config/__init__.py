"""Configuration package — settings, logging, and exceptions."""

from config.exceptions import (
    RawiError,
    LLMError,
    LLMEmptyResponseError,
    LLMResponseParseError,
    SpeechSynthesisError,
    WorkflowError,
    WorkflowStateError,
    ChapterIndexError,
    ValidationError,
    InvalidConfigError,
    AudioPlaybackError,
)
from config.logging_config import setup_logging
from config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "RawiError",
    "LLMError",
    "LLMEmptyResponseError",
    "LLMResponseParseError",
    "SpeechSynthesisError",
    "WorkflowError",
    "WorkflowStateError",
    "ChapterIndexError",
    "ValidationError",
    "InvalidConfigError",
    "AudioPlaybackError",
]
