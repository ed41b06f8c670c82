"""Models package — session data classes and enums."""

from models.novel import Novel, Premise
from models.chapter import Chapter
from models.enums import (
    Genre,
    Tone,
    AppState,
    ChapterStatus,
    AudioState,
)

__all__ = [
    "Novel",
    "Premise",
    "Chapter",
    "Genre",
    "Tone",
    "AppState",
    "ChapterStatus",
    "AudioState",
]
