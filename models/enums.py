"""Enumerations for premises, session state and chapter status tracking."""

from enum import Enum


class _VocabularyEnum(str, Enum):
    """Closed vocabulary whose values are the Arabic labels sent to the provider."""

    @classmethod
    def parse(cls, value: str):
        """Resolve an Arabic label or a member name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValueError(f"{text!r} is not a valid {cls.__name__}")

    @classmethod
    def labels(cls) -> list[str]:
        return [member.value for member in cls]


class Genre(_VocabularyEnum):
    FANTASY = "خيال"
    SCI_FI = "خيال علمي"
    MYSTERY = "غموض"
    ROMANCE = "رومانسي"
    HISTORICAL = "تاريخي"
    DRAMA = "دراما"
    HORROR = "رعب"
    ADVENTURE = "مغامرة"


class Tone(_VocabularyEnum):
    SERIOUS = "جاد"
    HUMOROUS = "فكاهي"
    DARK = "مظلم"
    OPTIMISTIC = "متفائل"
    MYSTERIOUS = "غامض"


class AppState(str, Enum):
    SETUP = "setup"
    GENERATING_OUTLINE = "generating_outline"
    READING = "reading"


class ChapterStatus(str, Enum):
    STUB = "stub"
    GENERATING = "generating"
    GENERATED = "generated"


class AudioState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
