"""Premise and novel data models."""

from dataclasses import dataclass, field, replace
from typing import Optional

from models.chapter import Chapter
from models.enums import Genre, Tone

# Wire name -> attribute name (the provider speaks camelCase)
_PREMISE_FIELDS = {
    "title": "title",
    "genre": "genre",
    "tone": "tone",
    "protagonist": "protagonist",
    "setting": "setting",
    "plotSummary": "plot_summary",
    "targetAudience": "target_audience",
}


@dataclass(frozen=True)
class Premise:
    """The user-authored description of the novel to write."""
    title: str
    genre: Genre
    tone: Tone
    protagonist: str
    setting: str
    plot_summary: str
    target_audience: str

    @classmethod
    def from_dict(cls, data: dict) -> "Premise":
        """Build a Premise from a provider payload.

        Accepts camelCase wire keys or snake_case attribute names.

        Raises:
            ValueError: If a field is missing or blank, or genre/tone are
                outside their vocabularies.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Premise payload must be an object, got {type(data).__name__}")

        values = {}
        for wire_name, attr in _PREMISE_FIELDS.items():
            raw = data.get(wire_name, data.get(attr))
            if not isinstance(raw, str) or not raw.strip():
                raise ValueError(f"Premise field '{wire_name}' is missing or empty")
            values[attr] = raw.strip()

        values["genre"] = Genre.parse(values["genre"])
        values["tone"] = Tone.parse(values["tone"])
        return cls(**values)

    def to_dict(self) -> dict:
        """Return the camelCase wire form."""
        result = {}
        for wire_name, attr in _PREMISE_FIELDS.items():
            value = getattr(self, attr)
            result[wire_name] = value.value if isinstance(value, (Genre, Tone)) else value
        return result


@dataclass(frozen=True)
class Novel:
    """The single unit of session state: premise, outline and reading cursor."""
    premise: Premise
    chapters: tuple[Chapter, ...] = field(default_factory=tuple)
    cursor: int = 0

    def __post_init__(self):
        # Store a tuple even when handed a list
        object.__setattr__(self, "chapters", tuple(self.chapters))
        for position, chapter in enumerate(self.chapters, start=1):
            if chapter.id != position:
                raise ValueError(
                    f"Chapter ids must be contiguous from 1; found {chapter.id} at position {position}"
                )
        if self.chapters and not 0 <= self.cursor < len(self.chapters):
            raise ValueError(f"Cursor {self.cursor} outside {len(self.chapters)} chapters")

    @property
    def current_chapter(self) -> Optional[Chapter]:
        if not self.chapters:
            return None
        return self.chapters[self.cursor]

    def with_chapter(self, index: int, chapter: Chapter) -> "Novel":
        chapters = list(self.chapters)
        chapters[index] = chapter
        return replace(self, chapters=tuple(chapters))

    def with_cursor(self, index: int) -> "Novel":
        return replace(self, cursor=index)
