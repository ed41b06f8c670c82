"""Chapter data model."""

from dataclasses import dataclass
from typing import Optional

from models.enums import ChapterStatus


@dataclass(frozen=True)
class Chapter:
    """Represents a single chapter of the outline.

    Instances are immutable; the store swaps in a new instance for every
    patch so a reader never sees a half-applied update.
    """
    id: int
    title: str
    summary: str
    content: Optional[str] = None  # None until generated
    is_generating: bool = False

    @property
    def status(self) -> ChapterStatus:
        if self.is_generating:
            return ChapterStatus.GENERATING
        if self.content:
            return ChapterStatus.GENERATED
        return ChapterStatus.STUB

    @property
    def has_content(self) -> bool:
        return bool(self.content)
